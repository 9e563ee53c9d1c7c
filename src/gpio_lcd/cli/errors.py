"""
Unified CLI Error Handling
==========================

Provides consistent error handling and exit codes for the gpiolcd tool.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    DRIVER_ERROR = 1     # Registration, pin or lifecycle failure
    INVALID_ARGS = 2     # Invalid arguments or configuration
    INTERNAL_ERROR = 3   # Unexpected internal error


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Unified exception handler for the CLI.

    Formats the error message appropriately, optionally prints traceback
    in verbose mode, and exits with the correct exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        error_type: Optional prefix for the error message (e.g., "Driver")

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from gpio_lcd.errors import GpioLcdError

    if isinstance(error, GpioLcdError):
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.DRIVER_ERROR)

    elif isinstance(error, (click.BadParameter, ValueError)):
        # Invalid options or environment configuration
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, ImportError):
        # Real GPIO requested without the lgpio library
        click.echo(f"Error: {error} (install gpio-lcd[rpi] or use --simulate)", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
