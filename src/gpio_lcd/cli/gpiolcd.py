"""
gpiolcd - LCD Driver Command-Line Interface
===========================================

This module implements the command-line interface for the GPIO LCD
driver. Each command loads the driver, does its work and unloads it
again, so the pins are always free when the tool exits.

Usage Examples
--------------
Show the pin assignment:
    $ gpiolcd pins

Initialize the display and write the self-test character:
    $ gpiolcd selftest --hold 5

Leave the self-test character on the display:
    $ gpiolcd selftest --keep

Initialize and clear the display:
    $ gpiolcd clear

Try everything without hardware:
    $ gpiolcd --simulate selftest --keep

Configuration
-------------
Pins, pulse width and release policy come from the GPIO_LCD_* environment
variables (see ``gpio_lcd.config``). ``--chip`` overrides GPIO_LCD_CHIP.

Exit Codes
----------
0 - Success
1 - Driver error (registration, pin acquisition, lifecycle)
2 - Invalid arguments or configuration error
3 - Internal error
"""

import dataclasses
import logging
import time
from typing import Optional

import click

from gpio_lcd import __version__
from gpio_lcd.cli.errors import handle_cli_exception
from gpio_lcd.config import DriverConfig
from gpio_lcd.driver import LcdLifecycle
from gpio_lcd.hal import PinController, SimulatedPinController, create_controller
from gpio_lcd.lcd.panel import SimulatedPanel
from gpio_lcd.timing import Clock, VirtualClock

# Configure logging
logger = logging.getLogger(__name__)


# =============================================================================
# CLI Context and Utilities
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Stores common options like the backend, chip number and verbosity.
    """

    def __init__(self) -> None:
        self.simulate: bool = False
        self.chip: Optional[int] = None
        self.verbose: bool = False

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.INFO
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )

    def load_config(self, **overrides) -> DriverConfig:
        """Driver configuration from the environment plus CLI overrides."""
        config = DriverConfig.from_env()
        if self.chip is not None:
            overrides["chip"] = self.chip
        return dataclasses.replace(config, **overrides)

    def create_driver(self, config: DriverConfig) -> LcdLifecycle:
        """Build a driver on the selected backend."""
        clock: Optional[Clock] = None
        controller: PinController
        if self.simulate:
            clock = VirtualClock()
            simulator = SimulatedPinController(clock=clock)
            simulator.attach_panel(
                config.pins,
                SimulatedPanel(config.num_lines, config.pulse_width_us),
            )
            controller = simulator
        else:
            controller = create_controller(chip=config.chip)
        return LcdLifecycle(controller, config=config, clock=clock)


pass_context = click.make_pass_decorator(Context, ensure=True)


def echo_panel(driver: LcdLifecycle) -> None:
    """Print the simulated display contents, if there is a simulated display."""
    controller = driver.controller
    if not isinstance(controller, SimulatedPinController) or controller.panel is None:
        return
    panel = controller.panel
    border = "+" + "-" * panel.num_columns + "+"
    click.echo(border)
    for row in panel.get_text_grid():
        click.echo("|" + row.ljust(panel.num_columns) + "|")
    click.echo(border)
    for violation in panel.timing_violations:
        click.echo(
            f"Timing violation: {violation.kind} {violation.measured_ns} ns "
            f"(need {violation.required_ns} ns)",
            err=True,
        )


def shutdown(driver: LcdLifecycle, clear: bool = True) -> None:
    """Stop the driver and close its pin controller."""
    try:
        driver.stop(clear=clear)
    finally:
        driver.controller.close()


def start_driver(ctx: Context, self_test: bool) -> LcdLifecycle:
    """Build and start a driver, exiting with an error if it will not load."""
    try:
        driver = ctx.create_driver(ctx.load_config(self_test=self_test))
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, error_type="Driver")

    try:
        driver.start()
    except Exception as e:
        driver.controller.close()
        handle_cli_exception(e, verbose=ctx.verbose, error_type="Driver")
    return driver


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "--simulate",
    is_flag=True,
    help="Use the in-memory GPIO simulator and print the display",
)
@click.option(
    "--chip",
    type=click.IntRange(min=0),
    default=None,
    help="GPIO chip number (default: GPIO_LCD_CHIP or 0)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.version_option(version=__version__, prog_name="gpiolcd")
@pass_context
def main(ctx: Context, simulate: bool, chip: Optional[int], verbose: bool) -> None:
    """
    Drive an HD44780 character LCD wired to seven GPIO pins.

    \b
    Commands:
      pins      Show the pin assignment
      selftest  Initialize the display and write the test character
      clear     Initialize and clear the display

    \b
    Examples:
      gpiolcd pins
      gpiolcd selftest --hold 5
      gpiolcd --simulate selftest --keep
    """
    ctx.simulate = simulate
    ctx.chip = chip
    ctx.verbose = verbose
    ctx.setup_logging()


# =============================================================================
# Pins Command
# =============================================================================

@main.command()
@pass_context
def pins(ctx: Context) -> None:
    """
    Show the pin assignment in acquisition order.

    Example:
        gpiolcd pins
    """
    try:
        config = ctx.load_config()
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose)

    click.echo("Signal  GPIO")
    for signal, pin in config.pins.items():
        click.echo(f"{signal.value:<6}  {pin:>4}")


# =============================================================================
# Selftest Command
# =============================================================================

@main.command()
@click.option(
    "--hold",
    type=click.FloatRange(min=0),
    default=0.0,
    help="Seconds to leave the driver loaded before unloading (default: 0)",
)
@click.option(
    "--keep",
    is_flag=True,
    help="Do not clear the display when unloading",
)
@pass_context
def selftest(ctx: Context, hold: float, keep: bool) -> None:
    """
    Initialize the display and write the self-test character.

    A "Q" in the top-left corner shows the wiring and timing are right.

    \b
    Examples:
      gpiolcd selftest
      gpiolcd selftest --hold 5
      gpiolcd selftest --keep
    """
    driver = start_driver(ctx, self_test=True)

    try:
        failed = driver.transport.transfer_errors
        if failed:
            click.echo(f"Self-test finished with {failed} pin write error(s)", err=True)
        else:
            click.echo("Self-test character written")
        echo_panel(driver)
        if hold:
            time.sleep(hold)
    finally:
        shutdown(driver, clear=not keep)


# =============================================================================
# Clear Command
# =============================================================================

@main.command()
@pass_context
def clear(ctx: Context) -> None:
    """
    Initialize the display and leave it cleared.

    Example:
        gpiolcd clear
    """
    driver = start_driver(ctx, self_test=False)
    shutdown(driver)
    click.echo("Display cleared")
    echo_panel(driver)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
