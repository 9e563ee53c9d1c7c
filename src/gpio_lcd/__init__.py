"""
GPIO LCD - HD44780 Character Display Driver over GPIO
=====================================================

This package drives an HD44780-compatible character LCD wired to seven
GPIO pins of a Raspberry Pi class board, using the controller's 4-bit
interface mode.

Wiring (default)
----------------
    RS  -> GPIO 4       DB4 -> GPIO 22
    RW  -> GPIO 17      DB5 -> GPIO 23
    E   -> GPIO 18      DB6 -> GPIO 24
                        DB7 -> GPIO 25

Main Components
---------------
- **hal**: PinController interface, lgpio backend and in-memory simulator
- **lcd**: nibble encoding, timed transfers, power-on initialization and
    an HD44780 model for the simulator
- **driver**: device registration, the lifecycle state machine, the
    device node and the module load/unload hooks
- **cli**: the ``gpiolcd`` command

Quick Start
-----------
Bring the display up on real hardware:
    >>> from gpio_lcd import LcdLifecycle
    >>> from gpio_lcd.hal import create_controller
    >>> with LcdLifecycle(create_controller()) as lcd:
    ...     handle = lcd.open()

Or try it without hardware:
    $ gpiolcd --simulate selftest --keep

Version History
---------------
1.0.0 - Initial release with lifecycle, simulator and CLI
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from gpio_lcd.config import DriverConfig, ReleasePolicy
from gpio_lcd.driver import (
    DeviceNode,
    DeviceOperation,
    InMemoryDeviceRegistry,
    LcdLifecycle,
    LifecycleState,
    module_exit,
    module_init,
)
from gpio_lcd.errors import (
    GpioLcdError,
    InvalidArgumentError,
    LifecycleError,
    PinAcquisitionError,
    PinError,
    PinWriteError,
    RegistrationError,
)
from gpio_lcd.lcd import LcdInitializer, LcdTransport, decode, encode
from gpio_lcd.pins import DEFAULT_PINS, PinAssignment, Signal

__all__ = [
    "__version__",
    # Configuration
    "DriverConfig",
    "ReleasePolicy",
    "PinAssignment",
    "Signal",
    "DEFAULT_PINS",
    # Driver
    "LcdLifecycle",
    "LifecycleState",
    "DeviceNode",
    "DeviceOperation",
    "InMemoryDeviceRegistry",
    "module_init",
    "module_exit",
    # Protocol
    "encode",
    "decode",
    "LcdTransport",
    "LcdInitializer",
    # Errors
    "GpioLcdError",
    "RegistrationError",
    "PinError",
    "PinAcquisitionError",
    "PinWriteError",
    "LifecycleError",
    "InvalidArgumentError",
]
