"""
GPIO Hardware Abstraction
=========================

PinController interface and its backends.

- **controller**: the abstract PinController
- **simulated**: in-memory backend with an HD44780 model
- **lgpio_backend**: Linux GPIO character device backend (imported on
  demand, since it needs the lgpio library)
"""

from gpio_lcd.hal.controller import PinController, check_level
from gpio_lcd.hal.simulated import PinEvent, SimulatedPinController


def create_controller(simulate: bool = False, chip: int = 0) -> PinController:
    """
    Create the PinController for the current environment.

    Args:
        simulate: Use the in-memory backend instead of real GPIO
        chip: GPIO chip number for the lgpio backend

    Returns:
        A ready-to-use PinController.
    """
    if simulate:
        return SimulatedPinController()

    from gpio_lcd.hal.lgpio_backend import LgpioPinController
    return LgpioPinController(chip=chip)


__all__ = [
    "PinController",
    "PinEvent",
    "SimulatedPinController",
    "check_level",
    "create_controller",
]
