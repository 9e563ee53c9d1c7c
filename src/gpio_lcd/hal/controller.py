"""
PinController Interface
=======================

The driver never talks to GPIO hardware directly. Everything goes through
a PinController, which claims a physical line, configures it as an output
and sets or reads its level.

Implementations:

- ``gpio_lcd.hal.lgpio_backend.LgpioPinController`` - Linux GPIO character
  device via lgpio (Raspberry Pi and similar boards)
- ``gpio_lcd.hal.simulated.SimulatedPinController`` - in-memory pins with
  fault injection and an attached HD44780 model

Contract
--------
- ``acquire`` must succeed before a pin is configured or driven.
- A pin is either free or acquired; acquiring an already-acquired pin
  fails with PinAcquisitionError.
- ``release`` of a pin that is not acquired is a no-op.
- Failures are raised as PinError subclasses, never returned as codes.
"""

from abc import ABC, abstractmethod
from typing import Optional


class PinController(ABC):
    """Abstract access to individually claimable digital output lines."""

    @abstractmethod
    def acquire(self, pin: int, label: str) -> None:
        """
        Claim exclusive use of a physical pin.

        Args:
            pin: Physical GPIO number
            label: Consumer label shown by the platform (e.g. "RS")

        Raises:
            PinAcquisitionError: If the pin is unavailable.
        """
        pass

    @abstractmethod
    def set_output(self, pin: int, level: int = 0) -> None:
        """
        Configure an acquired pin as output and drive its initial level.

        Raises:
            PinError: If the pin is not acquired or cannot be configured.
        """
        pass

    @abstractmethod
    def set_level(self, pin: int, level: int) -> None:
        """
        Drive an acquired output pin to ``level`` (0 or 1).

        Raises:
            PinWriteError: If the write fails.
        """
        pass

    @abstractmethod
    def get_level(self, pin: int) -> int:
        """Read back the logical level of an acquired pin."""
        pass

    @abstractmethod
    def release(self, pin: int) -> None:
        """Give up a pin. Releasing a free pin does nothing."""
        pass

    @abstractmethod
    def is_acquired(self, pin: int) -> bool:
        """True if this controller currently holds ``pin``."""
        pass

    def label_of(self, pin: int) -> Optional[str]:
        """Consumer label of an acquired pin, if the backend tracks it."""
        return None

    def close(self) -> None:
        """Release backend resources (chip handles). Default does nothing."""
        pass


def check_level(level: int) -> int:
    """Validate a logical level and return it as 0 or 1."""
    if level not in (0, 1, False, True):
        raise ValueError(f"GPIO level must be 0 or 1, got {level!r}")
    return int(level)
