"""
lgpio Backend
=============

PinController for the Linux GPIO character device, using the lgpio
library (``pip install lgpio``). This is the backend for a Raspberry Pi
running a current kernel, where the old sysfs GPIO interface is gone.

Chip Numbers
------------
- Raspberry Pi 1-4: GPIO header on gpiochip0
- Raspberry Pi 5: GPIO header on gpiochip4 (gpiochip0 on newer kernels)

Claims made through lgpio are held by this process until freed or until
the chip handle is closed, so another process (or a kernel driver) asking
for the same line gets a "busy" error, which is exactly the exclusive
ownership the driver relies on.
"""

import logging
from typing import Dict, Optional

import lgpio

from gpio_lcd.errors import PinAcquisitionError, PinError, PinWriteError
from gpio_lcd.hal.controller import PinController, check_level

logger = logging.getLogger(__name__)


def _error_text(result) -> str:
    """Human-readable text for an lgpio status code or exception."""
    if isinstance(result, int):
        return lgpio.error_text(result)
    return str(result)


class LgpioPinController(PinController):
    """
    PinController on top of an lgpio chip handle.

    The chip is opened lazily on the first acquisition and closed by
    ``close()``, which also frees any lines still claimed.

    Args:
        chip: GPIO chip number (``/dev/gpiochipN``)
    """

    def __init__(self, chip: int = 0):
        self.chip = chip
        self._handle: Optional[int] = None
        self._labels: Dict[int, str] = {}

    def _open_chip(self) -> int:
        if self._handle is not None:
            return self._handle
        try:
            handle = lgpio.gpiochip_open(self.chip)
        except lgpio.error as e:
            raise PinAcquisitionError(-1, f"Cannot open gpiochip{self.chip}: {e}") from e
        if handle < 0:
            raise PinAcquisitionError(
                -1, f"Cannot open gpiochip{self.chip}: {_error_text(handle)}"
            )
        logger.debug("Opened gpiochip%d (handle %d)", self.chip, handle)
        self._handle = handle
        return handle

    def acquire(self, pin: int, label: str) -> None:
        if pin in self._labels:
            raise PinAcquisitionError(
                pin, f"GPIO {pin} already acquired as {self._labels[pin]}", label
            )
        handle = self._open_chip()
        try:
            # Claim as input first; set_output switches direction
            result = lgpio.gpio_claim_input(handle, pin)
        except lgpio.error as e:
            raise PinAcquisitionError(pin, f"GPIO request failure: {e}", label) from e
        if result < 0:
            raise PinAcquisitionError(
                pin, f"GPIO request failure: {_error_text(result)}", label
            )
        self._labels[pin] = label
        logger.debug("GPIO %d claimed as %s", pin, label)

    def set_output(self, pin: int, level: int = 0) -> None:
        level = check_level(level)
        handle = self._require(pin)
        try:
            result = lgpio.gpio_claim_output(handle, pin, level)
        except lgpio.error as e:
            raise PinError(pin, f"Cannot set GPIO {pin} as output: {e}", self._labels[pin]) from e
        if result < 0:
            raise PinError(
                pin, f"Cannot set GPIO {pin} as output: {_error_text(result)}", self._labels[pin]
            )

    def set_level(self, pin: int, level: int) -> None:
        level = check_level(level)
        if pin not in self._labels or self._handle is None:
            raise PinWriteError(pin, f"GPIO {pin} written while not acquired")
        try:
            result = lgpio.gpio_write(self._handle, pin, level)
        except lgpio.error as e:
            raise PinWriteError(pin, f"GPIO write failure: {e}", self._labels[pin]) from e
        if result < 0:
            raise PinWriteError(
                pin, f"GPIO write failure: {_error_text(result)}", self._labels[pin]
            )

    def get_level(self, pin: int) -> int:
        handle = self._require(pin)
        try:
            result = lgpio.gpio_read(handle, pin)
        except lgpio.error as e:
            raise PinError(pin, f"GPIO read failure: {e}", self._labels[pin]) from e
        if result < 0:
            raise PinError(pin, f"GPIO read failure: {_error_text(result)}", self._labels[pin])
        return result

    def release(self, pin: int) -> None:
        if pin not in self._labels or self._handle is None:
            return
        label = self._labels.pop(pin)
        try:
            lgpio.gpio_free(self._handle, pin)
        except lgpio.error as e:
            # The line is gone from our bookkeeping either way
            logger.warning("Error freeing GPIO %d (%s): %s", pin, label, e)
        else:
            logger.debug("GPIO %d freed", pin)

    def is_acquired(self, pin: int) -> bool:
        return pin in self._labels

    def label_of(self, pin: int) -> Optional[str]:
        return self._labels.get(pin)

    def close(self) -> None:
        """Free every claimed line and close the chip handle."""
        for pin in list(self._labels):
            self.release(pin)
        if self._handle is None:
            return
        try:
            lgpio.gpiochip_close(self._handle)
        except lgpio.error as e:
            logger.warning("Error closing gpiochip%d: %s", self.chip, e)
        else:
            logger.debug("Closed gpiochip%d", self.chip)
        self._handle = None

    def _require(self, pin: int) -> int:
        if pin not in self._labels or self._handle is None:
            raise PinError(pin, f"GPIO {pin} used while not acquired")
        return self._handle
