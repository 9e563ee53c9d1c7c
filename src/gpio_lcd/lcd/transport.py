"""
LCD Transport
=============

The timed two-nibble transfer that latches one byte into the display.

Transfer Protocol
-----------------
For each nibble, high nibble first:

1. Drive DB7, DB6, DB5, DB4 to the nibble bits
2. Raise E
3. Hold for the pulse width (50 us by default)
4. Lower E (the display latches on this falling edge)
5. Hold for the pulse width again before the next step

So every byte costs exactly two Enable pulses. RS and RW are not touched
here; the caller sets RS for instruction/data mode before sending, and RW
stays at its acquire-time level (0, write) for the life of the driver.

Error Handling
--------------
The display cannot report anything back, so a failed level write is
best-effort: the transport logs it, counts it and keeps clocking the rest
of the sequence. ``send_byte`` returns False when any write in the byte
failed. Only PinWriteError is treated this way; anything else propagates.
"""

import logging
from typing import Final

from gpio_lcd.errors import PinWriteError
from gpio_lcd.hal.controller import PinController
from gpio_lcd.lcd.commands import COMMAND_NAMES
from gpio_lcd.lcd.encoder import Nibble, encode
from gpio_lcd.pins import DATA_LINES, PinAssignment, Signal
from gpio_lcd.timing import Clock

logger = logging.getLogger(__name__)

# Minimum Enable pulse width and post-pulse settle time
MIN_PULSE_WIDTH_US: Final[int] = 50


class LcdTransport:
    """
    Byte-level access to the display over the 4-bit bus.

    Args:
        controller: PinController holding the seven LCD pins
        pins: Physical pin assignment
        clock: Delay source
        pulse_width_us: Enable pulse width and settle time

    Attributes:
        transfer_errors: Count of failed level writes since creation
        bytes_sent: Count of ``send_byte`` calls
    """

    def __init__(
        self,
        controller: PinController,
        pins: PinAssignment,
        clock: Clock,
        pulse_width_us: int = MIN_PULSE_WIDTH_US,
    ):
        if pulse_width_us < MIN_PULSE_WIDTH_US:
            raise ValueError(
                f"Pulse width {pulse_width_us} us is below the {MIN_PULSE_WIDTH_US} us minimum"
            )
        self.controller = controller
        self.pins = pins
        self.clock = clock
        self.pulse_width_us = pulse_width_us

        self._data_pins = tuple(pins.pin(line) for line in DATA_LINES)
        self._enable_pin = pins.pin(Signal.E)
        self._rs_pin = pins.pin(Signal.RS)

        self.transfer_errors = 0
        self.bytes_sent = 0

    def send_byte(self, value: int) -> bool:
        """
        Send one byte as two nibbles.

        Args:
            value: Instruction or data byte (0..255)

        Returns:
            True if every pin write succeeded.
        """
        high, low = encode(value)
        logger.debug(
            "send 0x%02X%s", value,
            f" ({COMMAND_NAMES[value]})" if value in COMMAND_NAMES else "",
        )
        ok = self._send_nibble(high)
        ok = self._send_nibble(low) and ok
        self.bytes_sent += 1
        return ok

    def set_register_select(self, level: int) -> bool:
        """Drive RS: 0 selects the instruction register, 1 the data register."""
        return self._write(self._rs_pin, level)

    def _send_nibble(self, nibble: Nibble) -> bool:
        ok = True
        for pin, level in zip(self._data_pins, nibble):
            ok = self._write(pin, level) and ok
        ok = self._write(self._enable_pin, 1) and ok
        self.clock.delay_us(self.pulse_width_us)
        ok = self._write(self._enable_pin, 0) and ok
        self.clock.delay_us(self.pulse_width_us)
        return ok

    def _write(self, pin: int, level: int) -> bool:
        try:
            self.controller.set_level(pin, level)
        except PinWriteError as e:
            self.transfer_errors += 1
            logger.warning("LCD transfer error on GPIO %d: %s", pin, e)
            return False
        return True
