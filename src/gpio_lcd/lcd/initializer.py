"""
LCD Power-On Initialization
===========================

Replays the fixed bring-up sequence the HD44780 needs before it accepts
arbitrary instructions, with the controller starting in its power-on
8-bit interface mode.

Sequence
--------
1. Wait 15 ms after power-up
2. RESET (0x00), then wait 35 ms
3. STARTUP1 (0x33) - two 8-bit function sets
4. STARTUP2 (0x32) - 8-bit function set, then 4-bit function set
5. FUNCTION_SET (0x20) - 4-bit bus, from here on bytes go as nibble pairs
6. DISPLAY_OFF (0x08)
7. CLEAR (0x01)
8. ENTRY (0x06)
9. DISPLAY_ON (0x0F)
10. HOME (0x02)
11. Self-test (optional): RS high, wait 35 ms, write "Q", wait 35 ms, RS low

The self-test write is not part of hardware bring-up; it only shows that
the panel is alive, and can be turned off through DriverConfig.

The caller must hold the lifecycle lock and own all seven pins.
"""

import logging
from typing import Final

from gpio_lcd.lcd import commands
from gpio_lcd.lcd.transport import LcdTransport

logger = logging.getLogger(__name__)

POWER_ON_DELAY_MS: Final[int] = 15
RESET_SETTLE_MS: Final[int] = 35
SELF_TEST_SETTLE_MS: Final[int] = 35


class LcdInitializer:
    """
    Runs the bring-up sequence over an LcdTransport.

    Args:
        transport: Transport bound to acquired pins
        self_test: Write ``self_test_char`` after initialization
        self_test_char: Data byte for the self-test write
    """

    def __init__(
        self,
        transport: LcdTransport,
        self_test: bool = True,
        self_test_char: int = commands.SELF_TEST_CHAR,
    ):
        self.transport = transport
        self.self_test = self_test
        self.self_test_char = commands.check_byte(self_test_char)

    def run(self) -> int:
        """
        Initialize the display.

        Returns:
            Number of bytes whose transfer reported pin write failures
            (0 when everything went through).
        """
        transport = self.transport
        clock = transport.clock
        failed = 0

        logger.info("Initializing LCD (self-test %s)", "on" if self.self_test else "off")

        clock.delay_ms(POWER_ON_DELAY_MS)
        if not transport.send_byte(commands.RESET):
            failed += 1
        clock.delay_ms(RESET_SETTLE_MS)

        for command in commands.STARTUP_SEQUENCE:
            if not transport.send_byte(command):
                failed += 1

        if self.self_test:
            transport.set_register_select(1)
            clock.delay_ms(SELF_TEST_SETTLE_MS)
            if not transport.send_byte(self.self_test_char):
                failed += 1
            clock.delay_ms(SELF_TEST_SETTLE_MS)
            transport.set_register_select(0)

        if failed:
            logger.warning("LCD initialization finished with %d failed transfer(s)", failed)
        else:
            logger.debug("LCD initialization complete")
        return failed
