"""
LCD Command Bytes
=================

The fixed set of bytes the driver ever sends. Values are plain ints; whether
a byte is an instruction or character data depends only on the RS level
when it is sent.

    Name           Value  Meaning
    ------------   -----  ----------------------------------------------
    RESET          0x00   No-op pair of nibbles, flushes a half-sent byte
    STARTUP1       0x33   Two 8-bit function sets (wake-up)
    STARTUP2       0x32   8-bit function set, then switch to 4-bit bus
    FUNCTION_SET   0x20   4-bit bus, 1 line, 5x8 font
    DISPLAY_OFF    0x08   Display, cursor and blink off
    CLEAR          0x01   Clear DDRAM, address counter to 0
    ENTRY          0x06   Increment address, no display shift
    DISPLAY_ON     0x0F   Display, cursor and blink on
    HOME           0x02   Address counter to 0
    SELF_TEST_CHAR 0x51   ASCII "Q", written as data after initialization
"""

from typing import Final, Tuple

RESET: Final[int] = 0x00
STARTUP1: Final[int] = 0x33
STARTUP2: Final[int] = 0x32
FUNCTION_SET: Final[int] = 0x20
DISPLAY_OFF: Final[int] = 0x08
CLEAR: Final[int] = 0x01
ENTRY: Final[int] = 0x06
DISPLAY_ON: Final[int] = 0x0F
HOME: Final[int] = 0x02

SELF_TEST_CHAR: Final[int] = 0x51

# Instructions sent after the reset byte, in order
STARTUP_SEQUENCE: Final[Tuple[int, ...]] = (
    STARTUP1,
    STARTUP2,
    FUNCTION_SET,
    DISPLAY_OFF,
    CLEAR,
    ENTRY,
    DISPLAY_ON,
    HOME,
)

COMMAND_NAMES: Final[dict[int, str]] = {
    RESET: "reset",
    STARTUP1: "startup1",
    STARTUP2: "startup2",
    FUNCTION_SET: "functionset",
    DISPLAY_OFF: "displayoff",
    CLEAR: "clear",
    ENTRY: "entry",
    DISPLAY_ON: "displayon",
    HOME: "home",
}


def check_byte(value: int) -> int:
    """Validate an 8-bit command or data value."""
    if not isinstance(value, int) or not 0 <= value <= 0xFF:
        raise ValueError(f"LCD byte must be in 0..255, got {value!r}")
    return value
