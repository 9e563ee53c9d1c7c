"""
Nibble encoding for the 4-bit LCD bus.

A byte goes out as two nibbles, high nibble first. Each nibble is a tuple
of pin levels in DB7, DB6, DB5, DB4 order, so the highest-numbered data
line carries the highest bit of the nibble.
"""

from typing import NamedTuple, Tuple

from gpio_lcd.lcd.commands import check_byte


class Nibble(NamedTuple):
    """Levels for DB7..DB4."""
    db7: int
    db6: int
    db5: int
    db4: int

    @property
    def value(self) -> int:
        return (self.db7 << 3) | (self.db6 << 2) | (self.db5 << 1) | self.db4

    @classmethod
    def from_value(cls, value: int) -> "Nibble":
        return cls((value >> 3) & 1, (value >> 2) & 1, (value >> 1) & 1, value & 1)


def encode(value: int) -> Tuple[Nibble, Nibble]:
    """
    Split a byte into (high, low) nibbles.

    Example:
        >>> encode(0x20)
        (Nibble(db7=0, db6=0, db5=1, db4=0), Nibble(db7=0, db6=0, db5=0, db4=0))
    """
    check_byte(value)
    return Nibble.from_value(value >> 4), Nibble.from_value(value & 0x0F)


def decode(high: Nibble, low: Nibble) -> int:
    """Inverse of ``encode``."""
    return (high.value << 4) | low.value
