"""
Pin Assignment
==============

Logical signal names and their mapping to physical GPIO numbers.

The display is wired for 4-bit bus mode, so only the upper four data lines
are connected:

    Signal   GPIO   Purpose
    ------   ----   -------------------------------------------
    RS          4   Register select (0 = instruction, 1 = data)
    RW         17   Read/write (held low: write mode only)
    E          18   Enable (falling edge latches a nibble)
    DB4        22   Data bit 4 / nibble bit 0
    DB5        23   Data bit 5 / nibble bit 1
    DB6        24   Data bit 6 / nibble bit 2
    DB7        25   Data bit 7 / nibble bit 3

The wiring is a hardware contract. A different map can be supplied through
DriverConfig, but it must describe the actual wiring of the board.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Final, Iterator, Mapping, Tuple


class Signal(Enum):
    """Logical LCD control and data lines."""
    RS = "RS"
    RW = "RW"
    E = "E"
    DB4 = "DB4"
    DB5 = "DB5"
    DB6 = "DB6"
    DB7 = "DB7"


# Order in which pins are acquired, configured and released
ACQUIRE_ORDER: Final[Tuple[Signal, ...]] = (
    Signal.RS,
    Signal.RW,
    Signal.E,
    Signal.DB4,
    Signal.DB5,
    Signal.DB6,
    Signal.DB7,
)

# Data lines in the order nibble bits are presented (highest bit first)
DATA_LINES: Final[Tuple[Signal, ...]] = (
    Signal.DB7,
    Signal.DB6,
    Signal.DB5,
    Signal.DB4,
)


@dataclass(frozen=True)
class PinAssignment:
    """
    Immutable mapping from logical signal to physical GPIO number.

    Attributes:
        rs: Register-select pin
        rw: Read/write pin
        e: Enable pin
        db4: Data bit 4 pin
        db5: Data bit 5 pin
        db6: Data bit 6 pin
        db7: Data bit 7 pin

    Raises:
        ValueError: If a pin number is negative or used twice.
    """

    rs: int = 4
    rw: int = 17
    e: int = 18
    db4: int = 22
    db5: int = 23
    db6: int = 24
    db7: int = 25

    def __post_init__(self) -> None:
        numbers = [self.pin(signal) for signal in ACQUIRE_ORDER]
        for signal, number in zip(ACQUIRE_ORDER, numbers):
            if number < 0:
                raise ValueError(f"Invalid GPIO number for {signal.value}: {number}")
        if len(set(numbers)) != len(numbers):
            raise ValueError(f"Duplicate GPIO numbers in pin assignment: {numbers}")

    def pin(self, signal: Signal) -> int:
        """Return the physical pin wired to ``signal``."""
        return getattr(self, signal.value.lower())

    def items(self) -> Iterator[Tuple[Signal, int]]:
        """Yield (signal, pin) pairs in acquire order."""
        for signal in ACQUIRE_ORDER:
            yield signal, self.pin(signal)

    def as_dict(self) -> Dict[str, int]:
        """Mapping of signal name to pin number, in acquire order."""
        return {signal.value: pin for signal, pin in self.items()}

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, int]) -> "PinAssignment":
        """
        Build an assignment from signal names, filling gaps with defaults.

        Names are case-insensitive; "ENABLE" is accepted as an alias for "E".

        Example:
            >>> PinAssignment.from_mapping({"rs": 5, "Enable": 6}).as_dict()
            {'RS': 5, 'RW': 17, 'E': 6, 'DB4': 22, 'DB5': 23, 'DB6': 24, 'DB7': 25}
        """
        fields = {}
        for name, number in mapping.items():
            key = name.strip().upper()
            if key == "ENABLE":
                key = "E"
            try:
                signal = Signal(key)
            except ValueError:
                raise ValueError(f"Unknown LCD signal name: {name!r}") from None
            fields[signal.value.lower()] = int(number)
        return cls(**fields)


DEFAULT_PINS: Final[PinAssignment] = PinAssignment()
