"""
Simulated GPIO Backend
======================

An in-memory PinController for tests, demos and development machines
without GPIO hardware.

Features
--------
- Ownership tracking that enforces the PinController contract: a pin must
  be acquired before it is configured or driven, and double acquisition
  fails like it does on a real GPIO chip
- Fault injection: make acquisition of chosen pins fail (``fail_acquire``),
  make writes to chosen pins fail (``fail_write``), or mark pins as held by
  another consumer (``claim_externally``)
- A level log of every write, timestamped with the shared Clock
- An optional ``SimulatedPanel`` wired to the LCD pins, which receives
  Enable edges and decodes what a real HD44780 would latch

Example:
    >>> from gpio_lcd.timing import VirtualClock
    >>> from gpio_lcd.pins import DEFAULT_PINS
    >>> clock = VirtualClock()
    >>> gpio = SimulatedPinController(clock=clock)
    >>> panel = gpio.attach_panel(DEFAULT_PINS)
    >>> gpio.acquire(4, "RS")
    >>> gpio.is_acquired(4)
    True
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set

from gpio_lcd.errors import PinAcquisitionError, PinError, PinWriteError
from gpio_lcd.hal.controller import PinController, check_level
from gpio_lcd.lcd.panel import SimulatedPanel
from gpio_lcd.pins import DATA_LINES, PinAssignment, Signal
from gpio_lcd.timing import Clock, VirtualClock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PinEvent:
    """A single level change observed on a simulated pin."""
    time_ns: int
    pin: int
    level: int


class SimulatedPinController(PinController):
    """
    PinController backed by plain Python state.

    Args:
        clock: Clock used to timestamp events (a VirtualClock by default)
        fail_acquire: Pins whose acquisition always fails
        fail_write: Pins whose level writes always fail
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        fail_acquire: Iterable[int] = (),
        fail_write: Iterable[int] = (),
    ):
        self.clock = clock if clock is not None else VirtualClock()
        self.fail_acquire: Set[int] = set(fail_acquire)
        self.fail_write: Set[int] = set(fail_write)

        self._labels: Dict[int, str] = {}
        self._outputs: Set[int] = set()
        self._levels: Dict[int, int] = {}
        self._external: Set[int] = set()

        self.events: List[PinEvent] = []
        self.acquire_log: List[int] = []
        self.release_log: List[int] = []

        self._panel: Optional[SimulatedPanel] = None
        self._panel_pins: Optional[PinAssignment] = None

    # =========================================================================
    # Panel Wiring
    # =========================================================================

    def attach_panel(
        self,
        pins: PinAssignment,
        panel: Optional[SimulatedPanel] = None,
    ) -> SimulatedPanel:
        """Wire an HD44780 model to the given pins and return it."""
        self._panel = panel if panel is not None else SimulatedPanel()
        self._panel_pins = pins
        return self._panel

    @property
    def panel(self) -> Optional[SimulatedPanel]:
        return self._panel

    def _notify_panel(self, pin: int, level: int) -> None:
        if self._panel is None or self._panel_pins is None:
            return
        pins = self._panel_pins
        if pin != pins.e:
            return
        nibble = 0
        for line in DATA_LINES:
            nibble = (nibble << 1) | self.peek(pins.pin(line))
        self._panel.enable_edge(level, self.clock.now_ns(), self.peek(pins.pin(Signal.RS)), nibble)

    # =========================================================================
    # Fault Injection
    # =========================================================================

    def claim_externally(self, pin: int) -> None:
        """Mark ``pin`` as held by some other consumer."""
        self._external.add(pin)

    def unclaim_externally(self, pin: int) -> None:
        self._external.discard(pin)

    # =========================================================================
    # PinController Implementation
    # =========================================================================

    def acquire(self, pin: int, label: str) -> None:
        if pin in self.fail_acquire:
            raise PinAcquisitionError(pin, label=label)
        if pin in self._external:
            raise PinAcquisitionError(pin, f"GPIO {pin} is busy (held by another consumer)", label)
        if pin in self._labels:
            raise PinAcquisitionError(
                pin, f"GPIO {pin} already acquired as {self._labels[pin]}", label
            )
        self._labels[pin] = label
        self.acquire_log.append(pin)
        logger.debug("Simulated GPIO %d acquired as %s", pin, label)

    def set_output(self, pin: int, level: int = 0) -> None:
        level = check_level(level)
        if pin not in self._labels:
            raise PinError(pin, f"GPIO {pin} configured before acquisition")
        self._outputs.add(pin)
        self._drive(pin, level)

    def set_level(self, pin: int, level: int) -> None:
        level = check_level(level)
        if pin not in self._labels or pin not in self._outputs:
            raise PinWriteError(pin, f"GPIO {pin} written while not an acquired output")
        if pin in self.fail_write:
            raise PinWriteError(pin, label=self._labels.get(pin))
        self._drive(pin, level)

    def get_level(self, pin: int) -> int:
        if pin not in self._labels:
            raise PinError(pin, f"GPIO {pin} read while not acquired")
        return self._levels.get(pin, 0)

    def release(self, pin: int) -> None:
        if pin not in self._labels:
            return
        del self._labels[pin]
        self._outputs.discard(pin)
        self.release_log.append(pin)
        logger.debug("Simulated GPIO %d released", pin)

    def is_acquired(self, pin: int) -> bool:
        return pin in self._labels

    def label_of(self, pin: int) -> Optional[str]:
        return self._labels.get(pin)

    # =========================================================================
    # Inspection
    # =========================================================================

    def _drive(self, pin: int, level: int) -> None:
        previous = self._levels.get(pin)
        self._levels[pin] = level
        self.events.append(PinEvent(self.clock.now_ns(), pin, level))
        if previous != level:
            self._notify_panel(pin, level)

    def peek(self, pin: int) -> int:
        """Last level driven on ``pin``, whether or not it is still held."""
        return self._levels.get(pin, 0)

    @property
    def acquired_pins(self) -> Set[int]:
        return set(self._labels)

    def events_for(self, pin: int) -> List[PinEvent]:
        return [event for event in self.events if event.pin == pin]
