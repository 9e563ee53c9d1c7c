"""
Protocol Delay Primitives
=========================

The HD44780 latches data on the falling edge of Enable and needs fixed
settle times after power-up and after each command. Undershooting any of
these makes the controller miss or corrupt a latch, so every delay in the
driver goes through a Clock object with microsecond granularity.

Two clocks are provided:

- **BusyWaitClock**: real elapsed time. Microsecond delays spin on
  ``time.perf_counter_ns`` because ``time.sleep`` cannot promise anything
  near 50 us on a general-purpose kernel. Millisecond delays sleep for the
  bulk of the interval and spin for the remainder.
- **VirtualClock**: no real waiting. It advances an internal nanosecond
  counter and records each requested delay, which lets tests and the
  simulated panel check pulse widths without slowing the test suite.

Delays are blocking: correctness depends on real time passing
between pin toggles, so nothing here is asynchronous.
"""

import time
from abc import ABC, abstractmethod
from typing import List


class Clock(ABC):
    """Source of blocking delays and a monotonic timestamp."""

    @abstractmethod
    def now_ns(self) -> int:
        """Monotonic timestamp in nanoseconds."""
        pass

    @abstractmethod
    def delay_us(self, microseconds: int) -> None:
        """Block for at least ``microseconds``."""
        pass

    def delay_ms(self, milliseconds: int) -> None:
        """Block for at least ``milliseconds``."""
        self.delay_us(milliseconds * 1000)


class BusyWaitClock(Clock):
    """
    Wall-clock delays for driving real hardware.

    Args:
        spin_threshold_us: Delays at or below this length are spun
            entirely; longer ones sleep first and spin the tail.
    """

    def __init__(self, spin_threshold_us: int = 2000):
        self.spin_threshold_us = spin_threshold_us

    def now_ns(self) -> int:
        return time.perf_counter_ns()

    def delay_us(self, microseconds: int) -> None:
        if microseconds <= 0:
            return
        deadline = time.perf_counter_ns() + microseconds * 1000
        if microseconds > self.spin_threshold_us:
            # Leave the last threshold's worth for the spin loop
            time.sleep((microseconds - self.spin_threshold_us) / 1_000_000)
        while time.perf_counter_ns() < deadline:
            pass


class VirtualClock(Clock):
    """
    Simulated time for tests and the simulated backend.

    Example:
        >>> clock = VirtualClock()
        >>> clock.delay_us(50)
        >>> clock.delay_ms(15)
        >>> clock.delays_us
        [50, 15000]
        >>> clock.now_ns()
        15050000
    """

    def __init__(self) -> None:
        self._now_ns = 0
        self.delays_us: List[int] = []

    def now_ns(self) -> int:
        return self._now_ns

    def delay_us(self, microseconds: int) -> None:
        self.delays_us.append(microseconds)
        if microseconds > 0:
            self._now_ns += microseconds * 1000

    @property
    def elapsed_us(self) -> int:
        """Total simulated time in microseconds."""
        return self._now_ns // 1000

    def reset(self) -> None:
        """Forget recorded delays (the timestamp keeps running)."""
        self.delays_us.clear()
