"""
LCD Transport Unit Tests
========================

Tests for the timed two-nibble transfer: data line order, Enable pulse
count and width, and best-effort handling of pin write failures.
"""

import pytest

from gpio_lcd.lcd.transport import MIN_PULSE_WIDTH_US, LcdTransport
from gpio_lcd.pins import DEFAULT_PINS, PinAssignment


E = DEFAULT_PINS.e
RS = DEFAULT_PINS.rs


@pytest.fixture
def transport(owned_gpio, clock):
    return LcdTransport(owned_gpio, DEFAULT_PINS, clock)


# =============================================================================
# Enable Pulse Tests
# =============================================================================

class TestEnablePulses:
    """Test the Enable line waveform."""

    def test_two_pulses_per_byte(self, transport, owned_gpio):
        """send_byte raises and lowers E exactly twice."""
        transport.send_byte(0x33)
        levels = [event.level for event in owned_gpio.events_for(E)[1:]]
        assert levels == [1, 0, 1, 0]

    def test_pulse_width_and_settle(self, transport, clock):
        """Each pulse is held and followed by one pulse width of delay."""
        transport.send_byte(0x01)
        assert clock.delays_us == [MIN_PULSE_WIDTH_US] * 4

    def test_pulse_duration_on_the_wire(self, transport, owned_gpio):
        """E stays high for the full pulse width."""
        transport.send_byte(0x0F)
        events = owned_gpio.events_for(E)[1:]
        rise, fall = events[0], events[1]
        assert fall.time_ns - rise.time_ns == MIN_PULSE_WIDTH_US * 1000

    def test_custom_pulse_width(self, owned_gpio, clock):
        """A longer pulse width is used for both hold and settle."""
        transport = LcdTransport(owned_gpio, DEFAULT_PINS, clock, pulse_width_us=120)
        transport.send_byte(0x02)
        assert clock.delays_us == [120] * 4

    def test_short_pulse_rejected(self, owned_gpio, clock):
        """Pulse widths below the minimum are refused."""
        with pytest.raises(ValueError):
            LcdTransport(owned_gpio, DEFAULT_PINS, clock, pulse_width_us=MIN_PULSE_WIDTH_US - 1)

    def test_no_timing_violations(self, transport, owned_gpio):
        """The panel sees no short pulses or early rising edges."""
        for value in (0x33, 0x32, 0x20, 0x51):
            transport.send_byte(value)
        assert owned_gpio.panel.timing_violations == []


# =============================================================================
# Data Line Tests
# =============================================================================

class TestDataLines:
    """Test the nibble presented on DB7..DB4 at each latch."""

    def test_nibbles_latched_high_first(self, transport, owned_gpio):
        """The panel latches the high nibble, then the low nibble."""
        transport.send_byte(0xA5)
        latched = [latch.nibble for latch in owned_gpio.panel.latches]
        assert latched == [0xA, 0x5]

    def test_rs_not_touched(self, transport, owned_gpio):
        """send_byte leaves RS alone."""
        transport.send_byte(0x51)
        assert len(owned_gpio.events_for(RS)) == 1  # set_output at acquisition

    def test_register_select(self, transport, owned_gpio):
        """set_register_select drives RS."""
        assert transport.set_register_select(1)
        assert owned_gpio.peek(RS) == 1
        transport.set_register_select(0)
        assert owned_gpio.peek(RS) == 0

    def test_custom_pin_assignment(self, gpio, clock):
        """Transfers follow the configured wiring."""
        pins = PinAssignment(rs=5, rw=6, e=13, db4=19, db5=26, db6=20, db7=21)
        for signal, pin in pins.items():
            gpio.acquire(pin, signal.value)
            gpio.set_output(pin, 0)
        transport = LcdTransport(gpio, pins, clock)
        transport.send_byte(0x80)
        db7_levels = [event.level for event in gpio.events_for(21)]
        assert 1 in db7_levels
        assert gpio.events_for(E) == []


# =============================================================================
# Error Handling Tests
# =============================================================================

class TestWriteFailures:
    """Test best-effort behaviour on pin write failures."""

    def test_failure_reported_not_raised(self, owned_gpio, clock):
        """A failing data line makes send_byte return False."""
        owned_gpio.fail_write.add(DEFAULT_PINS.db5)
        transport = LcdTransport(owned_gpio, DEFAULT_PINS, clock)
        assert transport.send_byte(0x33) is False
        assert transport.transfer_errors == 2

    def test_sequence_continues_after_failure(self, owned_gpio, clock):
        """Both Enable pulses still happen when a data write fails."""
        owned_gpio.fail_write.add(DEFAULT_PINS.db4)
        transport = LcdTransport(owned_gpio, DEFAULT_PINS, clock)
        transport.send_byte(0x11)
        levels = [event.level for event in owned_gpio.events_for(E)[1:]]
        assert levels == [1, 0, 1, 0]

    def test_success_returns_true(self, transport):
        """A clean transfer returns True and counts the byte."""
        assert transport.send_byte(0x06) is True
        assert transport.transfer_errors == 0
        assert transport.bytes_sent == 1

    def test_unacquired_pins_fail_writes(self, gpio, clock):
        """Writing to pins that were never acquired is a counted failure."""
        transport = LcdTransport(gpio, DEFAULT_PINS, clock)
        assert transport.send_byte(0x01) is False
        assert transport.transfer_errors > 0
        assert gpio.events == []
