"""
GPIO Backend Tests
==================

Tests for the PinController implementations:
- SimulatedPinController: ownership contract and fault injection
- LgpioPinController: lgpio calls and error mapping (lgpio mocked)
- create_controller: backend selection
"""

import sys
import types
from unittest.mock import MagicMock, patch

import pytest

from gpio_lcd.errors import PinAcquisitionError, PinError, PinWriteError
from gpio_lcd.hal import SimulatedPinController, check_level, create_controller


# =============================================================================
# Simulated Backend Tests
# =============================================================================

class TestSimulatedController:
    """Test the in-memory backend."""

    @pytest.fixture
    def sim(self, clock):
        return SimulatedPinController(clock=clock)

    def test_acquire_and_release(self, sim):
        """A pin is held between acquire and release."""
        sim.acquire(4, "RS")
        assert sim.is_acquired(4)
        assert sim.label_of(4) == "RS"
        sim.release(4)
        assert not sim.is_acquired(4)

    def test_double_acquire(self, sim):
        """Acquiring a held pin fails."""
        sim.acquire(4, "RS")
        with pytest.raises(PinAcquisitionError):
            sim.acquire(4, "RS")

    def test_release_free_pin(self, sim):
        """Releasing a free pin is a no-op."""
        sim.release(4)
        assert sim.release_log == []

    def test_set_output_requires_acquire(self, sim):
        with pytest.raises(PinError):
            sim.set_output(4, 0)

    def test_set_level_requires_output(self, sim):
        """Writes need an acquired pin configured as output."""
        sim.acquire(4, "RS")
        with pytest.raises(PinWriteError):
            sim.set_level(4, 1)
        sim.set_output(4)
        sim.set_level(4, 1)
        assert sim.get_level(4) == 1

    def test_get_level_requires_acquire(self, sim):
        with pytest.raises(PinError):
            sim.get_level(4)

    def test_events_timestamped(self, sim, clock):
        """Writes are logged with the clock time."""
        sim.acquire(18, "E")
        sim.set_output(18, 0)
        clock.delay_us(50)
        sim.set_level(18, 1)
        assert [(e.time_ns, e.level) for e in sim.events_for(18)] == [(0, 0), (50_000, 1)]

    def test_fail_acquire(self, clock):
        """fail_acquire pins cannot be acquired."""
        sim = SimulatedPinController(clock=clock, fail_acquire=[22])
        with pytest.raises(PinAcquisitionError) as exc_info:
            sim.acquire(22, "DB4")
        assert exc_info.value.pin == 22
        assert "GPIO request failure: pin 22" in str(exc_info.value)

    def test_fail_write(self, clock):
        """fail_write pins raise PinWriteError on writes."""
        sim = SimulatedPinController(clock=clock, fail_write=[23])
        sim.acquire(23, "DB5")
        sim.set_output(23, 0)
        with pytest.raises(PinWriteError):
            sim.set_level(23, 1)

    def test_external_claim(self, sim):
        """Externally claimed pins are busy until unclaimed."""
        sim.claim_externally(17)
        with pytest.raises(PinAcquisitionError):
            sim.acquire(17, "RW")
        sim.unclaim_externally(17)
        sim.acquire(17, "RW")

    def test_check_level(self):
        """Levels must be 0 or 1."""
        assert check_level(True) == 1
        with pytest.raises(ValueError):
            check_level(2)


# =============================================================================
# lgpio Backend Tests
# =============================================================================

class LgpioError(Exception):
    pass


@pytest.fixture
def lgpio_mock():
    """A stand-in lgpio module with succeeding calls."""
    module = types.ModuleType("lgpio")
    module.error = LgpioError
    module.gpiochip_open = MagicMock(return_value=3)
    module.gpiochip_close = MagicMock(return_value=0)
    module.gpio_claim_input = MagicMock(return_value=0)
    module.gpio_claim_output = MagicMock(return_value=0)
    module.gpio_write = MagicMock(return_value=0)
    module.gpio_read = MagicMock(return_value=1)
    module.gpio_free = MagicMock(return_value=0)
    module.error_text = MagicMock(return_value="GPIO busy")
    with patch.dict(sys.modules, {"lgpio": module}):
        sys.modules.pop("gpio_lcd.hal.lgpio_backend", None)
        yield module
    sys.modules.pop("gpio_lcd.hal.lgpio_backend", None)


@pytest.fixture
def lgpio_controller(lgpio_mock):
    from gpio_lcd.hal.lgpio_backend import LgpioPinController
    return LgpioPinController(chip=0)


class TestLgpioController:
    """Test the lgpio backend against a mocked lgpio module."""

    def test_chip_opened_lazily(self, lgpio_controller, lgpio_mock):
        """The chip is opened on first acquisition only."""
        lgpio_mock.gpiochip_open.assert_not_called()
        lgpio_controller.acquire(4, "RS")
        lgpio_controller.acquire(17, "RW")
        lgpio_mock.gpiochip_open.assert_called_once_with(0)

    def test_acquire_output_write(self, lgpio_controller, lgpio_mock):
        """acquire, set_output and set_level map to lgpio calls."""
        lgpio_controller.acquire(18, "E")
        lgpio_controller.set_output(18, 0)
        lgpio_controller.set_level(18, 1)
        lgpio_mock.gpio_claim_input.assert_called_once_with(3, 18)
        lgpio_mock.gpio_claim_output.assert_called_once_with(3, 18, 0)
        lgpio_mock.gpio_write.assert_called_once_with(3, 18, 1)
        assert lgpio_controller.get_level(18) == 1

    def test_busy_pin(self, lgpio_controller, lgpio_mock):
        """A negative claim status becomes PinAcquisitionError."""
        lgpio_mock.gpio_claim_input.return_value = -8
        with pytest.raises(PinAcquisitionError) as exc_info:
            lgpio_controller.acquire(22, "DB4")
        assert "GPIO busy" in str(exc_info.value)
        assert not lgpio_controller.is_acquired(22)

    def test_claim_exception(self, lgpio_controller, lgpio_mock):
        """lgpio.error from a claim becomes PinAcquisitionError."""
        lgpio_mock.gpio_claim_input.side_effect = LgpioError("GPIO busy")
        with pytest.raises(PinAcquisitionError):
            lgpio_controller.acquire(22, "DB4")

    def test_chip_open_failure(self, lgpio_controller, lgpio_mock):
        """A chip that cannot be opened fails acquisition."""
        lgpio_mock.gpiochip_open.side_effect = LgpioError("no such chip")
        with pytest.raises(PinAcquisitionError):
            lgpio_controller.acquire(4, "RS")

    def test_write_failure(self, lgpio_controller, lgpio_mock):
        """A failing write becomes PinWriteError."""
        lgpio_controller.acquire(23, "DB5")
        lgpio_mock.gpio_write.return_value = -1
        with pytest.raises(PinWriteError):
            lgpio_controller.set_level(23, 1)

    def test_write_unacquired(self, lgpio_controller, lgpio_mock):
        """Writing a pin that is not held fails without calling lgpio."""
        with pytest.raises(PinWriteError):
            lgpio_controller.set_level(23, 1)
        lgpio_mock.gpio_write.assert_not_called()

    def test_release(self, lgpio_controller, lgpio_mock):
        """release frees the line once; a second release is a no-op."""
        lgpio_controller.acquire(24, "DB6")
        lgpio_controller.release(24)
        lgpio_controller.release(24)
        lgpio_mock.gpio_free.assert_called_once_with(3, 24)
        assert not lgpio_controller.is_acquired(24)

    def test_release_error_logged(self, lgpio_controller, lgpio_mock):
        """An lgpio error while freeing still drops the pin."""
        lgpio_controller.acquire(25, "DB7")
        lgpio_mock.gpio_free.side_effect = LgpioError("bad handle")
        lgpio_controller.release(25)
        assert not lgpio_controller.is_acquired(25)

    def test_close(self, lgpio_controller, lgpio_mock):
        """close frees held lines and closes the chip."""
        lgpio_controller.acquire(4, "RS")
        lgpio_controller.acquire(17, "RW")
        lgpio_controller.close()
        assert lgpio_mock.gpio_free.call_count == 2
        lgpio_mock.gpiochip_close.assert_called_once_with(3)


class TestCreateController:
    """Test backend selection."""

    def test_simulated(self):
        assert isinstance(create_controller(simulate=True), SimulatedPinController)

    def test_lgpio(self, lgpio_mock):
        """The real backend is built with the requested chip."""
        controller = create_controller(chip=4)
        assert type(controller).__name__ == "LgpioPinController"
        assert controller.chip == 4
