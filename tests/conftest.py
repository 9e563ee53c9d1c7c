"""
Shared fixtures for the GPIO LCD test suite.

Every fixture runs on simulated time: a VirtualClock shared between the
simulated GPIO backend, its HD44780 panel and the driver, so pulse widths
and settle delays are exact and the suite never sleeps.
"""

import pytest

from gpio_lcd.config import DriverConfig
from gpio_lcd.driver import InMemoryDeviceRegistry, LcdLifecycle
from gpio_lcd.hal import SimulatedPinController
from gpio_lcd.pins import DEFAULT_PINS
from gpio_lcd.timing import VirtualClock


@pytest.fixture
def clock():
    """Simulated time source."""
    return VirtualClock()


@pytest.fixture
def gpio(clock):
    """Simulated GPIO backend with an HD44780 panel on the default pins."""
    controller = SimulatedPinController(clock=clock)
    controller.attach_panel(DEFAULT_PINS)
    return controller


@pytest.fixture
def registry():
    """Empty in-memory device registry."""
    return InMemoryDeviceRegistry()


@pytest.fixture
def lcd(gpio, registry, clock):
    """Driver that has not been started yet."""
    return LcdLifecycle(gpio, registry=registry, config=DriverConfig(), clock=clock)


@pytest.fixture
def owned_gpio(gpio):
    """Simulated backend with all seven LCD pins acquired as low outputs."""
    for signal, pin in DEFAULT_PINS.items():
        gpio.acquire(pin, signal.value)
        gpio.set_output(pin, 0)
    return gpio
