"""
HD44780 Protocol Layer
======================

Everything that knows how bytes reach the display:

- **commands**: the fixed instruction bytes
- **encoder**: byte to nibble pair
- **transport**: timed two-nibble transfer over the pins
- **initializer**: power-on sequence
- **panel**: behavioural model of the display used by the simulator
"""

from gpio_lcd.lcd import commands
from gpio_lcd.lcd.encoder import Nibble, decode, encode
from gpio_lcd.lcd.initializer import (
    POWER_ON_DELAY_MS,
    RESET_SETTLE_MS,
    SELF_TEST_SETTLE_MS,
    LcdInitializer,
)
from gpio_lcd.lcd.panel import PanelState, SimulatedPanel, TimingViolation
from gpio_lcd.lcd.transport import MIN_PULSE_WIDTH_US, LcdTransport

__all__ = [
    "commands",
    "Nibble",
    "encode",
    "decode",
    "LcdTransport",
    "MIN_PULSE_WIDTH_US",
    "LcdInitializer",
    "POWER_ON_DELAY_MS",
    "RESET_SETTLE_MS",
    "SELF_TEST_SETTLE_MS",
    "SimulatedPanel",
    "PanelState",
    "TimingViolation",
]
