"""
GPIO LCD - Configuration
========================

Driver configuration: pin wiring, timing, self-test and release policy.
Configuration can come from:
- Default values (defined here)
- Keyword arguments
- Environment variables (``DriverConfig.from_env()``)

Environment Variables
---------------------
    GPIO_LCD_PINS            Pin overrides, e.g. "RS=5,E=6" (others default)
    GPIO_LCD_CHIP            GPIO chip number for the lgpio backend
    GPIO_LCD_PULSE_US        Enable pulse width in microseconds (>= 50)
    GPIO_LCD_SELF_TEST       Write the self-test character (1/0, yes/no, ...)
    GPIO_LCD_RELEASE_POLICY  "unconditional" or "refcounted"
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional

from gpio_lcd.lcd.commands import SELF_TEST_CHAR, check_byte
from gpio_lcd.lcd.transport import MIN_PULSE_WIDTH_US
from gpio_lcd.pins import DEFAULT_PINS, PinAssignment


class ReleasePolicy(Enum):
    """
    What closing a device handle does to the pins.

    UNCONDITIONAL: every release frees all seven pins, even while other
        handles are still open (the historical behaviour of this driver).
    REFCOUNTED: pins are freed when the last open handle is released.
    """
    UNCONDITIONAL = "unconditional"
    REFCOUNTED = "refcounted"


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_bool(value: str, name: str = "value") -> bool:
    """Parse a boolean environment value."""
    text = value.strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: {value!r}")


def parse_pin_map(value: str) -> Dict[str, int]:
    """
    Parse "RS=4,RW=17,E=18" into a name -> pin mapping.

    Example:
        >>> parse_pin_map("RS=5, Enable=6")
        {'RS': 5, 'Enable': 6}
    """
    result: Dict[str, int] = {}
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, number = item.partition("=")
        if not sep:
            raise ValueError(f"Invalid pin mapping entry: {item!r} (expected NAME=GPIO)")
        try:
            result[name.strip()] = int(number.strip(), 0)
        except ValueError:
            raise ValueError(f"Invalid GPIO number in {item!r}") from None
    return result


@dataclass
class DriverConfig:
    """
    Configuration for the LCD driver.

    Attributes:
        pins: Physical wiring of the seven LCD signals
        chip: GPIO chip number (lgpio backend only)
        pulse_width_us: Enable pulse width and settle time (default 50 us)
        self_test: Write ``self_test_char`` at the end of initialization
        self_test_char: Byte written by the self-test (default "Q")
        release_policy: Effect of closing a device handle on the pins
        num_lines: Rows of the simulated panel (2 or 4)
    """

    pins: PinAssignment = field(default_factory=lambda: DEFAULT_PINS)
    chip: int = 0
    pulse_width_us: int = MIN_PULSE_WIDTH_US
    self_test: bool = True
    self_test_char: int = SELF_TEST_CHAR
    release_policy: ReleasePolicy = ReleasePolicy.UNCONDITIONAL
    num_lines: int = 2

    def __post_init__(self) -> None:
        if self.pulse_width_us < MIN_PULSE_WIDTH_US:
            raise ValueError(
                f"pulse_width_us must be at least {MIN_PULSE_WIDTH_US}, got {self.pulse_width_us}"
            )
        if self.chip < 0:
            raise ValueError(f"chip must be non-negative, got {self.chip}")
        if self.num_lines not in (2, 4):
            raise ValueError(f"num_lines must be 2 or 4, got {self.num_lines}")
        check_byte(self.self_test_char)
        if isinstance(self.release_policy, str):
            self.release_policy = ReleasePolicy(self.release_policy.lower())

    # ═══════════════════════════════════════════════════════════════════════════
    # FACTORY METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DriverConfig":
        """
        Create DriverConfig from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Returns:
            DriverConfig with values from the environment, defaults elsewhere

        Raises:
            ValueError: If a variable is set to an invalid value.
        """
        env = os.environ if environ is None else environ
        kwargs = {}

        if pins := env.get("GPIO_LCD_PINS"):
            try:
                kwargs["pins"] = PinAssignment.from_mapping(parse_pin_map(pins))
            except ValueError as e:
                raise ValueError(f"GPIO_LCD_PINS: {e}") from None

        if chip := env.get("GPIO_LCD_CHIP"):
            try:
                kwargs["chip"] = int(chip)
            except ValueError:
                raise ValueError(f"Invalid GPIO_LCD_CHIP: {chip!r}") from None

        if pulse := env.get("GPIO_LCD_PULSE_US"):
            try:
                kwargs["pulse_width_us"] = int(pulse)
            except ValueError:
                raise ValueError(f"Invalid GPIO_LCD_PULSE_US: {pulse!r}") from None

        if self_test := env.get("GPIO_LCD_SELF_TEST"):
            kwargs["self_test"] = parse_bool(self_test, "GPIO_LCD_SELF_TEST")

        if policy := env.get("GPIO_LCD_RELEASE_POLICY"):
            try:
                kwargs["release_policy"] = ReleasePolicy(policy.strip().lower())
            except ValueError:
                raise ValueError(f"Invalid GPIO_LCD_RELEASE_POLICY: {policy!r}") from None

        return cls(**kwargs)
