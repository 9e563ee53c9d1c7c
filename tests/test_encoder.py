"""
Nibble Encoder Unit Tests
=========================

Tests for splitting bytes into the two nibbles sent over DB7..DB4.
"""

import pytest

from gpio_lcd.lcd import commands
from gpio_lcd.lcd.encoder import Nibble, decode, encode


# =============================================================================
# Encoding Tests
# =============================================================================

class TestEncode:
    """Test byte to nibble-pair encoding."""

    def test_startup1(self):
        """0x33 encodes to two 0011 nibbles."""
        assert encode(0x33) == ((0, 0, 1, 1), (0, 0, 1, 1))

    def test_function_set(self):
        """0x20 encodes to 0010 then 0000."""
        assert encode(0x20) == ((0, 0, 1, 0), (0, 0, 0, 0))

    def test_self_test_char(self):
        """'Q' (0x51) encodes to 0101 then 0001."""
        high, low = encode(commands.SELF_TEST_CHAR)
        assert high == Nibble(0, 1, 0, 1)
        assert low == Nibble(0, 0, 0, 1)

    def test_extremes(self):
        """0x00 and 0xFF use all-low and all-high nibbles."""
        assert encode(0x00) == ((0, 0, 0, 0), (0, 0, 0, 0))
        assert encode(0xFF) == ((1, 1, 1, 1), (1, 1, 1, 1))

    def test_high_nibble_first(self):
        """The first nibble carries bits 7..4."""
        high, low = encode(0xA5)
        assert high.value == 0xA
        assert low.value == 0x5

    def test_db7_is_highest_bit(self):
        """Bit 7 lands on DB7 of the high nibble, bit 0 on DB4 of the low."""
        high, _ = encode(0x80)
        assert high.db7 == 1 and high.db6 == high.db5 == high.db4 == 0
        _, low = encode(0x01)
        assert low.db4 == 1 and low.db7 == low.db6 == low.db5 == 0

    @pytest.mark.parametrize("value", [-1, 256, 0x1FF])
    def test_out_of_range_rejected(self, value):
        """Values outside 0..255 raise ValueError."""
        with pytest.raises(ValueError):
            encode(value)


# =============================================================================
# Decoding Tests
# =============================================================================

class TestDecode:
    """Test nibble-pair to byte decoding."""

    def test_decode_inverts_encode(self):
        """decode(encode(x)) == x for every byte."""
        for value in range(256):
            assert decode(*encode(value)) == value

    def test_nibble_from_value(self):
        """Nibble.from_value round-trips through .value."""
        assert Nibble.from_value(0b1010) == Nibble(1, 0, 1, 0)
        assert Nibble.from_value(0b1010).value == 0b1010
