"""
Simulated HD44780 Panel
=======================

A behavioural model of an HD44780-compatible character LCD, driven at the
pin level by ``SimulatedPinController``. It lets the whole driver run
without hardware while still checking what a real controller would see.

What is modelled:

- Power-on state: 8-bit interface, display off, DDRAM filled with spaces
- Nibble latching on the falling edge of Enable
- 8-bit mode with DB0..DB3 grounded (only DB4..DB7 are wired), so each
  latch is a whole instruction whose low nibble is zero
- Switch to 4-bit mode on a function set with DL=0, after which nibbles are
  paired high-then-low
- Instructions: clear, home, entry mode, display on/off, cursor/display
  shift, function set, CGRAM and DDRAM address
- Data writes to DDRAM or CGRAM with auto-increment/decrement
- Address counter wrap per the function set N bit: one-line mode is a
  single line 0x00..0x4F, two-line mode runs 0x00..0x27 then 0x40..0x67
- Enable timing checks: pulses shorter than the minimum width and rising
  edges that arrive too soon after the previous falling edge are recorded
  in ``timing_violations``

Screen layout follows the standard HD44780 DDRAM map:
- 16x2: row 0 at 0x00, row 1 at 0x40
- 20x4: rows at 0x00, 0x40, 0x14, 0x54

Command encoding (from the HD44780 datasheet):
- 1AAAAAAA: Set DDRAM address
- 01AAAAAA: Set CGRAM address
- 001DNFxx: Function set (data length, lines, font)
- 0001SRxx: Cursor/display shift
- 00001DCB: Display on/off control
- 000001IS: Entry mode set
- 0000001x: Return home
- 00000001: Clear display
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from gpio_lcd.lcd.encoder import Nibble, decode

# Row start addresses in DDRAM
ROW_OFFSETS = (0x00, 0x40, 0x14, 0x54)

BLANK = 0x20


@dataclass
class PanelState:
    """
    Complete controller state of the simulated panel.

    Attributes:
        eight_bit: Interface data length (True until a 4-bit function set)
        pending_nibble: High nibble waiting for its low half (4-bit mode)
        address: Address counter
        to_cgram: True when data goes to CGRAM instead of DDRAM
        increment: Entry mode I/D bit
        shift: Entry mode S bit (display shift, not rendered)
        display_on: Display on/off control D bit
        cursor_on: Display on/off control C bit
        cursor_blink: Display on/off control B bit
        two_line: Function set N bit
    """
    eight_bit: bool = True
    pending_nibble: Optional[int] = None
    address: int = 0
    to_cgram: bool = False
    increment: bool = True
    shift: bool = False
    display_on: bool = False
    cursor_on: bool = False
    cursor_blink: bool = False
    two_line: bool = False


@dataclass(frozen=True)
class Latch:
    """One nibble latched by the panel (for inspection in tests)."""
    rs: int
    nibble: int
    eight_bit: bool
    time_ns: int


@dataclass
class TimingViolation:
    """An Enable edge that broke the minimum timing."""
    kind: str  # "pulse" or "settle"
    measured_ns: int
    required_ns: int
    time_ns: int = 0


class SimulatedPanel:
    """
    HD44780-compatible panel fed by Enable edges.

    Example:
        >>> panel = SimulatedPanel()
        >>> panel.write_instruction(0x0F)   # display on, cursor blink
        >>> panel.write_data(ord("Q"))
        >>> panel.get_text_grid()[0][:1]
        'Q'
    """

    DISPLAY_RAM_SIZE = 128
    CGRAM_SIZE = 64

    def __init__(self, num_lines: int = 2, min_pulse_us: int = 50):
        if num_lines not in (2, 4):
            raise ValueError(f"num_lines must be 2 or 4, got {num_lines}")

        self._num_lines = num_lines
        self._num_columns = 20 if num_lines == 4 else 16
        self.min_pulse_ns = min_pulse_us * 1000

        self._state = PanelState()
        self._ddram = bytearray([BLANK] * self.DISPLAY_RAM_SIZE)
        self._cgram = bytearray(self.CGRAM_SIZE)

        self._enable_high_since: Optional[int] = None
        self._last_fall_ns: Optional[int] = None

        self.latches: List[Latch] = []
        self.transfers: List[Tuple[int, int]] = []
        self.timing_violations: List[TimingViolation] = []

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def state(self) -> PanelState:
        return self._state

    @property
    def num_lines(self) -> int:
        return self._num_lines

    @property
    def num_columns(self) -> int:
        return self._num_columns

    @property
    def is_on(self) -> bool:
        return self._state.display_on

    @property
    def four_bit_mode(self) -> bool:
        return not self._state.eight_bit

    # =========================================================================
    # Pin-Level Interface
    # =========================================================================

    def enable_edge(self, level: int, now_ns: int, rs: int, nibble: int) -> None:
        """
        Observe a transition on the Enable line.

        Args:
            level: New Enable level
            now_ns: Timestamp of the transition
            rs: Register-select level at the transition
            nibble: DB7..DB4 levels packed as a 4-bit value
        """
        if level:
            if self._last_fall_ns is not None:
                gap = now_ns - self._last_fall_ns
                if gap < self.min_pulse_ns:
                    self.timing_violations.append(
                        TimingViolation("settle", gap, self.min_pulse_ns, now_ns)
                    )
            self._enable_high_since = now_ns
            return

        if self._enable_high_since is None:
            # Falling edge without a rising one (line initialised low)
            return

        width = now_ns - self._enable_high_since
        if width < self.min_pulse_ns:
            self.timing_violations.append(
                TimingViolation("pulse", width, self.min_pulse_ns, now_ns)
            )
        self._enable_high_since = None
        self._last_fall_ns = now_ns
        self.latch(rs, nibble, now_ns)

    def latch(self, rs: int, nibble: int, now_ns: int = 0) -> None:
        """Latch one nibble from DB7..DB4."""
        nibble &= 0x0F
        self.latches.append(Latch(rs, nibble, self._state.eight_bit, now_ns))

        if self._state.eight_bit:
            # DB0..DB3 are not wired and read as zero
            self._execute(rs, nibble << 4)
            return

        if self._state.pending_nibble is None:
            self._state.pending_nibble = nibble
        else:
            value = decode(Nibble.from_value(self._state.pending_nibble), Nibble.from_value(nibble))
            self._state.pending_nibble = None
            self._execute(rs, value)

    def _execute(self, rs: int, value: int) -> None:
        self.transfers.append((rs, value))
        if rs:
            self.write_data(value)
        else:
            self.write_instruction(value)

    # =========================================================================
    # Controller Behaviour
    # =========================================================================

    def write_instruction(self, data: int) -> None:
        """Execute an 8-bit HD44780 instruction."""
        state = self._state
        data &= 0xFF

        if data & 0x80:
            state.address = data & 0x7F
            state.to_cgram = False

        elif data & 0x40:
            state.address = data & 0x3F
            state.to_cgram = True

        elif data & 0x20:
            eight_bit = bool(data & 0x10)
            if eight_bit != state.eight_bit:
                state.pending_nibble = None
            state.eight_bit = eight_bit
            state.two_line = bool(data & 0x08)

        elif data & 0x10:
            if not data & 0x08:
                # Cursor move; display shift is not rendered
                self._advance(bool(data & 0x04))

        elif data & 0x08:
            state.display_on = bool(data & 0x04)
            state.cursor_on = bool(data & 0x02)
            state.cursor_blink = bool(data & 0x01)

        elif data & 0x04:
            state.increment = bool(data & 0x02)
            state.shift = bool(data & 0x01)

        elif data & 0x02:
            state.address = 0
            state.to_cgram = False

        elif data & 0x01:
            for i in range(self.DISPLAY_RAM_SIZE):
                self._ddram[i] = BLANK
            state.address = 0
            state.to_cgram = False
            state.increment = True

        # 0x00 is not an instruction; the controller ignores it

    def write_data(self, data: int) -> None:
        """Write a data byte at the address counter."""
        data &= 0xFF
        if self._state.to_cgram:
            self._cgram[self._state.address & 0x3F] = data
            self._state.address = (self._state.address + (1 if self._state.increment else -1)) & 0x3F
            return
        self._ddram[self._state.address & 0x7F] = data
        self._advance(self._state.increment)

    def _advance(self, forward: bool) -> None:
        address = self._state.address
        if not self._state.two_line:
            # One-line mode: a single 80-character line at 0x00..0x4F
            address += 1 if forward else -1
            if address >= 0x50:
                address = 0x00
            elif address < 0:
                address = 0x4F
        elif forward:
            address += 1
            if address == 0x28:
                address = 0x40
            elif address >= 0x68:
                address = 0x00
        else:
            address -= 1
            if address < 0:
                address = 0x67
            elif address == 0x3F:
                address = 0x27
        self._state.address = address

    # =========================================================================
    # Text Access API
    # =========================================================================

    def get_text_grid(self) -> List[str]:
        """
        Get display contents as one string per row.

        Returns empty strings while the display is switched off, like the
        glass of a real panel.
        """
        if not self._state.display_on:
            return ["" for _ in range(self._num_lines)]

        result = []
        for row in range(self._num_lines):
            base = ROW_OFFSETS[row]
            chars = []
            for col in range(self._num_columns):
                code = self._ddram[base + col]
                chars.append(chr(code) if 32 <= code < 127 else " ")
            result.append("".join(chars))
        return result

    def get_text(self) -> str:
        """Display contents with rows separated by newlines."""
        return "\n".join(self.get_text_grid())

    def get_char_at(self, row: int, col: int) -> int:
        """Character code at a screen position, regardless of display on/off."""
        if not (0 <= row < self._num_lines and 0 <= col < self._num_columns):
            raise ValueError(f"Invalid position ({row}, {col})")
        return self._ddram[ROW_OFFSETS[row] + col]

    def instructions(self) -> List[int]:
        """Instruction bytes executed so far, in order."""
        return [value for rs, value in self.transfers if not rs]

    def data_bytes(self) -> List[int]:
        """Data bytes written so far, in order."""
        return [value for rs, value in self.transfers if rs]
