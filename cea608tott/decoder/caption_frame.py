"""Stateful CEA-608 caption frame decoder.

WHY: A CEA-608 stream does not carry captions as text. It carries
commands that paint characters into an off-screen or on-screen memory
and then swap, erase or scroll those memories. The timed-text stage only
cares about two moments: when a new frame becomes visible and when the
visible frame is erased. CaptionFrame replays the commands and reports
exactly those moments.

HOW: Two 15x32 character grids, ``front`` (displayed) and ``back``
(non-displayed). Control codes pick the grid that text is written into:
pop-on (RCL) writes ``back`` and shows it on EOC; roll-up (RU2–RU4) and
paint-on (RDC) write ``front`` directly. ``decode()`` returns a
CaptionEvent per pair; ``to_text()`` renders ``front`` as plain text.

RULES:
- decode() raises DecodeError on a parity failure, never on content
- EOC -> READY, EDM -> CLEAR, text written to ``front`` -> READY
- Redundant (doubled) control, tab offset, mid-row, special character and
  preamble codes are processed once
- Only channel 1 text is rendered
- to_text() raises RenderError until a frame has been displayed
- reset() restores the freshly constructed state
"""

from __future__ import annotations

import logging
from typing import List, Optional

from cea608tott.core.errors import DecodeError, RenderError
from cea608tott.core.models import CaptionEvent
from cea608tott.decoder import eia608

logger = logging.getLogger(__name__)

Grid = List[List[Optional[str]]]


def _empty_grid() -> Grid:
    return [[None] * eia608.SCREEN_COLS for _ in range(eia608.SCREEN_ROWS)]


class CaptionFrame:
    """Caption decoder for one CEA-608 channel."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Return to an empty, idle decoder."""
        self.front: Grid = _empty_grid()
        self.back: Grid = _empty_grid()
        self.row = eia608.SCREEN_ROWS - 1
        self.col = 0
        self._write: Optional[Grid] = None
        self._rollup_rows = 0
        self._channel = 1
        self._last_cc = 0
        self._in_xds = False
        self._displayed = False

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def decode(self, cc_data: int, timestamp: float) -> CaptionEvent:
        """Feed one transmitted byte pair (with parity bits) to the decoder.

        Args:
            cc_data: 16-bit pair, first byte in the high 8 bits.
            timestamp: Presentation time of the pair in seconds.

        Returns:
            The CaptionEvent the pair produced.

        Raises:
            DecodeError: If either byte fails the odd-parity check.
        """
        if not eia608.parity_ok(cc_data):
            raise DecodeError("Parity error in pair 0x{:04x}".format(cc_data))

        cc = cc_data & 0x7F7F
        if eia608.is_padding(cc):
            return CaptionEvent.OK

        if self._in_xds:
            # A control code terminates XDS and is processed normally
            if not (eia608.is_control(cc) or eia608.is_preamble(cc)):
                if eia608.is_xds_end(cc):
                    self._in_xds = False
                return CaptionEvent.OK
            self._in_xds = False
        elif eia608.is_xds(cc):
            self._in_xds = not eia608.is_xds_end(cc)
            return CaptionEvent.OK

        if (
            eia608.is_control(cc)
            or eia608.is_tab_offset(cc)
            or eia608.is_midrow(cc)
            or eia608.is_special_na(cc)
            or eia608.is_preamble(cc)
        ):
            if cc == self._last_cc:
                # Second copy of a redundantly transmitted code
                self._last_cc = 0
                return CaptionEvent.OK
        self._last_cc = cc

        if eia608.is_control(cc):
            self._channel = eia608.channel(cc)
            if self._channel != 1:
                return CaptionEvent.OK
            return self._decode_control(eia608.control_command(cc))
        if eia608.is_tab_offset(cc):
            if eia608.channel(cc) == self._channel == 1:
                self._advance(eia608.tab_columns(cc))
            return CaptionEvent.OK
        if eia608.is_preamble(cc):
            self._channel = eia608.channel(cc)
            if self._channel == 1:
                self._decode_preamble(cc)
            return CaptionEvent.OK
        if eia608.is_midrow(cc):
            self._channel = eia608.channel(cc)
            if self._channel != 1:
                return CaptionEvent.OK
            return self._write_chars(" ")
        if self._channel != 1:
            return CaptionEvent.OK
        if eia608.is_special_na(cc):
            return self._write_chars(eia608.special_char(cc))
        if eia608.is_extended(cc):
            self._backspace()
            return self._write_chars(eia608.extended_char(cc))
        if eia608.is_basic_na(cc):
            return self._write_chars(eia608.basic_chars(cc))

        logger.debug("Ignoring unknown pair 0x%04x at %.3fs", cc, timestamp)
        return CaptionEvent.OK

    def _decode_control(self, command: int) -> CaptionEvent:
        if command == eia608.RCL:
            self._write = self.back
            self._rollup_rows = 0
        elif command == eia608.RDC:
            self._write = self.front
            self._rollup_rows = 0
        elif command in (eia608.RU2, eia608.RU3, eia608.RU4):
            self._write = self.front
            self._rollup_rows = command - eia608.RU2 + 2
            self.col = 0
        elif command in (eia608.TR, eia608.RTD):
            # Text service; nothing to show
            self._write = None
        elif command == eia608.EDM:
            _clear_grid(self.front)
            return CaptionEvent.CLEAR
        elif command == eia608.ENM:
            _clear_grid(self.back)
        elif command == eia608.EOC:
            shown = self.front
            self.front, self.back = self.back, _empty_grid()
            if self._write is shown:
                # Paint-on keeps writing to whatever is on screen
                self._write = self.front
            elif self._write is not None:
                self._write = self.back
            self._displayed = True
            return CaptionEvent.READY
        elif command == eia608.CR:
            self._carriage_return()
        elif command == eia608.BS:
            self._backspace()
        elif command == eia608.DER:
            if self._write is not None:
                for col in range(self.col, eia608.SCREEN_COLS):
                    self._write[self.row][col] = None
        return CaptionEvent.OK

    def _decode_preamble(self, cc: int) -> None:
        row, col = eia608.preamble_position(cc)
        if row < 0:
            logger.debug("Invalid preamble address code 0x%04x", cc)
            return
        self.row = row
        self.col = col

    def _carriage_return(self) -> None:
        if not self._rollup_rows:
            return
        top = max(self.row - (self._rollup_rows - 1), 0)
        for row in range(top, self.row):
            self.front[row] = list(self.front[row + 1])
        self.front[self.row] = [None] * eia608.SCREEN_COLS
        # Anything above the roll-up window scrolls off screen
        for row in range(0, top):
            self.front[row] = [None] * eia608.SCREEN_COLS
        self.col = 0

    def _backspace(self) -> None:
        if self._write is None or self.col == 0:
            return
        self.col -= 1
        self._write[self.row][self.col] = None

    def _advance(self, columns: int) -> None:
        self.col = min(self.col + columns, eia608.SCREEN_COLS - 1)

    def _write_chars(self, chars: str) -> CaptionEvent:
        if self._write is None:
            return CaptionEvent.OK
        for char in chars:
            self._write[self.row][self.col] = char
            self._advance(1)
        if self._write is self.front:
            self._displayed = True
            return CaptionEvent.READY
        return CaptionEvent.OK

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def to_text(self) -> str:
        """Render the displayed memory as plain text.

        Rows are joined with CRLF. Empty cells are skipped, leading
        whitespace in a row is dropped and trailing whitespace trimmed.

        Raises:
            RenderError: If no frame has been displayed since the last reset.
        """
        if not self._displayed:
            raise RenderError("No caption frame has been displayed")

        lines = []
        for row in self.front:
            chars: List[str] = []
            for char in row:
                if char is None:
                    continue
                if not chars and char.isspace():
                    continue
                chars.append(char)
            line = "".join(chars).rstrip()
            if line:
                lines.append(line)
        return "\r\n".join(lines)

    # Name used by the stream controller
    render_current_frame = to_text


def _clear_grid(grid: Grid) -> None:
    for row in grid:
        for col in range(len(row)):
            row[col] = None
