"""Low-level CEA-608 byte-pair classification and character tables.

WHY: Every byte pair on line 21 is either padding, a control command, a
preamble address code, a mid-row style change, a tab offset, XDS data or
up to two printable characters. The caption frame needs to tell them
apart with cheap bit tests before it can update the screen.

HOW: Pure functions over the 16-bit pair with the parity bits stripped
(``cc & 0x7F7F``). Character tables map the basic, special and extended
character sets to Unicode.

RULES:
- Predicates take parity-stripped data unless the name says otherwise
- Channel 2 control codes differ from channel 1 only in bit 0x0800
- Extended characters (0x12xx/0x13xx) replace the preceding character
"""

from __future__ import annotations

from typing import Tuple

# Control command codes (low byte of a misc control pair)
RCL = 0x20  # resume caption loading
BS = 0x21   # backspace
AOF = 0x22  # reserved
AON = 0x23  # reserved
DER = 0x24  # delete to end of row
RU2 = 0x25  # roll-up, 2 rows
RU3 = 0x26
RU4 = 0x27
FON = 0x28  # flash on
RDC = 0x29  # resume direct captioning
TR = 0x2A   # text restart
RTD = 0x2B  # resume text display
EDM = 0x2C  # erase displayed memory
CR = 0x2D   # carriage return
ENM = 0x2E  # erase non-displayed memory
EOC = 0x2F  # end of caption

SCREEN_ROWS = 15
SCREEN_COLS = 32

# Preamble row index -> screen row (0-based). -1 marks an invalid code.
ROW_MAP = (10, -1, 0, 1, 2, 3, 11, 12, 13, 14, 4, 5, 6, 7, 8, 9)


def _build_basic_na() -> Tuple[str, ...]:
    chars = [chr(c) for c in range(0x20, 0x80)]
    substitutions = {
        0x2A: "á",
        0x5C: "é",
        0x5E: "í",
        0x5F: "ó",
        0x60: "ú",
        0x7B: "ç",
        0x7C: "÷",
        0x7D: "Ñ",
        0x7E: "ñ",
        0x7F: "█",
    }
    for code, char in substitutions.items():
        chars[code - 0x20] = char
    return tuple(chars)


BASIC_NA = _build_basic_na()
"""0x20–0x7F, ASCII with the CEA-608 substitutions."""

SPECIAL_NA = tuple("®°½¿™¢£♪à èâêîôû")
"""0x1130–0x113F. 0x1139 is the transparent space."""

EXTENDED_SPANISH_FRENCH = tuple("ÁÉÓÚÜü‘¡*’—©℠•“”ÀÂÇÈÊËëÎÏïÔÙùÛ«»")
"""0x1220–0x123F."""

EXTENDED_PORTUGUESE_GERMAN = tuple("ÃãÍÌìÒòÕõ{}\\^_¦~ÄäÖöß¥¤|ÅåØø┌┐└┘")
"""0x1320–0x133F."""


def odd_parity(byte: int) -> bool:
    return bin(byte & 0xFF).count("1") % 2 == 1


def parity_ok(cc_data: int) -> bool:
    """True if both bytes of the raw pair carry odd parity."""
    return odd_parity(cc_data >> 8) and odd_parity(cc_data)


def add_parity(cc_data: int) -> int:
    """Set bit 7 of each byte so that both bytes have odd parity.

    ``add_parity(0x1420)`` is ``0x9420`` (RCL on channel 1), the form in
    which the pair is actually transmitted.
    """
    result = 0
    for shift in (8, 0):
        byte = (cc_data >> shift) & 0x7F
        if not odd_parity(byte):
            byte |= 0x80
        result |= byte << shift
    return result


def is_padding(cc: int) -> bool:
    return cc == 0


def is_xds(cc: int) -> bool:
    return 0x01 <= (cc >> 8) <= 0x0F


def is_xds_end(cc: int) -> bool:
    return (cc >> 8) == 0x0F


def is_control(cc: int) -> bool:
    """Misc control command: first byte 0x14/0x15/0x1C/0x1D, second 0x20–0x2F."""
    return (cc & 0x7670) == 0x1420


def is_tab_offset(cc: int) -> bool:
    return (cc & 0x777C) == 0x1720 and (cc & 0x0003) != 0


def is_preamble(cc: int) -> bool:
    return (cc & 0x7040) == 0x1040


def is_midrow(cc: int) -> bool:
    return (cc & 0x7770) == 0x1120


def is_special_na(cc: int) -> bool:
    return (cc & 0x7770) == 0x1130


def is_extended(cc: int) -> bool:
    return (cc & 0x7660) == 0x1220


def is_basic_na(cc: int) -> bool:
    return (cc >> 8) >= 0x20


def channel(cc: int) -> int:
    """Data channel (1 or 2) selected by a control, preamble or mid-row code."""
    return 2 if cc & 0x0800 else 1


def control_command(cc: int) -> int:
    return cc & 0xFF


def tab_columns(cc: int) -> int:
    return cc & 0x0003


def preamble_position(cc: int) -> Tuple[int, int]:
    """Return (row, column) addressed by a preamble code; row -1 if invalid."""
    row = ROW_MAP[((cc & 0x0700) >> 7) | ((cc & 0x0020) >> 5)]
    column = 4 * ((cc & 0x000E) >> 1) if cc & 0x0010 else 0
    return row, column


def basic_chars(cc: int) -> str:
    """Decode a pair of basic characters. A zero second byte is skipped."""
    chars = BASIC_NA[(cc >> 8) - 0x20]
    low = cc & 0x7F
    if low >= 0x20:
        chars += BASIC_NA[low - 0x20]
    return chars


def special_char(cc: int) -> str:
    return SPECIAL_NA[(cc & 0x0F)]


def extended_char(cc: int) -> str:
    table = EXTENDED_PORTUGUESE_GERMAN if cc & 0x0100 else EXTENDED_SPANISH_FRENCH
    return table[(cc & 0x1F)]
