"""Scenarist Closed Caption (SCC) reader.

WHY: SCC is the most common file carrier for CEA-608 data. Each line is
a SMPTE timecode followed by the byte pairs sent from that frame on.

HOW: Lines are matched against a timecode pattern; every 4-hex-digit
word after it becomes one two-byte InputUnit. Word i of a line is
stamped i frames after the line's timecode.

RULES:
- The first non-empty line must be "Scenarist_SCC V1.0"
- "HH:MM:SS:FF" is non-drop-frame, "HH:MM:SS;FF" (or ".FF") drop-frame
- Frames run at 29.97 fps in both cases; drop-frame timecodes skip
  frame numbers 0 and 1 of every minute not divisible by ten
- Malformed lines are logged and skipped
"""

from __future__ import annotations

import logging
import re
from typing import List

from cea608tott.adapters.raw import frame_pts
from cea608tott.core.models import InputUnit

logger = logging.getLogger(__name__)

SCC_HEADER = "Scenarist_SCC V1.0"

TIMECODE_PATTERN = re.compile(r"^(\d\d):(\d\d):(\d\d)([:;.,])(\d\d)$")
HEX_WORD_PATTERN = re.compile(r"^[0-9a-fA-F]{4}$")


def timecode_to_frame(timecode: str) -> int:
    """Convert an SCC timecode to an absolute frame number.

    Raises:
        ValueError: If the timecode is malformed.
    """
    match = TIMECODE_PATTERN.match(timecode)
    if not match:
        raise ValueError("Invalid SCC timecode '{}'".format(timecode))

    hours, minutes, seconds = (int(match.group(i)) for i in (1, 2, 3))
    frames = int(match.group(5))
    frame = ((hours * 60 + minutes) * 60 + seconds) * 30 + frames

    if match.group(4) != ":":
        total_minutes = hours * 60 + minutes
        frame -= 2 * (total_minutes - total_minutes // 10)
    return frame


def read_scc(data: bytes) -> List[InputUnit]:
    """Parse an SCC document into timestamped two-byte units.

    Raises:
        ValueError: If the header is missing.
    """
    text = data.decode("utf-8-sig", errors="replace")
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line]

    if not lines or lines[0] != SCC_HEADER:
        raise ValueError("Not an SCC file: missing '{}' header".format(SCC_HEADER))

    units: List[InputUnit] = []
    for lineno, line in enumerate(lines[1:], start=2):
        fields = line.split()
        try:
            start = timecode_to_frame(fields[0])
        except ValueError:
            logger.warning("Skipping SCC line %d: bad timecode %r", lineno, fields[0])
            continue

        for offset, word in enumerate(fields[1:]):
            if not HEX_WORD_PATTERN.match(word):
                logger.warning("Skipping SCC word %r on line %d", word, lineno)
                continue
            units.append(InputUnit(data=bytes.fromhex(word), pts=frame_pts(start + offset)))

    logger.debug("Read %d units from SCC", len(units))
    return units
