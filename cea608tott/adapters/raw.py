"""Raw CEA-608 byte-pair streams (``closedcaption/x-cea-608, format=raw``).

RULES:
- Two bytes per frame, frames at SCC_FRAME_RATE unless told otherwise
- Unit n is stamped at n frames from zero
- An odd trailing byte becomes a one-byte unit (the controller drops it)
"""

from __future__ import annotations

from typing import List

from cea608tott.config import SCC_FRAME_RATE
from cea608tott.core.models import SECOND, InputUnit


def frame_pts(frame: int, frame_rate: float = SCC_FRAME_RATE) -> int:
    """Timestamp in nanoseconds of frame number ``frame``."""
    return int(round(frame * SECOND / frame_rate))


def read_raw(data: bytes, frame_rate: float = SCC_FRAME_RATE) -> List[InputUnit]:
    units = []
    for frame, offset in enumerate(range(0, len(data), 2)):
        units.append(InputUnit(data=data[offset:offset + 2], pts=frame_pts(frame, frame_rate)))
    return units
