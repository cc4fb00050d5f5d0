"""Shared pieces of the subtitle renderers.

WHY: WebVTT, SRT and raw text differ only in how a cue is written out.
Splitting timestamps and attaching timing metadata is the same for all
of them, so it lives here once.

HOW: SubtitleRenderer is a plain record (not a base class) describing one
format: its display name, file suffix, media type, a cue function and an
optional one-time header function. The registry in ``__init__`` maps each
Format to exactly one record.

RULES:
- Renderers are pure: same cue in, same bytes out
- Every OutputUnit carries the cue's start and duration as metadata
- Hours are never wrapped at 24
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from cea608tott.core.models import SECOND, Cue, OutputUnit


def split_time(ns: int) -> Tuple[int, int, int, int]:
    """Split a nanosecond timestamp into (hours, minutes, seconds, milliseconds).

    >>> split_time(3_723_456_000_000)
    (1, 2, 3, 456)
    """
    seconds, remainder = divmod(ns, SECOND)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return hours, minutes, seconds, remainder // 1_000_000


def cue_unit(cue: Cue, text: str) -> OutputUnit:
    """Wrap rendered cue text in an OutputUnit stamped with the cue's timing."""
    return OutputUnit(data=text.encode("utf-8"), pts=cue.start, duration=cue.duration)


@dataclass(frozen=True)
class SubtitleRenderer:
    """Description of one output format.

    Attributes:
        name: Human-readable format name, e.g. ``"WebVTT"``.
        suffix: File suffix for whole documents, e.g. ``".vtt"``.
        media_type: MIME type of a whole document.
        render_cue: Turns one Cue into one OutputUnit.
        render_header: Builds the one-time header unit at a timestamp,
                       or None for formats without a header.
        separator: Bytes placed between units when joining a document.
    """

    name: str
    suffix: str
    media_type: str
    render_cue: Callable[[Cue], OutputUnit]
    render_header: Optional[Callable[[int], OutputUnit]] = None
    separator: bytes = b""

    @property
    def requires_header(self) -> bool:
        return self.render_header is not None
