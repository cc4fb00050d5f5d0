"""Data model for one caption-to-timed-text stream.

WHY: The controller, the timing buffer, the negotiation step and the
renderers all pass the same handful of values around: raw input units,
rendered output units, the selected output format and the per-stream
state. Keeping them in one module gives every stage the same contract.

HOW: Small dataclasses and str-based enums:
  Format       — closed set of output formats (vtt, srt, raw)
  CaptionEvent — decoder outcome for one byte pair (ok, ready, clear)
  Caps         — media type name plus fixed fields, as negotiated
  InputUnit    — one CEA-608 data unit with its presentation timestamp
  OutputUnit   — one rendered unit with start timestamp and duration
  PendingText  — the buffered caption waiting for its end timestamp
  Cue          — one emitted subtitle (start, duration, text, index)

RULES:
- All timestamps and durations are integer nanoseconds
- An InputUnit without pts is legal to construct; the controller rejects it
- Cue indices are 1-based
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

SECOND = 1_000_000_000
"""Nanoseconds per second."""


class Format(str, enum.Enum):
    """Output subtitle formats.

    RULES:
    - vtt: WebVTT, one-time header before the first cue
    - srt: SubRip, numbered cues, no header
    - raw: caption text only, timing travels as unit metadata
    """

    VTT = "vtt"
    SRT = "srt"
    RAW = "raw"


class CaptionEvent(str, enum.Enum):
    """Outcome of feeding one byte pair to the caption decoder.

    RULES:
    - ok: the pair was absorbed, nothing visible changed
    - ready: a caption frame is now displayed and can be rendered
    - clear: the displayed caption was erased
    """

    OK = "ok"
    READY = "ready"
    CLEAR = "clear"


class StateChange(str, enum.Enum):
    """Lifecycle transitions of the host pipeline."""

    NULL_TO_READY = "null-to-ready"
    READY_TO_PAUSED = "ready-to-paused"
    PAUSED_TO_PLAYING = "paused-to-playing"
    PLAYING_TO_PAUSED = "playing-to-paused"
    PAUSED_TO_READY = "paused-to-ready"
    READY_TO_NULL = "ready-to-null"


@dataclass
class Caps:
    """A media type name with fixed fields, e.g. ``text/x-raw, format=utf8``."""

    name: str
    fields: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [self.name]
        for key, value in self.fields.items():
            parts.append("{}={}".format(key, value))
        return ", ".join(parts)


@dataclass
class InputUnit:
    """One CEA-608 data unit.

    Attributes:
        data: Raw payload. The first two bytes, big-endian, are the pair.
        pts: Presentation timestamp in nanoseconds, or None if unstamped.
    """

    data: bytes
    pts: Optional[int] = None


@dataclass
class OutputUnit:
    """One rendered unit handed downstream.

    Attributes:
        data: Rendered bytes (UTF-8 text).
        pts: Start timestamp in nanoseconds.
        duration: Duration in nanoseconds; None for the WebVTT header.
    """

    data: bytes
    pts: int
    duration: Optional[int] = None

    @property
    def text(self) -> str:
        return self.data.decode("utf-8")


@dataclass
class PendingText:
    """A decoded caption still waiting for the timestamp that ends it."""

    pts: int
    text: str


@dataclass
class Cue:
    """One subtitle cue ready to be rendered."""

    start: int
    duration: int
    text: str
    index: int

    @property
    def end(self) -> int:
        return self.start + self.duration


@dataclass
class CapsEvent:
    """Upstream announces its (fixed) input caps; triggers negotiation."""

    caps: Caps


@dataclass
class FlushStopEvent:
    """Mid-stream discontinuity; buffered text is discarded."""


@dataclass
class EosEvent:
    """End of stream; buffered text is emitted as a final cue."""

