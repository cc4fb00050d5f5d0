"""Per-stream mutable state.

WHY: Everything that must be forgotten on a full reset lives in one
object, so a reset is a single assignment and cannot miss a field.

RULES:
- format: None until negotiated, then fixed for the stream's lifetime
- header_written: True once the first cue has been emitted
- timing: holds at most one pending caption
- sequence_index: index of the next cue, starts at 1
- decoder: the caption frame owned by this stream
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from cea608tott.core.models import Format, PendingText
from cea608tott.core.timing import TimingBuffer
from cea608tott.decoder.caption_frame import CaptionFrame


@dataclass
class StreamState:
    """Mutable per-stream state, owned by exactly one StreamController."""

    format: Optional[Format] = None
    header_written: bool = False
    timing: TimingBuffer = field(default_factory=TimingBuffer)
    sequence_index: int = 1
    decoder: CaptionFrame = field(default_factory=CaptionFrame)

    @property
    def pending(self) -> Optional[PendingText]:
        return self.timing.pending

    def next_index(self) -> int:
        """Return the current sequence index and advance it."""
        index = self.sequence_index
        self.sequence_index += 1
        return index
