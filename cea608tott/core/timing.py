"""Timing buffer: one caption held until the next change closes it.

WHY: The caption decoder says *when* a frame becomes visible or is
erased, never how long it stays on screen. A cue's duration is only
known once the next change arrives, so every caption is held back by
exactly one update.

HOW: TimingBuffer holds at most one PendingText. ``replace()`` installs a
newly displayed caption and hands back the one it displaces; ``take()``
empties the buffer on an erase or at end of stream. ``close()`` turns a
displaced caption into a Cue ending at the closing timestamp.

RULES:
- At most one pending caption at any time
- duration = max(0, closing pts - caption pts), never negative
- ``discard()`` drops pending text without producing a cue (flush-stop)
"""

from __future__ import annotations

from typing import Optional

from cea608tott.core.models import Cue, PendingText


def cue_duration(start: int, end: int) -> int:
    """Duration from ``start`` to ``end``, floored at zero for non-monotonic input."""
    if end > start:
        return end - start
    return 0


class TimingBuffer:
    """Single-slot buffer for the caption that is currently on screen."""

    def __init__(self) -> None:
        self.pending: Optional[PendingText] = None

    def replace(self, pts: int, text: str) -> Optional[PendingText]:
        """Buffer ``text`` shown at ``pts`` and return the caption it replaces."""
        previous = self.pending
        self.pending = PendingText(pts=pts, text=text)
        return previous

    def take(self) -> Optional[PendingText]:
        """Remove and return the buffered caption, if any."""
        previous = self.pending
        self.pending = None
        return previous

    def discard(self) -> None:
        self.pending = None

    @staticmethod
    def close(previous: PendingText, end: int, index: int) -> Cue:
        """Build the cue for ``previous`` ending at ``end``.

        Args:
            previous: Caption displaced by the current update.
            end: Timestamp of the update that ends it (ns).
            index: Sequence index to assign to the cue.

        Returns:
            Cue starting at the caption's own timestamp.
        """
        return Cue(
            start=previous.pts,
            duration=cue_duration(previous.pts, end),
            text=previous.text,
            index=index,
        )
