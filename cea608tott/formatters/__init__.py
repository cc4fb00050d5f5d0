"""Subtitle renderer registry, one renderer per output Format.

WHY: The controller, the CLI and the HTTP API need a single lookup from
the negotiated Format to the code that writes it. The set of formats is
closed, so the registry is a plain dict keyed by the enum and checked
for completeness on import.

HOW: RENDERERS maps Format to a SubtitleRenderer record. ``render()``
dispatches one cue; ``join_units()`` concatenates rendered units into a
complete document.

RULES:
- Every Format member has exactly one renderer
- Adding a format means a new Format member, a new module and one line here
"""

from __future__ import annotations

from typing import Dict, Iterable

from cea608tott.core.models import Cue, Format, OutputUnit
from cea608tott.formatters import raw, srt, vtt
from cea608tott.formatters.base import SubtitleRenderer

RENDERERS: Dict[Format, SubtitleRenderer] = {
    Format.VTT: vtt.RENDERER,
    Format.SRT: srt.RENDERER,
    Format.RAW: raw.RENDERER,
}

_missing = set(Format) - set(RENDERERS)
if _missing:
    raise ImportError("No renderer registered for {}".format(sorted(f.value for f in _missing)))


def render(fmt: Format, cue: Cue) -> OutputUnit:
    """Render one cue in the given format."""
    return RENDERERS[fmt].render_cue(cue)


def join_units(fmt: Format, units: Iterable[OutputUnit]) -> bytes:
    """Concatenate rendered units (header included) into one document."""
    return RENDERERS[fmt].separator.join(unit.data for unit in units)
