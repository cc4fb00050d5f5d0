"""Raw timed-text renderer: the caption text, nothing else.

Timing is carried only by the OutputUnit's pts and duration. Whole
documents put each cue on its own line.
"""

from cea608tott.core.models import Cue, OutputUnit
from cea608tott.formatters.base import SubtitleRenderer, cue_unit


def render_cue(cue: Cue) -> OutputUnit:
    return cue_unit(cue, cue.text)


RENDERER = SubtitleRenderer(
    name="Raw text",
    suffix=".txt",
    media_type="text/plain",
    render_cue=render_cue,
    separator=b"\r\n",
)
