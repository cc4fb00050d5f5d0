"""SubRip (SRT) renderer.

WHY: SRT is what most editing and playout tools accept. Every cue is
self-contained, so there is no header.

RULES:
- Index line is zero-padded to at least two digits ("01", "02", ..., "100")
- The start hour is NOT zero-padded while the end hour is
  ("0:00:01,000 --> 00:00:02,500"); existing consumers rely on this
- CRLF line endings, blank line after the text
"""

from cea608tott.core.models import Cue, OutputUnit
from cea608tott.formatters.base import SubtitleRenderer, cue_unit, split_time


def render_cue(cue: Cue) -> OutputUnit:
    h1, m1, s1, ms1 = split_time(cue.start)
    h2, m2, s2, ms2 = split_time(cue.end)
    text = (
        "{:02}\r\n"
        "{}:{:02}:{:02},{:03} --> {:02}:{:02}:{:02},{:03}\r\n"
        "{}\r\n"
        "\r\n"
    ).format(cue.index, h1, m1, s1, ms1, h2, m2, s2, ms2, cue.text)
    return cue_unit(cue, text)


RENDERER = SubtitleRenderer(
    name="SubRip",
    suffix=".srt",
    media_type="application/x-subrip",
    render_cue=render_cue,
)
