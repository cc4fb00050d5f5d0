"""WebVTT renderer.

RULES:
- Header "WEBVTT" plus a blank line, CRLF line endings, emitted once
- Cue: "HH:MM:SS.mmm --> HH:MM:SS.mmm", text, blank line; no identifier
"""

from cea608tott.core.models import Cue, OutputUnit
from cea608tott.formatters.base import SubtitleRenderer, cue_unit, split_time

HEADER = "WEBVTT\r\n\r\n"


def render_header(pts: int) -> OutputUnit:
    return OutputUnit(data=HEADER.encode("utf-8"), pts=pts)


def format_timestamp(ns: int) -> str:
    return "{:02}:{:02}:{:02}.{:03}".format(*split_time(ns))


def render_cue(cue: Cue) -> OutputUnit:
    text = "{} --> {}\r\n{}\r\n\r\n".format(
        format_timestamp(cue.start),
        format_timestamp(cue.end),
        cue.text,
    )
    return cue_unit(cue, text)


RENDERER = SubtitleRenderer(
    name="WebVTT",
    suffix=".vtt",
    media_type="text/vtt",
    render_cue=render_cue,
    render_header=render_header,
)
