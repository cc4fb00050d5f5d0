"""CEA-608 to timed text: closed captions in, WebVTT/SRT/plain text out.

WHY: Broadcast closed captions arrive as a stream of 16-bit CEA-608 byte
pairs. The decoder only reports when a caption frame becomes visible or
is erased, so turning that into subtitle cues needs a small state machine
that holds each caption until the next change tells it how long the
caption stayed on screen.

HOW: Four stages: decode (caption frame), buffer (timing), negotiate
(format selection), render (formatters). The stream controller drives all
of them for one logical stream, one unit or event at a time.

RULES:
- Exactly one output cue per logical caption change
- A cue's duration is only known when the next change arrives
- Output format is fixed once per stream and never changes afterwards
"""

__version__ = "0.1.0"
