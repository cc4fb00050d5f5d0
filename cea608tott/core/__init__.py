"""Core stream-processing modules.

WHY: The core package holds the state machine that turns decoder events
into timed subtitle cues. It is independent of how units arrive (file,
HTTP, pipeline) and of how output is consumed.

HOW: models.py defines the data types, timing.py the one-slot caption
buffer, negotiation.py the output format selection, state.py the
per-stream state and controller.py the driver for units and events.

RULES:
- No module here performs I/O
- controller.py is the only module that mutates StreamState
"""
