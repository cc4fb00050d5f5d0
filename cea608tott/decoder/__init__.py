"""CEA-608 caption decoding.

WHY: The timed-text stage treats decoding as a black box with three
operations: decode a pair, render the displayed frame, reset. This
package provides that box.

HOW: eia608.py classifies byte pairs and maps characters; caption_frame.py
keeps the screen memories and reports ready/clear moments.

RULES:
- Callers only use CaptionFrame.decode(), to_text() and reset()
- Nothing here knows about timestamps beyond the value passed in
"""

from cea608tott.decoder.caption_frame import CaptionFrame
from cea608tott.decoder.eia608 import add_parity

__all__ = ["CaptionFrame", "add_parity"]
