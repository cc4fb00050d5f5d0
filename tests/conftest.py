"""Shared test fixtures for the cea608tott test suite.

WHY: The decoder, controller, driver and API tests all need the same
CEA-608 building blocks: parity-encoded byte pairs for a pop-on caption,
a negotiated controller, and a scripted decoder that returns exactly the
events a scenario calls for.

HOW: Module-level helpers build byte pairs (``pairs_for_text``,
``pop_on``) and units; fixtures hand out a negotiated controller per
format. ``ScriptedDecoder`` stands in for CaptionFrame when a test wants
to dictate decoder outcomes directly.

RULES:
- Every pair helper returns transmitted pairs (odd parity already set)
- Timestamps in helpers are seconds; units carry nanoseconds
- ScriptedDecoder honours the decode/render_current_frame/reset contract
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import pytest

from cea608tott.core.controller import CollectingSink, StreamController
from cea608tott.core.models import (
    SECOND,
    CaptionEvent,
    CapsEvent,
    Format,
    InputUnit,
    StateChange,
)
from cea608tott.core.negotiation import FORMAT_CAPS, SINK_CAPS
from cea608tott.decoder import add_parity

# ---------------------------------------------------------------------------
# Byte-pair helpers
# ---------------------------------------------------------------------------

RCL = add_parity(0x1420)
RDC = add_parity(0x1429)
RU2 = add_parity(0x1425)
CR = add_parity(0x142D)
EDM = add_parity(0x142C)
ENM = add_parity(0x142E)
EOC = add_parity(0x142F)
BS = add_parity(0x1421)
PAC_ROW15 = add_parity(0x1470)
PADDING = 0x8080


def pairs_for_text(text: str) -> List[int]:
    """Encode basic characters two per pair, padding an odd tail with 0x00."""
    pairs = []
    for i in range(0, len(text), 2):
        chunk = text[i:i + 2]
        high = ord(chunk[0])
        low = ord(chunk[1]) if len(chunk) == 2 else 0
        pairs.append(add_parity((high << 8) | low))
    return pairs


def pop_on(text: str) -> List[int]:
    """Pairs for one complete pop-on caption: RCL, PAC, text, EOC."""
    return [RCL, PAC_ROW15] + pairs_for_text(text) + [EOC]


def unit(pair: int, seconds: Optional[float]) -> InputUnit:
    """One two-byte unit stamped ``seconds`` into the stream (None: no pts)."""
    pts = None if seconds is None else int(round(seconds * SECOND))
    return InputUnit(data=bytes([pair >> 8, pair & 0xFF]), pts=pts)


def units_at(pairs: List[int], seconds: float) -> List[InputUnit]:
    return [unit(pair, seconds) for pair in pairs]


# ---------------------------------------------------------------------------
# Scripted decoder
# ---------------------------------------------------------------------------


class ScriptedDecoder:
    """Decoder double that replays a fixed list of (event, text) outcomes.

    Each decode() call consumes the next entry. A READY entry's text is
    what render_current_frame() returns afterwards. Entries may also be
    exception instances, which decode() raises.
    """

    def __init__(self, script: List[Tuple[object, Optional[str]]]) -> None:
        self.script = list(script)
        self.calls: List[Tuple[int, float]] = []
        self.resets = 0
        self._text: Optional[str] = None
        self.render_error: Optional[Exception] = None

    def decode(self, cc_data: int, timestamp: float) -> CaptionEvent:
        self.calls.append((cc_data, timestamp))
        event, text = self.script.pop(0)
        if isinstance(event, Exception):
            raise event
        if event is CaptionEvent.READY:
            self._text = text
        return event

    def render_current_frame(self) -> str:
        if self.render_error is not None:
            raise self.render_error
        return self._text or ""

    def reset(self) -> None:
        self.resets += 1
        self._text = None


def negotiate(fmt: Format) -> Tuple[StreamController, CollectingSink]:
    """Controller whose downstream only accepts ``fmt``, already negotiated."""
    sink = CollectingSink(allowed=[FORMAT_CAPS[fmt]])
    controller = StreamController(sink)
    controller.change_state(StateChange.READY_TO_PAUSED)
    assert controller.handle_event(CapsEvent(SINK_CAPS))
    return controller, sink


def scripted(fmt: Format, script) -> Tuple[StreamController, CollectingSink, ScriptedDecoder]:
    """Negotiated controller with its decoder swapped for a ScriptedDecoder."""
    controller, sink = negotiate(fmt)
    decoder = ScriptedDecoder(script)
    controller.state.decoder = decoder
    return controller, sink, decoder


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def vtt_stream():
    return negotiate(Format.VTT)


@pytest.fixture
def srt_stream():
    return negotiate(Format.SRT)


@pytest.fixture
def raw_stream():
    return negotiate(Format.RAW)


def _scc_line(timecode: str, pairs: List[int]) -> str:
    return "{}\t{}".format(timecode, " ".join("{:04x}".format(p) for p in pairs))


@pytest.fixture
def sample_scc() -> bytes:
    """Two pop-on captions and an erase, as a Scenarist SCC document.

    HELLO appears at 00:00:01;00, WORLD at 00:00:02;15, and the screen
    is erased at 00:00:04;00.
    """
    lines = [
        "Scenarist_SCC V1.0",
        "",
        _scc_line("00:00:00;20", [RCL, RCL, PAC_ROW15, PAC_ROW15] + pairs_for_text("HELLO")),
        "",
        _scc_line("00:00:01;00", [EOC, EOC]),
        "",
        _scc_line("00:00:01;20", [RCL, RCL, PAC_ROW15, PAC_ROW15] + pairs_for_text("WORLD")),
        "",
        _scc_line("00:00:02;15", [EOC, EOC]),
        "",
        _scc_line("00:00:04;00", [EDM, EDM]),
        "",
    ]
    return "\n".join(lines).encode("ascii")
