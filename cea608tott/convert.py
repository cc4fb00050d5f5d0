"""One-shot conversion of a complete unit sequence.

WHY: The CLI and the HTTP conversion endpoint both have all input units
up front and want a finished document. They should run a stream exactly
the way a live pipeline would, so the same controller code path is used.

HOW: ``convert_units()`` builds a controller around a CollectingSink that
only allows the requested format, then replays a full stream lifecycle:
reset, caps, every unit, end-of-stream, reset. ``convert_document()``
adds the final join into one byte string.

RULES:
- Stream-fatal errors (StreamError subclasses) propagate unchanged
- The returned units include the WebVTT header when one was emitted
"""

from __future__ import annotations

from typing import Iterable, List

from cea608tott.core.controller import CollectingSink, StreamController
from cea608tott.core.models import CapsEvent, EosEvent, Format, InputUnit, OutputUnit, StateChange
from cea608tott.core.negotiation import FORMAT_CAPS, SINK_CAPS
from cea608tott.formatters import join_units


def convert_units(units: Iterable[InputUnit], fmt: Format) -> List[OutputUnit]:
    """Run ``units`` through a fresh stream producing ``fmt`` output."""
    sink = CollectingSink(allowed=[FORMAT_CAPS[fmt]])
    controller = StreamController(sink)

    controller.change_state(StateChange.READY_TO_PAUSED)
    controller.handle_event(CapsEvent(SINK_CAPS))
    for unit in units:
        controller.chain(unit)
    controller.handle_event(EosEvent())
    controller.change_state(StateChange.PAUSED_TO_READY)

    return sink.units


def convert_document(units: Iterable[InputUnit], fmt: Format) -> bytes:
    """Convert ``units`` and join the output into a single document."""
    return join_units(fmt, convert_units(units, fmt))
