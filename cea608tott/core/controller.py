"""Stream controller: CEA-608 units and control events in, timed text out.

WHY: The decoder reports when a caption frame appears or is erased; the
output needs cues with a start and a duration. The controller sits
between the two, one unit at a time, and owns every piece of state that
makes that translation work: the negotiated format, the pending caption,
the header flag and the cue counter.

HOW: ``chain()`` handles a data unit, ``handle_event()`` a control event
(caps, flush-stop, end-of-stream) and ``change_state()`` lifecycle
transitions. All state changes happen under a lock; rendered units are
pushed to the Sink after the lock is released, so a blocking or failing
downstream never leaves the state half-updated.

RULES:
- A unit before negotiation raises NotNegotiatedError
- A unit without pts raises MissingTimestampError
- Units shorter than two bytes, decode failures and render failures are
  logged and dropped; they never fail the stream
- Ready: buffer the new caption, emit the one it replaces
- Clear: emit the buffered caption, buffer nothing
- Flush-stop: reset the decoder and drop the buffered caption silently
- End-of-stream: emit the buffered caption with duration 0
- The WebVTT header precedes the first cue only, once per stream
- READY_TO_PAUSED and PAUSED_TO_READY reset all state
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import List, Optional, Union

from cea608tott.core.errors import (
    DecodeError,
    MissingTimestampError,
    NotNegotiatedError,
    RenderError,
)
from cea608tott.core.models import (
    SECOND,
    CaptionEvent,
    Caps,
    CapsEvent,
    EosEvent,
    FlushStopEvent,
    Format,
    InputUnit,
    OutputUnit,
    PendingText,
    StateChange,
)
from cea608tott.core.negotiation import accepts_input, select_format
from cea608tott.core.state import StreamState
from cea608tott.core.timing import TimingBuffer
from cea608tott.formatters import RENDERERS, render

logger = logging.getLogger(__name__)

ControlEvent = Union[CapsEvent, FlushStopEvent, EosEvent]

_RESET_TRANSITIONS = (StateChange.READY_TO_PAUSED, StateChange.PAUSED_TO_READY)


class Sink(ABC):
    """Downstream consumer of rendered units.

    WHY: The controller must not know whether its output goes to a file,
    an HTTP response or another pipeline stage. A Sink is the only thing
    it talks to.

    RULES:
    - push() may block or raise; exceptions propagate to the caller
    - allowed_caps() returns None when downstream places no restriction
    - push_caps() and push_event() return False if downstream refuses
    """

    def allowed_caps(self) -> Optional[List[Caps]]:
        return None

    @abstractmethod
    def push(self, unit: OutputUnit) -> None:
        """Deliver one rendered unit."""

    def push_caps(self, caps: Caps) -> bool:
        return True

    def push_event(self, event: ControlEvent) -> bool:
        return True


class CollectingSink(Sink):
    """Sink that keeps everything it receives in memory."""

    def __init__(self, allowed: Optional[List[Caps]] = None) -> None:
        self.allowed = allowed
        self.units: List[OutputUnit] = []
        self.caps: Optional[Caps] = None
        self.events: List[ControlEvent] = []

    def allowed_caps(self) -> Optional[List[Caps]]:
        if self.allowed is None:
            return None
        return list(self.allowed)

    def push(self, unit: OutputUnit) -> None:
        self.units.append(unit)

    def push_caps(self, caps: Caps) -> bool:
        self.caps = caps
        return True

    def push_event(self, event: ControlEvent) -> bool:
        self.events.append(event)
        return True

    def drain(self) -> List[OutputUnit]:
        """Return and forget the units collected so far."""
        units, self.units = self.units, []
        return units


class StreamController:
    """Drives one logical caption stream.

    Calls for the same stream must arrive in order; the lock only
    guarantees that two overlapping calls never interleave their state
    changes.
    """

    def __init__(self, sink: Sink) -> None:
        self._sink = sink
        self._lock = threading.Lock()
        self._state = StreamState()

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def format(self) -> Optional[Format]:
        return self._state.format

    # ------------------------------------------------------------------
    # Data units
    # ------------------------------------------------------------------

    def chain(self, unit: InputUnit) -> None:
        """Process one CEA-608 data unit.

        Raises:
            NotNegotiatedError: If no output format has been negotiated.
            MissingTimestampError: If the unit has no pts.
        """
        logger.debug("Handling unit %r", unit)
        with self._lock:
            outputs = self._process(unit)
        for output in outputs:
            self._sink.push(output)

    def _process(self, unit: InputUnit) -> List[OutputUnit]:
        state = self._state
        fmt = state.format
        if fmt is None:
            logger.error("Not negotiated yet")
            raise NotNegotiatedError("No output format negotiated before the first data unit")

        if unit.pts is None:
            logger.error("Require timestamped units")
            raise MissingTimestampError("Data unit has no presentation timestamp")

        if len(unit.data) < 2:
            logger.error("Invalid closed caption packet size %d", len(unit.data))
            return []

        cc_data = (unit.data[0] << 8) | unit.data[1]
        try:
            event = state.decoder.decode(cc_data, unit.pts / SECOND)
        except DecodeError as exc:
            logger.error("Failed to decode closed caption packet: %s", exc)
            return []

        if event is CaptionEvent.OK:
            return []

        previous: Optional[PendingText]
        if event is CaptionEvent.CLEAR:
            logger.debug("Clearing previous closed caption packet")
            previous = state.timing.take()
        else:
            logger.debug("Have new closed caption packet")
            try:
                text = state.decoder.render_current_frame()
            except RenderError as exc:
                logger.error("Failed to convert caption frame to text: %s", exc)
                return []
            previous = state.timing.replace(unit.pts, text)

        if previous is None:
            logger.debug("Have no previous text")
            return []

        return self._emit(fmt, previous, unit.pts)

    def _emit(self, fmt: Format, previous: PendingText, end: int) -> List[OutputUnit]:
        state = self._state
        renderer = RENDERERS[fmt]
        outputs = []

        if not state.header_written:
            state.header_written = True
            if renderer.render_header is not None:
                outputs.append(renderer.render_header(previous.pts))

        cue = TimingBuffer.close(previous, end, state.next_index())
        outputs.append(render(fmt, cue))
        return outputs

    # ------------------------------------------------------------------
    # Control events
    # ------------------------------------------------------------------

    def handle_event(self, event: ControlEvent) -> bool:
        """Process a control event and forward it downstream where appropriate.

        Returns:
            False if the event was refused (unsupported input caps, or
            downstream refused the caps/event), True otherwise.

        Raises:
            NegotiationError: If downstream offers no caps at all.
        """
        logger.debug("Handling event %r", event)
        if isinstance(event, CapsEvent):
            return self._negotiate(event.caps)

        if isinstance(event, FlushStopEvent):
            with self._lock:
                self._state.decoder.reset()
                self._state.timing.discard()
            return self._sink.push_event(event)

        if isinstance(event, EosEvent):
            with self._lock:
                outputs = self._drain_on_eos()
            for output in outputs:
                self._sink.push(output)
            return self._sink.push_event(event)

        return self._sink.push_event(event)

    def _negotiate(self, input_caps: Caps) -> bool:
        with self._lock:
            if self._state.format is not None:
                return True

            if not accepts_input(input_caps):
                logger.error("Unsupported input caps %s", input_caps)
                return False

            fmt, output_caps = select_format(self._sink.allowed_caps())
            self._state.format = fmt

        logger.info("Negotiated %s output with caps %s", fmt.value, output_caps)
        return self._sink.push_caps(output_caps)

    def _drain_on_eos(self) -> List[OutputUnit]:
        state = self._state
        previous = state.timing.take()
        if previous is None or state.format is None:
            return []
        logger.debug("Outputting final text on EOS")
        return self._emit(state.format, previous, previous.pts)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def change_state(self, transition: StateChange) -> None:
        """Apply a lifecycle transition; entering or leaving PAUSED resets everything."""
        logger.debug("Changing state %s", transition.value)
        if transition in _RESET_TRANSITIONS:
            with self._lock:
                self._state = StreamState()
