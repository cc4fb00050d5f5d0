"""In-memory store of live caption streams with TTL cleanup.

WHY: HTTP clients feed a live stream one unit per request, so the
controller for that stream has to outlive a single request. A small
in-memory store is enough for a single-process service; a stream is
cheap to recreate if the service restarts.

HOW: Two components work together:
  StreamSession — one StreamController, its CollectingSink and bookkeeping
  StreamStore   — thread-safe dict of sessions with create/get/list/delete
                  and expiry of idle sessions

RULES:
- Store mutations are protected by threading.Lock
- Each session has its own re-entrant lock; requests for one stream never
  interleave, and a failing request may delete its own stream
- A session is negotiated on creation (reset, then caps for its format)
- Deleting a session applies the PAUSED_TO_READY reset
- Sessions idle longer than the TTL are removed by cleanup_expired()
- Stream IDs are UUID4 hex strings
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from cea608tott.config import MAX_STREAMS, STREAM_TTL_SECONDS
from cea608tott.core.controller import CollectingSink, StreamController
from cea608tott.core.models import Caps, CapsEvent, Format, StateChange
from cea608tott.core.negotiation import FORMAT_CAPS, SINK_CAPS

logger = logging.getLogger(__name__)


@dataclass
class StreamSession:
    """One live stream exposed over HTTP.

    RULES:
    - id: UUID4 hex, immutable after creation
    - caps: the fixed caps announced downstream during negotiation
    - updated_at: bumped on every request, drives TTL expiry
    - units_in / units_out: counters for monitoring only
    """

    id: str
    format: Format
    controller: StreamController
    sink: CollectingSink
    caps: Caps
    created_at: float
    updated_at: float
    units_in: int = 0
    units_out: int = 0
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)


class StreamStore:
    """Thread-safe in-memory store for live streams."""

    def __init__(
        self,
        ttl_seconds: int = STREAM_TTL_SECONDS,
        max_streams: int = MAX_STREAMS,
    ) -> None:
        self._streams: Dict[str, StreamSession] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_streams = max_streams

    def create_stream(self, fmt: Format) -> StreamSession:
        """Create and negotiate a new stream producing ``fmt``.

        Raises:
            ValueError: If max_streams sessions already exist.
        """
        sink = CollectingSink(allowed=[FORMAT_CAPS[fmt]])
        controller = StreamController(sink)
        controller.change_state(StateChange.READY_TO_PAUSED)
        controller.handle_event(CapsEvent(SINK_CAPS))

        with self._lock:
            if len(self._streams) >= self.max_streams:
                raise ValueError(
                    "Maximum number of concurrent streams ({}) reached".format(
                        self.max_streams
                    )
                )

            stream_id = uuid.uuid4().hex
            now = time.time()
            session = StreamSession(
                id=stream_id,
                format=fmt,
                controller=controller,
                sink=sink,
                caps=sink.caps,
                created_at=now,
                updated_at=now,
            )
            self._streams[stream_id] = session

        logger.info("Created %s stream %s", fmt.value, stream_id)
        return session

    def get_stream(self, stream_id: str) -> Optional[StreamSession]:
        """Return the session and bump its activity time, or None if unknown."""
        with self._lock:
            session = self._streams.get(stream_id)
            if session is not None:
                session.updated_at = time.time()
            return session

    def list_streams(self) -> List[StreamSession]:
        with self._lock:
            return sorted(self._streams.values(), key=lambda s: s.created_at)

    def delete_stream(self, stream_id: str) -> bool:
        """Remove a stream and reset its controller. False if unknown."""
        with self._lock:
            session = self._streams.pop(stream_id, None)

        if session is None:
            return False

        with session.lock:
            session.controller.change_state(StateChange.PAUSED_TO_READY)
        logger.info("Deleted stream %s", stream_id)
        return True

    def cleanup_expired(self) -> int:
        """Remove streams idle for longer than the TTL; return how many."""
        now = time.time()
        expired: List[StreamSession] = []

        with self._lock:
            for stream_id, session in list(self._streams.items()):
                if now - session.updated_at > self._ttl_seconds:
                    expired.append(self._streams.pop(stream_id))

        for session in expired:
            with session.lock:
                session.controller.change_state(StateChange.PAUSED_TO_READY)
            logger.info("Expired stream %s (idle %.0fs)", session.id, now - session.updated_at)

        return len(expired)
