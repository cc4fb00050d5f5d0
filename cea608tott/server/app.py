"""FastAPI application exposing one-shot conversion and live streams.

WHY: Playout systems, ingest tools and curl users need the converter over
HTTP: either a whole caption file in, a subtitle document out, or a live
stream fed unit by unit with timed text coming back as soon as each cue
is known. FastAPI provides request validation and OpenAPI docs.

HOW: A single FastAPI app exposes endpoints grouped by tags. POST
/conversions accepts a multipart upload and runs it through one complete
stream. The /streams endpoints wrap a StreamController per session, kept
in a StreamStore singleton; every request returns the units the
controller emitted while handling it.

RULES:
- All endpoints have OpenAPI descriptions on every parameter and response
- Error responses use a consistent ErrorResponse schema
- Stream-fatal errors return 422 and remove the stream
- The stream store is a singleton created at import; idle streams are
  expired by a periodic task started in the lifespan
- Python 3.9+ compatible (no match/case, no PEP 604 unions at runtime)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, List, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from cea608tott import __version__
from cea608tott.adapters import ADAPTERS
from cea608tott.config import API_HOST, API_PORT, INPUT_SUFFIXES, configure_logging
from cea608tott.convert import convert_document
from cea608tott.core.errors import StreamError
from cea608tott.core.models import EosEvent, FlushStopEvent, Format, InputUnit, OutputUnit
from cea608tott.core.negotiation import FORMAT_CAPS
from cea608tott.formatters import RENDERERS
from cea608tott.server.models import (
    ErrorResponse,
    FormatInfo,
    HealthResponse,
    OutputUnitModel,
    StreamCreateRequest,
    StreamResponse,
    UnitRequest,
    UnitsResponse,
)
from cea608tott.server.streams import StreamSession, StreamStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

stream_store = StreamStore()


async def _periodic_cleanup() -> None:
    """Expire idle streams every minute."""
    while True:
        await asyncio.sleep(60)
        stream_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="CEA-608 Timed Text API",
    description=(
        "REST API converting CEA-608 closed captions into WebVTT, SubRip "
        "or raw timed text. Convert a whole caption file in one request, "
        "or open a stream and push caption units as they arrive."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _stream_to_response(session: StreamSession) -> StreamResponse:
    """Convert an internal StreamSession to a StreamResponse model."""
    return StreamResponse(
        id=session.id,
        format=session.format,
        caps=str(session.caps),
        created_at=session.created_at,
        units_in=session.units_in,
        units_out=session.units_out,
    )


def _unit_to_model(unit: OutputUnit) -> OutputUnitModel:
    return OutputUnitModel(text=unit.text, pts=unit.pts, duration=unit.duration)


def _parse_format(value: str) -> Format:
    """Raise HTTPException if the output format is unknown."""
    try:
        return Format(value.strip().lower())
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail="Unknown output format '{}'. Available: {}".format(
                value, ", ".join(f.value for f in Format)
            ),
        )


def _get_session(stream_id: str) -> StreamSession:
    session = stream_store.get_stream(stream_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Stream not found: {}".format(stream_id))
    return session


def _fail_stream(session: StreamSession, exc: StreamError) -> HTTPException:
    """Remove a stream after a fatal error and build the 422 response."""
    logger.warning("Stream %s failed: %s", session.id, exc)
    stream_store.delete_stream(session.id)
    return HTTPException(status_code=422, detail=str(exc))


def _units_response(session: StreamSession) -> UnitsResponse:
    units = session.sink.drain()
    session.units_out += len(units)
    return UnitsResponse(
        stream_id=session.id,
        units=[_unit_to_model(u) for u in units],
    )


# ---------------------------------------------------------------------------
# Endpoints: Conversions
# ---------------------------------------------------------------------------


@app.post(
    "/conversions",
    tags=["conversions"],
    summary="Convert a caption file",
    description=(
        "Upload an SCC file or a raw CEA-608 byte-pair file and receive the "
        "complete subtitle document in the requested format."
    ),
    responses={
        200: {"description": "Converted document", "content": {"text/plain": {}}},
        400: {"model": ErrorResponse, "description": "Unknown format or unreadable input"},
        422: {"model": ErrorResponse, "description": "Stream failed during conversion"},
    },
)
async def create_conversion(
    file: Annotated[
        UploadFile,
        File(description="Caption file (.scc or raw CEA-608 byte pairs)."),
    ],
    format: Annotated[
        str,
        Form(description="Output format: vtt, srt or raw."),
    ] = "vtt",
    input_format: Annotated[
        Optional[str],
        Form(description="Input format: scc or raw. Defaults to the file suffix."),
    ] = None,
) -> Response:
    fmt = _parse_format(format)

    # Sanitize filename to prevent path traversal
    filename = Path(file.filename or "captions").name
    stem = Path(filename).stem or "captions"
    if input_format is None:
        input_format = INPUT_SUFFIXES.get(Path(filename).suffix.lower(), "raw")
    if input_format not in ADAPTERS:
        raise HTTPException(
            status_code=400,
            detail="Unknown input format '{}'. Available: {}".format(
                input_format, ", ".join(sorted(ADAPTERS))
            ),
        )

    content = await file.read()
    try:
        units = ADAPTERS[input_format](content)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        document = convert_document(units, fmt)
    except StreamError as exc:
        logger.warning("Conversion of %s failed: %s", filename, exc)
        raise HTTPException(status_code=422, detail=str(exc))

    renderer = RENDERERS[fmt]
    logger.info("Converted %s (%d units) to %s", filename, len(units), fmt.value)
    return Response(
        content=document,
        media_type=renderer.media_type,
        headers={
            "Content-Disposition": 'attachment; filename="{}{}"'.format(stem, renderer.suffix)
        },
    )


# ---------------------------------------------------------------------------
# Endpoints: Streams
# ---------------------------------------------------------------------------


@app.post(
    "/streams",
    response_model=StreamResponse,
    status_code=201,
    tags=["streams"],
    summary="Open a live caption stream",
    description=(
        "Create a stream producing the given output format. The stream is "
        "negotiated immediately; push units to /streams/{id}/units."
    ),
    responses={
        429: {"model": ErrorResponse, "description": "Too many concurrent streams"},
    },
)
async def create_stream(body: StreamCreateRequest) -> StreamResponse:
    try:
        session = stream_store.create_stream(body.format)
    except ValueError as exc:
        raise HTTPException(status_code=429, detail=str(exc))
    return _stream_to_response(session)


@app.get(
    "/streams",
    response_model=List[StreamResponse],
    tags=["streams"],
    summary="List live streams",
    description="Returns all open streams, oldest first.",
)
async def list_streams() -> List[StreamResponse]:
    return [_stream_to_response(s) for s in stream_store.list_streams()]


@app.get(
    "/streams/{stream_id}",
    response_model=StreamResponse,
    tags=["streams"],
    summary="Get stream state",
    description="Returns the negotiated format and unit counters of a stream.",
    responses={
        404: {"model": ErrorResponse, "description": "Stream not found"},
    },
)
async def get_stream(stream_id: str) -> StreamResponse:
    return _stream_to_response(_get_session(stream_id))


@app.post(
    "/streams/{stream_id}/units",
    response_model=UnitsResponse,
    tags=["streams"],
    summary="Push one caption unit",
    description=(
        "Push a CEA-608 data unit with its presentation timestamp. Returns "
        "the output units completed by this unit, often none."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Stream not found"},
        422: {"model": ErrorResponse, "description": "Stream failed (e.g. missing pts)"},
    },
)
def push_unit(stream_id: str, body: UnitRequest) -> UnitsResponse:
    session = _get_session(stream_id)
    with session.lock:
        session.units_in += 1
        try:
            session.controller.chain(InputUnit(data=body.payload(), pts=body.pts))
        except StreamError as exc:
            raise _fail_stream(session, exc)
        return _units_response(session)


@app.post(
    "/streams/{stream_id}/flush",
    response_model=UnitsResponse,
    tags=["streams"],
    summary="Flush a stream",
    description=(
        "Discard the pending caption and reset the decoder, as after a "
        "seek. Nothing is emitted."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Stream not found"},
    },
)
def flush_stream(stream_id: str) -> UnitsResponse:
    session = _get_session(stream_id)
    with session.lock:
        session.controller.handle_event(FlushStopEvent())
        return _units_response(session)


@app.post(
    "/streams/{stream_id}/eos",
    response_model=UnitsResponse,
    tags=["streams"],
    summary="End a stream",
    description=(
        "Signal end-of-stream. The pending caption, if any, is emitted with "
        "zero duration."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Stream not found"},
    },
)
def end_stream(stream_id: str) -> UnitsResponse:
    session = _get_session(stream_id)
    with session.lock:
        session.controller.handle_event(EosEvent())
        return _units_response(session)


@app.delete(
    "/streams/{stream_id}",
    status_code=204,
    tags=["streams"],
    summary="Close a stream",
    description="Reset the stream and remove it. Pending text is discarded.",
    responses={
        404: {"model": ErrorResponse, "description": "Stream not found"},
    },
)
async def delete_stream(stream_id: str) -> Response:
    deleted = stream_store.delete_stream(stream_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Stream not found: {}".format(stream_id))
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Formats
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List available output formats",
    description=(
        "Returns all supported output formats with their identifiers, "
        "caps, file suffixes and media types."
    ),
)
async def list_formats() -> List[FormatInfo]:
    result = []
    for fmt in Format:
        renderer = RENDERERS[fmt]
        result.append(FormatInfo(
            key=fmt.value,
            name=renderer.name,
            caps=str(FORMAT_CAPS[fmt]),
            suffix=renderer.suffix,
            media_type=renderer.media_type,
            header=renderer.requires_header,
        ))
    return result


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the cea608tott-api console script."""
    import uvicorn

    configure_logging()
    uvicorn.run(app, host=API_HOST, port=API_PORT)
