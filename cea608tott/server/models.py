"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: Each endpoint pair (request + response) has its own model. Output
formats reuse the core Format enum so the API and the controller can
never disagree on the set of formats.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Unit payloads travel as hex strings; timestamps as integer nanoseconds
- Response models never expose controller internals
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from cea608tott.core.models import Format


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class StreamCreateRequest(BaseModel):
    """Body of POST /streams."""

    format: Format = Field(description="Output format for the whole stream.")


class UnitRequest(BaseModel):
    """One CEA-608 data unit pushed into a live stream.

    RULES:
    - data is hex; the first two bytes are the caption pair
    - pts may be omitted, which fails the stream (timestamps are mandatory)
    """

    data: str = Field(description="Unit payload as hex, e.g. '9420'.")
    pts: Optional[int] = Field(
        default=None,
        description="Presentation timestamp in nanoseconds.",
    )

    @field_validator("data")
    @classmethod
    def _check_hex(cls, value: str) -> str:
        value = value.replace(" ", "")
        try:
            bytes.fromhex(value)
        except ValueError:
            raise ValueError("data must be an even-length hex string")
        return value

    def payload(self) -> bytes:
        return bytes.fromhex(self.data)

    model_config = {"json_schema_extra": {
        "examples": [
            {"data": "9420", "pts": 1000000000},
        ]
    }}


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class OutputUnitModel(BaseModel):
    """One rendered output unit."""

    text: str = Field(description="Rendered text (header, cue or raw caption).")
    pts: int = Field(description="Start timestamp in nanoseconds.")
    duration: Optional[int] = Field(
        default=None,
        description="Duration in nanoseconds; absent for the WebVTT header.",
    )


class UnitsResponse(BaseModel):
    """Units emitted while handling one request."""

    stream_id: str = Field(description="Stream the units belong to.")
    units: List[OutputUnitModel] = Field(description="Emitted units, in order.")


class StreamResponse(BaseModel):
    """State of a live stream."""

    id: str = Field(description="Unique stream identifier.")
    format: Format = Field(description="Negotiated output format.")
    caps: str = Field(description="Fixed caps announced downstream.")
    created_at: float = Field(description="Creation timestamp (Unix epoch seconds).")
    units_in: int = Field(description="Data units received.")
    units_out: int = Field(description="Output units emitted.")

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "id": "550e8400e29b41d4a716446655440000",
                "format": "vtt",
                "caps": "application/x-subtitle-vtt",
                "created_at": 1739959200.0,
                "units_in": 0,
                "units_out": 0,
            }
        ]
    }}


class FormatInfo(BaseModel):
    """Description of an available output format."""

    key: str = Field(description="Format identifier used in API requests.")
    name: str = Field(description="Human-readable format name.")
    caps: str = Field(description="Caps announced downstream for this format.")
    suffix: str = Field(description="File suffix of converted documents.")
    media_type: str = Field(description="MIME type of converted documents.")
    header: bool = Field(description="Whether a one-time header precedes the first cue.")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
