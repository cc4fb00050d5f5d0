"""Error taxonomy for the conversion stage.

WHY: Callers must be able to tell a stream that cannot continue apart
from a single bad unit and from a normal end of stream. Distinct
exception types make that decision a plain ``except`` clause.

HOW: Two families:
  StreamError  — stream-fatal; raised to the caller, who halts the stream
  DecodeError / RenderError — unit-local; raised by the caption decoder
                 and always caught by the controller

RULES:
- StreamError subclasses carry a message naming the missing precondition
- DecodeError and RenderError never escape StreamController
- Unknown negotiated caps are a contract violation (AssertionError),
  not a StreamError
"""


class StreamError(Exception):
    """Base class for errors that abort processing of a stream."""


class NotNegotiatedError(StreamError):
    """A data unit arrived before an output format was negotiated."""


class MissingTimestampError(StreamError):
    """A data unit arrived without a presentation timestamp."""


class NegotiationError(StreamError):
    """Downstream offered no caps the stream could be configured with."""


class DecodeError(Exception):
    """The caption decoder rejected a byte pair (e.g. parity failure)."""


class RenderError(Exception):
    """The caption decoder could not render its displayed frame to text."""
