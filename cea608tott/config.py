"""Configuration defaults, logging setup, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. The CLI and the HTTP API read the same defaults,
so a deployment can change the output format or log level in one place.

HOW: python-dotenv loads the .env file on import. Constants are defined
at module level and every one of them can be overridden through an
environment variable with the ``CEA608TOTT_`` prefix.

RULES:
- DEFAULT_FORMAT must be one of "vtt", "srt", "raw"
- LOG_LEVEL accepts any name understood by the logging module
- Stream sessions are bounded by MAX_STREAMS and expire after
  STREAM_TTL_SECONDS of inactivity
- configure_logging() is called by entry points only, never on import
"""

from __future__ import annotations

import logging
import os
from typing import Dict, Optional

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Conversion defaults
# ---------------------------------------------------------------------------

DEFAULT_FORMAT = os.getenv("CEA608TOTT_DEFAULT_FORMAT", "vtt").lower()

SCC_FRAME_RATE = 30000 / 1001
"""Frame rate of SCC files and raw CEA-608 byte-pair streams (29.97 fps)."""

INPUT_SUFFIXES: Dict[str, str] = {
    ".scc": "scc",
    ".bin": "raw",
    ".608": "raw",
}
"""Input file suffixes mapped to adapter keys. Unknown suffixes read as raw."""

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("CEA608TOTT_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# ---------------------------------------------------------------------------
# HTTP API
# ---------------------------------------------------------------------------

API_HOST = os.getenv("CEA608TOTT_HOST", "0.0.0.0")
API_PORT = int(os.getenv("CEA608TOTT_PORT", "8000"))
MAX_STREAMS = int(os.getenv("CEA608TOTT_MAX_STREAMS", "100"))
STREAM_TTL_SECONDS = int(os.getenv("CEA608TOTT_STREAM_TTL_SECONDS", "3600"))


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger for command-line and server use.

    WHY: Library modules only create named loggers; the process that
    embeds them decides where records go. Entry points call this once.

    RULES:
    - ``level`` overrides LOG_LEVEL (the CLI passes "DEBUG" for --verbose)
    - Unknown level names fall back to INFO
    """
    name = (level or LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format=LOG_FORMAT,
    )
