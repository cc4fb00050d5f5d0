"""Output format selection from downstream caps.

WHY: The output format is not a setting of this stage; it is whatever the
downstream consumer accepts. It is chosen once, on the first caps event,
and the choice must be echoed back as fixed caps so downstream knows
exactly what it will receive.

HOW: ``select_format()`` takes the caps downstream allows (already
narrowed by the host to what it can accept), fixates them by taking the
first entry, and maps the media type to a Format plus the caps to echo.

RULES:
- SINK_CAPS is fixed: closedcaption/x-cea-608, format=raw
- None from downstream means "anything we can produce" (SRC_TEMPLATE_CAPS)
- An empty offer raises NegotiationError
- An unknown media type is a contract violation (AssertionError)
- text/x-raw is always echoed with format=utf8
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from cea608tott.core.errors import NegotiationError
from cea608tott.core.models import Caps, Format

logger = logging.getLogger(__name__)

SINK_CAPS = Caps("closedcaption/x-cea-608", {"format": "raw"})

FORMAT_CAPS: Dict[Format, Caps] = {
    Format.VTT: Caps("application/x-subtitle-vtt"),
    Format.SRT: Caps("application/x-subtitle"),
    Format.RAW: Caps("text/x-raw", {"format": "utf8"}),
}

SRC_TEMPLATE_CAPS: List[Caps] = [
    FORMAT_CAPS[Format.VTT],
    FORMAT_CAPS[Format.SRT],
    FORMAT_CAPS[Format.RAW],
]


def accepts_input(caps: Caps) -> bool:
    """True if upstream caps are compatible with SINK_CAPS.

    Fields missing from ``caps`` are treated as unfixed and compatible.
    """
    if caps.name != SINK_CAPS.name:
        return False
    for key, value in caps.fields.items():
        if key in SINK_CAPS.fields and SINK_CAPS.fields[key] != value:
            return False
    return True


def format_for_caps(caps: Caps) -> Format:
    for fmt, template in FORMAT_CAPS.items():
        if template.name == caps.name:
            return fmt
    raise AssertionError("Unsupported downstream caps: {}".format(caps))


def select_format(offered: Optional[Sequence[Caps]]) -> Tuple[Format, Caps]:
    """Pick the output format from what downstream allows.

    Args:
        offered: Caps downstream accepts, preferred first; None when
                 downstream is not linked or places no restriction.

    Returns:
        Tuple of (selected Format, fixed caps to announce downstream).

    Raises:
        NegotiationError: If ``offered`` is empty.
    """
    candidates = SRC_TEMPLATE_CAPS if offered is None else list(offered)
    if not candidates:
        raise NegotiationError("Empty downstream caps")

    fixed = candidates[0]
    logger.debug("Negotiating for downstream caps %s", fixed)

    fmt = format_for_caps(fixed)
    template = FORMAT_CAPS[fmt]
    return fmt, Caps(template.name, dict(template.fields))
