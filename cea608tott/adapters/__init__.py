"""Input adapters turn caption files into timestamped CEA-608 units.

WHY: The stream controller consumes InputUnits with presentation
timestamps. Real inputs are files: Scenarist SCC documents or raw
byte-pair dumps. Each adapter maps one of those to InputUnits.

HOW: ADAPTERS maps an input-format key to a function taking the file's
bytes and returning a list of InputUnits.

RULES:
- Keys match cea608tott.config.INPUT_SUFFIXES values
- Adapters never decode captions; they only split and timestamp pairs
"""

from __future__ import annotations

from typing import Callable, Dict, List

from cea608tott.adapters.raw import read_raw
from cea608tott.adapters.scc import read_scc
from cea608tott.core.models import InputUnit

ADAPTERS: Dict[str, Callable[[bytes], List[InputUnit]]] = {
    "scc": read_scc,
    "raw": read_raw,
}
