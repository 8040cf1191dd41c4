# ====================================================================================================
# Header alias table for the reference dataset
#
# The dataset is maintained by hand in a spreadsheet, so column headings drift ("Min Length (m)",
# "LOA Min", "Harbour", ...). This module defines:
# - how a heading is normalized before comparison (`normalize_header`)
# - the ordered alias list for every logical column (`HEADER_ALIASES`)
# - which logical columns must be present for a table to be usable (`REQUIRED_COLUMNS`)
#
# The loader (src/tugs/loader.py) calls `resolve_columns(...)` once per parse on the header row.
# ====================================================================================================

from __future__ import annotations

import re
from typing import Dict, List, Sequence

# HEADER_ALIASES:
# - Keys are the logical columns a Band is built from.
# - Values are checked in order; the first alias found in the header wins.
# - Aliases are written already normalized (see `normalize_header`).
HEADER_ALIASES: Dict[str, List[str]] = {
    "location": ["location", "harbour", "port", "area"],
    "min_length_m": ["min_length_m", "min_length", "loa_min", "min_loa_m", "min_loa"],
    "max_length_m": ["max_length_m", "max_length", "loa_max", "max_loa_m", "max_loa"],
    "berthing_tugs": ["berthing_tugs_no", "berthing_tugs", "berthing", "tugs_berthing"],
    "berthing_rule": ["berthing_rule", "rule_berthing"],
    "unberthing_tugs": ["unberthing_tugs_no", "unberthing_tugs", "unberthing", "tugs_unberthing"],
    "unberthing_rule": ["unberthing_rule", "rule_unberthing"],
    "additional_notes": [
        "additional_notes",
        "additionalnotes",
        "notes",
        "remarks",
        "additional_note",
    ],
}

# REQUIRED_COLUMNS:
# - Without these a row cannot be turned into a Band.
# - Rule and notes columns are optional; a missing one reads as the empty string.
REQUIRED_COLUMNS = [
    "location",
    "min_length_m",
    "max_length_m",
    "berthing_tugs",
    "unberthing_tugs",
]

OPTIONAL_COLUMNS = [key for key in HEADER_ALIASES if key not in REQUIRED_COLUMNS]

_WHITESPACE = re.compile(r"\s+")
_NOT_WORD = re.compile(r"[^a-z0-9_]")
_UNDERSCORES = re.compile(r"_+")


def normalize_header(value: object) -> str:
    """Fold a heading to snake_case: "Min Loa (m)" -> "min_loa_m".

    Whitespace runs and hyphens become underscores, remaining punctuation is dropped, and
    repeated or leading/trailing underscores are collapsed.
    """
    text = str(value if value is not None else "").strip().lower()
    text = _WHITESPACE.sub("_", text).replace("-", "_")
    text = _NOT_WORD.sub("", text)
    return _UNDERSCORES.sub("_", text).strip("_")


def resolve_columns(header: Sequence[str]) -> Dict[str, int]:
    """Map each logical column to its index in `header` (-1 when absent)."""
    normalized = [normalize_header(cell) for cell in header]
    indices: Dict[str, int] = {}
    for column, aliases in HEADER_ALIASES.items():
        indices[column] = -1
        for alias in aliases:
            if alias in normalized:
                indices[column] = normalized.index(alias)
                break
    return indices


def missing_required(indices: Dict[str, int]) -> List[str]:
    return [column for column in REQUIRED_COLUMNS if indices.get(column, -1) < 0]
