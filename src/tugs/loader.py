# ====================================================================================================
# Dataset loader - reference table -> immutable DatasetSnapshot
#
# Stages:
#   1) split_rows(...)      tokenize the loosely structured comma-separated text (src/tugs/table.py)
#   2) resolve_columns(...) find logical columns in the header row via aliases (src/tugs/aliases.py)
#   3) _row_to_band(...)    permissive numeric parsing, one Band per usable data row
#   4) build_snapshot(...)  bands + sorted distinct locations, frozen for the session
#
# Entry points:
# - parse(raw_text)                  -> tuple of Band (raises ParseError)
# - load_dataset_file(path, config)  -> DatasetSnapshot (raises LoadError)
# - await load_dataset(fetch, config)-> DatasetSnapshot via the fetch capability (raises LoadError)
#
# Data-quality issues are logged, never silently dropped.
# ====================================================================================================

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urljoin

from src.offline.http import FetchError, Request

from .aliases import missing_required, resolve_columns
from .bands import Band, DatasetSnapshot, sorted_locations
from .settings import AppConfig, get_config
from .table import split_rows

logger = logging.getLogger(__name__)

# Named policy: a numeric cell that does not parse to a finite number reads as this value.
UNPARSEABLE_NUMERIC_DEFAULT = 0.0

_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class ParseError(ValueError):
    """The reference table is structurally unreadable."""


class LoadError(RuntimeError):
    """The dataset could not be fetched, read or parsed. The message is shown to the user."""


# ----------------------------------------------------------------------------------------------------
# parse_number
# Purpose (simple): Locale-neutral decimal parse of a cell or user input.
# Inputs: any value (str/number/None)
# Outputs: finite float, or None when the trimmed text is not a plain decimal number
# ----------------------------------------------------------------------------------------------------
def parse_number(value: object) -> Optional[float]:
    if value is None:
        return None
    text = str(value).strip()
    if not _DECIMAL.fullmatch(text):
        return None
    number = float(text)
    return number if math.isfinite(number) else None


def _cell(cols: Sequence[str], index: int) -> str:
    if index < 0 or index >= len(cols):
        return ""
    return (cols[index] or "").strip()


def _number_cell(cols: Sequence[str], index: int, column: str, line_no: int) -> Tuple[float, bool]:
    raw = _cell(cols, index)
    number = parse_number(raw)
    if number is None:
        logger.warning(
            "Row %d: %s=%r is not a number; using %s.",
            line_no,
            column,
            raw,
            UNPARSEABLE_NUMERIC_DEFAULT,
        )
        return UNPARSEABLE_NUMERIC_DEFAULT, False
    return number, True


def _row_to_band(
    cols: Sequence[str], indices: dict, line_no: int, strict_lengths: bool
) -> Optional[Band]:
    location = _cell(cols, indices["location"])
    if not location:
        logger.warning("Row %d: empty location; row dropped.", line_no)
        return None

    min_len, min_ok = _number_cell(cols, indices["min_length_m"], "min_length_m", line_no)
    max_len, max_ok = _number_cell(cols, indices["max_length_m"], "max_length_m", line_no)
    if strict_lengths and not (min_ok and max_ok):
        logger.warning("Row %d: unparseable length bound for %s; row dropped.", line_no, location)
        return None

    berthing_tugs, _ = _number_cell(cols, indices["berthing_tugs"], "berthing_tugs", line_no)
    unberthing_tugs, _ = _number_cell(cols, indices["unberthing_tugs"], "unberthing_tugs", line_no)

    return Band(
        location=location,
        min_length_m=min_len,
        max_length_m=max_len,
        berthing_tugs=berthing_tugs,
        berthing_rule=_cell(cols, indices["berthing_rule"]),
        unberthing_tugs=unberthing_tugs,
        unberthing_rule=_cell(cols, indices["unberthing_rule"]),
        additional_notes=_cell(cols, indices["additional_notes"]),
    )


# ----------------------------------------------------------------------------------------------------
# parse
# Purpose (simple): Turn the raw reference table into Bands, preserving table order.
# Inputs: `raw_text` (file contents, optional BOM), `strict_lengths` policy flag
# Outputs: tuple of Band
# Raises: ParseError when fewer than two rows survive filtering or a required column is missing
# ----------------------------------------------------------------------------------------------------
def parse(raw_text: str, strict_lengths: bool = False) -> Tuple[Band, ...]:
    rows = split_rows(raw_text)
    if len(rows) < 2:
        raise ParseError("CSV is empty or unreadable.")

    indices = resolve_columns(rows[0])
    missing = missing_required(indices)
    if missing:
        raise ParseError(
            "CSV headers not recognised. Expected Location/Min/Max/Berthing/Unberthing columns "
            f"(missing: {', '.join(missing)})."
        )

    bands: List[Band] = []
    # Header is data row 0; report data rows 1-based.
    for line_no, cols in enumerate(rows[1:], start=1):
        band = _row_to_band(cols, indices, line_no, strict_lengths)
        if band is not None:
            bands.append(band)

    logger.info("Parsed %d bands from %d data rows.", len(bands), len(rows) - 1)
    return tuple(bands)


def build_snapshot(bands: Sequence[Band], source: str) -> DatasetSnapshot:
    band_tuple = tuple(bands)
    return DatasetSnapshot(
        bands=band_tuple,
        locations=sorted_locations(band_tuple),
        source=source,
        loaded_at=datetime.now(timezone.utc).replace(microsecond=0).isoformat(),
    )


def load_dataset_text(raw_text: str, source: str, config: Optional[AppConfig] = None) -> DatasetSnapshot:
    config = config or get_config()
    try:
        bands = parse(raw_text, strict_lengths=config.strict_lengths)
    except ParseError as exc:
        raise LoadError(str(exc)) from exc
    snapshot = build_snapshot(bands, source)
    logger.info(
        "Loaded dataset from %s: %d bands, %d locations.",
        source,
        len(snapshot.bands),
        len(snapshot.locations),
    )
    return snapshot


# ----------------------------------------------------------------------------------------------------
# load_dataset_file
# Purpose (simple): Read the reference table from disk (CLI / exports).
# Inputs: `path`, optional `config` (numeric policy)
# Outputs: DatasetSnapshot
# Raises: LoadError (missing/unreadable file, or ParseError underneath)
# ----------------------------------------------------------------------------------------------------
def load_dataset_file(path: Path, config: Optional[AppConfig] = None) -> DatasetSnapshot:
    path = Path(path)
    try:
        raw_text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(f"Failed to read CSV at {path}: {exc}") from exc
    return load_dataset_text(raw_text, str(path.as_posix()), config)


# ----------------------------------------------------------------------------------------------------
# load_dataset
# Purpose (simple): Fetch the reference table through the fetch capability (network, possibly
#                   intercepted by the offline shell cache) and build a snapshot.
# Inputs: `fetch` (async callable: Request -> Response), optional `config`
# Outputs: DatasetSnapshot
# Raises: LoadError on network failure, non-OK HTTP status, or unparseable content. No retries.
# ----------------------------------------------------------------------------------------------------
async def load_dataset(fetch, config: Optional[AppConfig] = None) -> DatasetSnapshot:
    config = config or get_config()
    url = urljoin(config.base_url, config.dataset_path)
    try:
        response = await fetch(Request(url), cache_mode="no-cache")
    except FetchError as exc:
        raise LoadError(f"Failed to load CSV ({exc})") from exc
    if not response.ok:
        raise LoadError(f"Failed to load CSV (HTTP {response.status})")
    # undecodable bytes become U+FFFD instead of failing the load
    return load_dataset_text(response.text(errors="replace"), url, config)
