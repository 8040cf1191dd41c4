# ====================================================================================================
# Lookup engine - (location, LOA, operation) -> tugs required
#
# Policy (kept deliberately simple and explicit):
# - A band matches when its location equals the query location (case-insensitive) and the LOA lies in
#   the closed interval [min_length_m, max_length_m].
# - The FIRST matching band in table order wins. Overlapping bands are not resolved by specificity.
# - Partial tugs cannot be dispatched, so the raw requirement is rounded UP.
#
# Outcomes:
# - LookupResult   a band matched
# - NoMatch        well-formed query, no band covers it (returned, not raised)
# - ValidationError malformed user input (raised by `compute_result`, before any lookup)
# ====================================================================================================

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Union

from .bands import BERTHING, OPERATIONS, Band, DatasetSnapshot
from .loader import parse_number

logger = logging.getLogger(__name__)

NO_MATCH_MESSAGE = "No matching LOA band found for this location."
EMPTY_DISPLAY = "—"


class ValidationError(ValueError):
    """User input rejected before lookup (bad LOA, missing/unknown location, bad operation)."""


@dataclass(frozen=True)
class LookupResult:
    location: str
    loa: float
    operation: str
    tugs_required: int
    raw_tugs: float
    band_label: str
    rule_text: str
    notes_text: str
    band: Band


@dataclass(frozen=True)
class NoMatch:
    location: str
    loa: float
    operation: str
    message: str = NO_MATCH_MESSAGE


def round_up_tugs(raw: float) -> int:
    return int(math.ceil(raw))


def format_length(value: float) -> str:
    """Render a bound the way it was written: 50.0 -> "50", 50.5 -> "50.5".

    Tiny fractional bounds keep Python's exponent form (1e-07, not 1e-7).
    """
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_band_label(band: Band) -> str:
    return f"{format_length(band.min_length_m)}–{format_length(band.max_length_m)} m"


# ----------------------------------------------------------------------------------------------------
# lookup
# Purpose (simple): Find the first band covering (location, loa) and read the operation's columns.
# Inputs: `bands` (table order), `location`, `loa` (finite float), `operation` ("berthing"/"unberthing")
# Outputs: LookupResult, or NoMatch when no band covers the query
# Raises: ValidationError when `operation` is not exactly one of OPERATIONS
# ----------------------------------------------------------------------------------------------------
def lookup(
    bands: Iterable[Band], location: str, loa: float, operation: str
) -> Union[LookupResult, NoMatch]:
    if operation not in OPERATIONS:
        raise ValidationError(
            f"Unknown operation: {operation!r}. Use one of: {', '.join(OPERATIONS)}."
        )

    match = next((band for band in bands if band.covers(location, loa)), None)
    if match is None:
        logger.info("No band for location=%s loa=%s.", location, loa)
        return NoMatch(location=location, loa=loa, operation=operation)

    raw = match.tugs_for(operation)
    return LookupResult(
        location=match.location,
        loa=loa,
        operation=operation,
        tugs_required=round_up_tugs(raw),
        raw_tugs=raw,
        band_label=format_band_label(match),
        rule_text=match.rule_for(operation),
        notes_text=match.additional_notes,
        band=match,
    )


# ----------------------------------------------------------------------------------------------------
# compute_result
# Purpose (simple): Validate raw user input, then look it up against a loaded snapshot.
# Inputs: `snapshot`, `location` (selected), `loa_text` (as typed), `operation`
# Outputs: LookupResult or NoMatch
# Raises: ValidationError (checked in order: LOA, empty location, unknown location, operation)
# ----------------------------------------------------------------------------------------------------
def compute_result(
    snapshot: DatasetSnapshot, location: str, loa_text: object, operation: str = BERTHING
) -> Union[LookupResult, NoMatch]:
    loa = parse_number(loa_text)
    if loa is None:
        raise ValidationError("Enter a valid LOA (m).")

    location = (location or "").strip()
    if not location:
        raise ValidationError("Select a jetty/location.")
    if not snapshot.knows_location(location):
        raise ValidationError(f"Unknown location: {location}")

    operation = (operation or "").strip().lower()
    if operation not in OPERATIONS:
        raise ValidationError(
            f"Unknown operation: {operation or '(empty)'}. Use one of: {', '.join(OPERATIONS)}."
        )

    return lookup(snapshot.bands, location, loa, operation)


def format_result(result: Union[LookupResult, NoMatch]) -> dict:
    """Display-ready fields; blank rule/notes (and every field of a NoMatch) show as "—"."""
    if isinstance(result, NoMatch):
        return {
            "tugs": EMPTY_DISPLAY,
            "band": EMPTY_DISPLAY,
            "rule": EMPTY_DISPLAY,
            "notes": EMPTY_DISPLAY,
            "message": result.message,
        }
    return {
        "tugs": str(result.tugs_required),
        "band": result.band_label or EMPTY_DISPLAY,
        "rule": result.rule_text if result.rule_text.strip() else EMPTY_DISPLAY,
        "notes": result.notes_text if result.notes_text.strip() else EMPTY_DISPLAY,
        "message": "",
    }
