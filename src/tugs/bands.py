from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, Tuple

import pandas as pd


BERTHING = "berthing"
UNBERTHING = "unberthing"
OPERATIONS = (BERTHING, UNBERTHING)

BAND_COLUMNS = [
    "location",
    "min_length_m",
    "max_length_m",
    "berthing_tugs",
    "berthing_rule",
    "unberthing_tugs",
    "unberthing_rule",
    "additional_notes",
]


@dataclass(frozen=True)
class Band:
    location: str
    min_length_m: float
    max_length_m: float
    berthing_tugs: float
    berthing_rule: str
    unberthing_tugs: float
    unberthing_rule: str
    additional_notes: str

    def covers(self, location: str, loa: float) -> bool:
        """Case-insensitive location match and LOA inside the closed interval."""
        return (
            self.location.casefold() == location.casefold()
            and self.min_length_m <= loa <= self.max_length_m
        )

    def tugs_for(self, operation: str) -> float:
        if operation == BERTHING:
            return self.berthing_tugs
        if operation == UNBERTHING:
            return self.unberthing_tugs
        raise ValueError(f"Unknown operation: {operation!r}")

    def rule_for(self, operation: str) -> str:
        if operation == BERTHING:
            return self.berthing_rule
        if operation == UNBERTHING:
            return self.unberthing_rule
        raise ValueError(f"Unknown operation: {operation!r}")


@dataclass(frozen=True)
class DatasetSnapshot:
    """Read-only result of one dataset load; replaced wholesale, never mutated."""

    bands: Tuple[Band, ...]
    locations: Tuple[str, ...]
    source: str
    loaded_at: str

    def knows_location(self, location: str) -> bool:
        wanted = location.casefold()
        return any(known.casefold() == wanted for known in self.locations)


def sorted_locations(bands: Iterable[Band]) -> Tuple[str, ...]:
    distinct = {band.location for band in bands}
    return tuple(sorted(distinct, key=lambda loc: (loc.casefold(), loc)))


def bands_to_dataframe(bands: Iterable[Band]) -> pd.DataFrame:
    records = [asdict(band) for band in bands]
    if not records:
        return pd.DataFrame(columns=BAND_COLUMNS)
    return pd.DataFrame(records, columns=BAND_COLUMNS)
