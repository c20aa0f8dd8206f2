"""
Crime Map - Crime Record Model

A record is one normalized incident. Inside the pipeline records travel as
rows of a DataFrame; `records_from_frame` projects a frame into immutable
`CrimeRecord` objects for consumers that want plain objects (map markers,
popups, JSON export).
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import date
from enum import StrEnum
from typing import Any

import pandas as pd


class CrimeCategory(StrEnum):
    """Incident classification derived from crime_type."""

    PETTY = "petty"
    SERIOUS = "serious"
    HEINOUS = "heinous"
    CCL = "ccl"
    CNCP = "cncp"
    UNCATEGORIZED = "uncategorized"


# Categories drawn by charts and the map legend, in display order
DISPLAY_CATEGORIES: tuple[CrimeCategory, ...] = (
    CrimeCategory.PETTY,
    CrimeCategory.SERIOUS,
    CrimeCategory.HEINOUS,
    CrimeCategory.CCL,
    CrimeCategory.CNCP,
)

# Categories classify_crime_type can produce. ccl and cncp are selectable
# and charted but never derived from crime_type.
ASSIGNABLE_CATEGORIES: frozenset[CrimeCategory] = frozenset(
    {CrimeCategory.PETTY, CrimeCategory.SERIOUS, CrimeCategory.HEINOUS}
)

WILDCARD = "All"

CATEGORY_OPTIONS: tuple[str, ...] = (WILDCARD, *(c.value for c in DISPLAY_CATEGORIES))


def classify_crime_type(crime_type: Any) -> CrimeCategory:
    """Map a free-text crime type to its category (case-insensitive exact match)."""
    if not isinstance(crime_type, str):
        return CrimeCategory.UNCATEGORIZED
    lowered = crime_type.lower()
    for category in ASSIGNABLE_CATEGORIES:
        if lowered == category.value:
            return category
    return CrimeCategory.UNCATEGORIZED


@dataclass(frozen=True)
class CrimeRecord:
    """Immutable normalized incident record."""

    date: date | None
    crime_type: str
    police_station: str
    latitude: float
    longitude: float
    age: int | None
    category: CrimeCategory
    cncp_details: str | None = None
    crime_descriptions: str | None = None

    @property
    def has_valid_coordinates(self) -> bool:
        """True when both coordinates are finite and non-zero."""
        return (
            math.isfinite(self.latitude)
            and math.isfinite(self.longitude)
            and self.latitude != 0
            and self.longitude != 0
        )

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["date"] = self.date.isoformat() if self.date else None
        payload["category"] = self.category.value
        return payload


def records_from_frame(df: pd.DataFrame) -> list[CrimeRecord]:
    """Convert a normalized frame into CrimeRecord objects, preserving row order."""
    records = []
    for row in df.itertuples(index=False):
        records.append(
            CrimeRecord(
                date=None if pd.isna(row.date) else row.date.date(),
                crime_type=row.crime_type,
                police_station=row.police_station,
                latitude=float(row.latitude),
                longitude=float(row.longitude),
                age=None if pd.isna(row.age) else int(row.age),
                category=CrimeCategory(row.category),
                cncp_details=_optional_text(row.cncp_details),
                crime_descriptions=_optional_text(row.crime_descriptions),
            )
        )
    return records


def _optional_text(value: Any) -> str | None:
    if value is None or pd.isna(value) or value == "":
        return None
    return str(value)
