"""
Crime Map - Query Filter Engine

Applies the interactive filters to the valid record frame. The filter state
is an immutable snapshot; every change produces a new state and the filter
is re-evaluated from scratch over the full valid frame.

A record is kept when all of these hold:
    - date within [start_date, end_date], compared as calendar dates
    - category equals the selected category, or the selection is "All"
    - police_station equals the selected station, or the selection is "All"
    - age within [min_age, max_age]; records with unknown age never match

Usage:
    from crimemap.datasets.crime.filters import FilterState, apply_filters

    state = FilterState(category="petty", min_age=20)
    filtered = apply_filters(valid_df, state)
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import pandas as pd
from pydantic import BaseModel, ConfigDict, field_validator

from crimemap.datasets.crime.models import CATEGORY_OPTIONS, WILDCARD
from crimemap.shared.config import Settings

logger = logging.getLogger(__name__)


class FilterState(BaseModel):
    """Snapshot of the active filter predicates."""

    model_config = ConfigDict(frozen=True)

    category: str = WILDCARD
    station: str = WILDCARD
    start_date: date = date(2016, 1, 1)
    end_date: date = date(2024, 1, 1)
    min_age: int = 5
    max_age: int = 100

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        """Only the selectable categories are accepted."""
        if v not in CATEGORY_OPTIONS:
            raise ValueError(f"Invalid category: {v}. Must be one of: {list(CATEGORY_OPTIONS)}")
        return v

    @classmethod
    def from_config(cls, config: Settings) -> FilterState:
        """Initial filter state from the `filters` config section."""
        defaults = config.filters
        return cls(
            category=defaults.category,
            station=defaults.station,
            start_date=defaults.start_date,
            end_date=defaults.end_date,
            min_age=defaults.min_age,
            max_age=defaults.max_age,
        )

    def updated(self, **changes: Any) -> FilterState:
        """Return a new, validated state with the given fields replaced."""
        return FilterState(**{**self.model_dump(), **changes})


def filter_mask(df: pd.DataFrame, state: FilterState) -> pd.Series:
    """Boolean mask of rows satisfying every predicate in state."""
    if len(df) == 0:
        return pd.Series(False, index=df.index, dtype=bool)

    dates = pd.to_datetime(df["date"], errors="coerce").dt.normalize()
    in_dates = dates.between(pd.Timestamp(state.start_date), pd.Timestamp(state.end_date))

    if state.category == WILDCARD:
        in_category = pd.Series(True, index=df.index)
    else:
        in_category = df["category"] == state.category

    if state.station == WILDCARD:
        in_station = pd.Series(True, index=df.index)
    else:
        in_station = df["police_station"] == state.station

    ages = df["age"].astype("Int64")
    in_ages = ages.between(state.min_age, state.max_age).fillna(False).astype(bool)

    return (in_dates & in_category & in_station & in_ages).astype(bool)


def apply_filters(df: pd.DataFrame, state: FilterState) -> pd.DataFrame:
    """
    Return the rows of df matching state, in their original order.

    Args:
        df: Valid record frame
        state: Active filter state

    Returns:
        New frame; the input is never modified
    """
    filtered = df[filter_mask(df, state)].copy()
    logger.debug(
        f"Filtered {len(df)} -> {len(filtered)} records",
        extra={
            "rows_input": len(df),
            "rows_output": len(filtered),
            "filters": state.model_dump(mode="json"),
        },
    )
    return filtered


def station_options(df: pd.DataFrame) -> list[str]:
    """Station choices: "All" followed by each station in first-appearance order."""
    if "police_station" not in df.columns:
        return [WILDCARD]
    return [WILDCARD, *pd.unique(df["police_station"]).tolist()]
