"""
Crime Map - Crime Data Preprocessor

Normalizes raw crime rows into typed records and removes records that
cannot be placed on a map.

Transformations:
    - Numeric coercion of latitude/longitude (NaN when unparsable)
    - Integer coercion of age (<NA> when unparsable)
    - Calendar-date parsing of date (NaT when unparsable)
    - Station coordinate override from a fixed lookup table
    - Category assignment from crime_type
    - Validity filter: finite, non-zero coordinates only

Usage:
    from crimemap.datasets.crime.preprocess import CrimePreprocessor

    preprocessor = CrimePreprocessor()
    result = preprocessor.run(raw_df, execution_date="2024-01-15")
    valid_df = preprocessor.get_data()
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any

import numpy as np
import pandas as pd

from crimemap.datasets.base import BasePreprocessor
from crimemap.datasets.crime.models import classify_crime_type
from crimemap.shared.config import Settings

logger = logging.getLogger(__name__)


# Known station locations; these win over whatever the row carries
STATION_COORDINATES = MappingProxyType(
    {
        "Sheshadripuram": (12.9913, 77.5770),
        "High Ground": (12.984345, 77.582786),
        "Kengeri": (12.9015, 77.4815),
        "Kumbalagudu": (12.8776, 77.4463),
        "Madivala": (12.9210242, 77.6185382),
        "Hulimavu": (12.85820166, 77.58952833),
        "Electronic City": (12.83952, 77.66149),
    }
)


class CrimePreprocessor(BasePreprocessor):
    """
    Preprocessor for crime records.

    `normalize()` is the one-to-one record normalizer; `transform()` (used by
    `run()`) normalizes and then applies the validity filter.
    """

    DTYPE_MAPPINGS = {
        "date": "date",
        "crime_type": "string",
        "police_station": "string",
        "latitude": "float",
        "longitude": "float",
        "age": "nullable_int",
    }

    OUTPUT_COLUMNS = [
        "date",
        "crime_type",
        "police_station",
        "latitude",
        "longitude",
        "age",
        "cncp_details",
        "crime_descriptions",
        "category",
    ]

    REQUIRED_COLUMNS = OUTPUT_COLUMNS

    def __init__(
        self,
        config: Settings | None = None,
        station_coordinates: Any = STATION_COORDINATES,
    ):
        """Initialize crime preprocessor."""
        super().__init__(config)
        self.station_coordinates = station_coordinates

    def get_dataset_name(self) -> str:
        """Return dataset name."""
        return "crime"

    def get_required_columns(self) -> list[str]:
        """Return required output columns."""
        return self.REQUIRED_COLUMNS

    def get_dtype_mappings(self) -> dict[str, str]:
        """Return data type mappings."""
        return self.DTYPE_MAPPINGS

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Apply crime-specific transformations.

        Args:
            df: Frame with dtype conversions applied

        Returns:
            Normalized records with valid coordinates
        """
        df = self._normalize_typed(df)
        return self.filter_valid_coordinates(df)

    def normalize(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Normalize raw rows into records without dropping any.

        Args:
            df: Raw frame of string cells

        Returns:
            Frame of the same length and order with typed columns and category
        """
        self._reset_tracking()
        return self._normalize_typed(self.prepare(df))

    def _normalize_typed(self, df: pd.DataFrame) -> pd.DataFrame:
        df = self._fill_optional_text(df)
        df = self._override_station_coordinates(df)
        df = self._assign_categories(df)
        return self._select_output_columns(df)

    def _fill_optional_text(self, df: pd.DataFrame) -> pd.DataFrame:
        """Passthrough columns are kept as given; absent columns become empty."""
        for col in ("cncp_details", "crime_descriptions"):
            if col not in df.columns:
                df[col] = ""
            else:
                df[col] = df[col].fillna("")
        return df

    def _override_station_coordinates(self, df: pd.DataFrame) -> pd.DataFrame:
        """Replace coordinates for stations found in the lookup table."""
        if "police_station" not in df.columns or len(df) == 0:
            return df

        known = df["police_station"].isin(list(self.station_coordinates))
        if known.any():
            stations = df.loc[known, "police_station"]
            df.loc[known, "latitude"] = stations.map(
                lambda s: self.station_coordinates[s][0]
            ).astype(float)
            df.loc[known, "longitude"] = stations.map(
                lambda s: self.station_coordinates[s][1]
            ).astype(float)
            self.log_transformation(f"override_station_coordinates: {int(known.sum())} rows")

        return df

    def _assign_categories(self, df: pd.DataFrame) -> pd.DataFrame:
        """Derive category from crime_type, once, with no other input."""
        if "crime_type" in df.columns:
            df["category"] = df["crime_type"].map(lambda t: classify_crime_type(t).value)
        else:
            df["category"] = pd.Series(dtype=str)
        self.log_transformation("assign_category")
        return df

    def _select_output_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        """Select and order output columns."""
        available_columns = [c for c in self.OUTPUT_COLUMNS if c in df.columns]
        return df[available_columns].copy()

    def filter_valid_coordinates(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Keep records whose coordinates are finite and non-zero.

        Applying the filter to its own output returns the same frame.
        """
        mask = valid_coordinate_mask(df)
        invalid_count = int((~mask).sum())

        if invalid_count > 0:
            logger.warning(f"Dropping {invalid_count} records with unusable coordinates")
            self.log_dropped_rows("invalid_coordinates", invalid_count)

        self.log_transformation("filter_valid_coordinates")
        return df[mask].reset_index(drop=True)


def valid_coordinate_mask(df: pd.DataFrame) -> pd.Series:
    """Boolean mask of rows with finite, non-zero latitude and longitude."""
    lat = pd.to_numeric(df["latitude"], errors="coerce").astype(float)
    lon = pd.to_numeric(df["longitude"], errors="coerce").astype(float)
    return pd.Series(
        np.isfinite(lat) & np.isfinite(lon) & (lat != 0) & (lon != 0),
        index=df.index,
    )


# =============================================================================
# Convenience Functions
# =============================================================================


def preprocess_crime_data(
    df: pd.DataFrame,
    execution_date: str,
    config: Settings | None = None,
) -> dict[str, Any]:
    """
    Convenience function for preprocessing crime data.

    Returns result dictionary suitable for logging.
    """
    preprocessor = CrimePreprocessor(config)
    result = preprocessor.run(df, execution_date)
    return result.to_dict()
