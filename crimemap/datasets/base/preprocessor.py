"""
Crime Map - Base Preprocessor

Abstract base class for dataset preprocessors. Provides a consistent interface
for data cleaning and transformation with:
- Lenient data type conversion (bad cells become missing, rows survive)
- Transformation and drop bookkeeping

Usage:
    class CrimePreprocessor(BasePreprocessor):
        def transform(self, df: pd.DataFrame) -> pd.DataFrame:
            ...
        def get_dtype_mappings(self) -> dict[str, str]:
            return {"latitude": "float"}
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd

from crimemap.shared.config import Settings, get_config

logger = logging.getLogger(__name__)


@dataclass
class PreprocessingResult:
    """Result of a preprocessing operation."""

    dataset: str
    execution_date: str
    rows_input: int
    rows_output: int
    rows_dropped: int
    columns_input: int
    columns_output: int
    duration_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None
    transformations_applied: list[str] = field(default_factory=list)
    drop_reasons: dict[str, int] = field(default_factory=dict)
    coercion_failures: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "dataset": self.dataset,
            "execution_date": self.execution_date,
            "rows_input": self.rows_input,
            "rows_output": self.rows_output,
            "rows_dropped": self.rows_dropped,
            "columns_input": self.columns_input,
            "columns_output": self.columns_output,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error_message": self.error_message,
            "transformations_applied": self.transformations_applied,
            "drop_reasons": self.drop_reasons,
            "coercion_failures": self.coercion_failures,
        }


class BasePreprocessor(ABC):
    """
    Abstract base class for dataset preprocessing.

    Subclasses must implement:
    - transform(): Apply dataset-specific transformations
    - get_dataset_name(): Return the dataset name
    - get_required_columns(): Return list of required output columns
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize the preprocessor.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()
        self._transformations: list[str] = []
        self._drop_reasons: dict[str, int] = {}
        self._coercion_failures: dict[str, int] = {}

    @abstractmethod
    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Apply dataset-specific transformations.

        Args:
            df: Frame with dtype conversions applied

        Returns:
            Transformed DataFrame
        """
        pass

    @abstractmethod
    def get_dataset_name(self) -> str:
        """Get the dataset name."""
        pass

    @abstractmethod
    def get_required_columns(self) -> list[str]:
        """
        Get list of required columns in the output.

        Returns:
            List of column names that must be present after preprocessing
        """
        pass

    def get_dtype_mappings(self) -> dict[str, str]:
        """
        Get data type mappings for columns.

        Supported targets: "float", "nullable_int", "date", "string".
        """
        return {}

    def run(
        self,
        df: pd.DataFrame,
        execution_date: str,
    ) -> PreprocessingResult:
        """
        Run the preprocessing pipeline.

        Args:
            df: Raw DataFrame to preprocess
            execution_date: Execution date in YYYY-MM-DD format

        Returns:
            PreprocessingResult with details about the preprocessing
        """
        import time

        start_time = time.time()
        dataset_name = self.get_dataset_name()
        rows_input = len(df)
        columns_input = len(df.columns)

        # Nothing from a previous run survives a failed one
        self._data = None

        logger.info(
            f"Starting preprocessing for {dataset_name}",
            extra={
                "dataset": dataset_name,
                "execution_date": execution_date,
                "rows_input": rows_input,
            },
        )

        try:
            self._reset_tracking()

            df = self.prepare(df)

            # Apply dataset-specific transformations
            df = self.transform(df)

            self._validate_required_columns(df)

            duration = time.time() - start_time
            rows_output = len(df)

            result = PreprocessingResult(
                dataset=dataset_name,
                execution_date=execution_date,
                rows_input=rows_input,
                rows_output=rows_output,
                rows_dropped=rows_input - rows_output,
                columns_input=columns_input,
                columns_output=len(df.columns),
                duration_seconds=duration,
                success=True,
                transformations_applied=self._transformations,
                drop_reasons=self._drop_reasons,
                coercion_failures=self._coercion_failures,
            )

            logger.info(
                f"Preprocessing complete for {dataset_name}: {rows_input} -> {rows_output} rows",
                extra=result.to_dict(),
            )

            # Store processed data
            self._data = df

            return result

        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"Preprocessing failed for {dataset_name}: {e}",
                extra={"dataset": dataset_name, "error": str(e)},
                exc_info=True,
            )

            return PreprocessingResult(
                dataset=dataset_name,
                execution_date=execution_date,
                rows_input=rows_input,
                rows_output=0,
                rows_dropped=rows_input,
                columns_input=columns_input,
                columns_output=0,
                duration_seconds=duration,
                success=False,
                error_message=str(e),
            )

    def get_data(self) -> pd.DataFrame | None:
        """Get the most recently processed data."""
        return getattr(self, "_data", None)

    def prepare(self, df: pd.DataFrame) -> pd.DataFrame:
        """Apply dtype conversions to a copy of df."""
        df = df.copy()
        return self._apply_dtype_conversions(df)

    def _reset_tracking(self) -> None:
        self._transformations = []
        self._drop_reasons = {}
        self._coercion_failures = {}

    def _apply_dtype_conversions(self, df: pd.DataFrame) -> pd.DataFrame:
        """Apply data type conversions, counting cells that could not be parsed."""
        for col, dtype in self.get_dtype_mappings().items():
            if col not in df.columns:
                continue

            present = df[col].notna() & (df[col].astype(str).str.strip() != "")

            if dtype == "float":
                df[col] = to_finite_float(df[col])
            elif dtype == "nullable_int":
                df[col] = to_nullable_int(df[col])
            elif dtype == "date":
                df[col] = to_calendar_date(df[col])
            elif dtype == "string":
                df[col] = df[col].fillna("").astype(str)
            else:
                df[col] = df[col].astype(dtype)

            failed = int((present & df[col].isna()).sum())
            if failed > 0:
                self._coercion_failures[col] = self._coercion_failures.get(col, 0) + failed
                logger.warning(f"Could not parse {failed} values in '{col}' as {dtype}")

            self._transformations.append(f"converted_{col}_to_{dtype}")
        return df

    def _validate_required_columns(self, df: pd.DataFrame) -> None:
        """Validate that all required columns are present."""
        required = set(self.get_required_columns())
        present = set(df.columns)
        missing = required - present

        if missing:
            raise ValueError(f"Missing required columns: {missing}")

    def log_transformation(self, name: str) -> None:
        """Log a transformation that was applied."""
        self._transformations.append(name)

    def log_dropped_rows(self, reason: str, count: int) -> None:
        """Log rows that were dropped."""
        self._drop_reasons[reason] = self._drop_reasons.get(reason, 0) + count




# =============================================================================
# Coercion helpers
# =============================================================================

# Leading numeric prefix of a cell: "12.97abc" -> "12.97", "25 yrs" -> "25"
FLOAT_PREFIX = r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
INT_PREFIX = r"^\s*([+-]?\d+)"

# Trailing UTC offset after a time of day: "02:00+05:30", "10:00:00Z"
UTC_OFFSET_SUFFIX = (
    r"(?i)(\d{1,2}:\d{2}(?::\d{2}(?:\.\d+)?)?)"
    r"\s*(?:z|utc|gmt|[+-]\d{2}(?::?\d{2})?)$"
)

# Larger magnitudes do not fit a nullable Int64
MAX_INT_MAGNITUDE = 2**53


def to_finite_float(values: pd.Series) -> pd.Series:
    """Parse the leading number of each value; no number or a non-finite one becomes NaN."""
    numeric = pd.to_numeric(_leading_number(values, FLOAT_PREFIX), errors="coerce").astype(float)
    return numeric.where(np.isfinite(numeric))


def to_nullable_int(values: pd.Series) -> pd.Series:
    """
    Parse the leading integer of each value; failures become <NA>.

    Only the integer digits are read, so "30.7" is 30 and "1e2" is 1.
    Numeric input is truncated toward zero.
    """
    numeric = to_finite_float(_leading_number(values, INT_PREFIX))
    numeric = numeric.where(numeric.abs() < MAX_INT_MAGNITUDE)
    return np.trunc(numeric).astype("Int64")


def to_calendar_date(values: pd.Series) -> pd.Series:
    """Parse values to the calendar day of their wall-clock time; failures become NaT."""
    if pd.api.types.is_datetime64_any_dtype(values):
        parsed = values
    else:
        text = values.astype(str).str.strip().str.replace(UTC_OFFSET_SUFFIX, r"\1", regex=True)
        parsed = pd.to_datetime(text, errors="coerce", format="mixed")
        if parsed.dtype == object:
            # Offsets the suffix pattern missed leave a mix of zones
            parsed = pd.to_datetime(
                parsed.map(lambda ts: ts if pd.isna(ts) else ts.replace(tzinfo=None))
            )

    if isinstance(parsed.dtype, pd.DatetimeTZDtype):
        parsed = parsed.dt.tz_localize(None)
    return parsed.dt.normalize()


def _leading_number(values: pd.Series, pattern: str) -> pd.Series:
    if pd.api.types.is_numeric_dtype(values):
        return values
    return values.astype(str).str.extract(pattern, expand=False)
