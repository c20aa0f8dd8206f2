"""
Crime Map - Schema Enforcer

Validation of the raw tabular document before normalization:
1. Header validation: every expected column must be present
2. Quality report: blank required values are counted as warnings

Only missing columns are fatal. Malformed values inside a row are the
normalizer's concern and never fail validation.

Usage:
    enforcer = SchemaEnforcer()

    result = enforcer.validate_raw(df, dataset="crime")
    if not result.is_valid:
        raise ValidationError(result)

    # Or raise directly
    enforcer.enforce_raw(df, dataset="crime")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

import pandas as pd

logger = logging.getLogger(__name__)

# Columns every crime document must carry, in source order
RAW_COLUMNS = [
    "date",
    "crime_type",
    "police_station",
    "latitude",
    "longitude",
    "age",
    "cncp_details",
    "crime_descriptions",
]


class ValidationLevel(StrEnum):
    """Validation severity level."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class ValidationIssue:
    """Individual validation issue."""

    level: ValidationLevel
    check: str
    message: str
    column: str | None = None
    count: int | None = None


@dataclass
class ValidationResult:
    """Result of validation checks."""

    dataset: str
    is_valid: bool
    issues: list[ValidationIssue] = field(default_factory=list)
    row_count: int = 0
    column_count: int = 0
    validated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def errors(self) -> list[str]:
        """Get list of error messages."""
        return [
            issue.message
            for issue in self.issues
            if issue.level in (ValidationLevel.ERROR, ValidationLevel.CRITICAL)
        ]

    @property
    def warnings(self) -> list[str]:
        """Get list of warning messages."""
        return [issue.message for issue in self.issues if issue.level == ValidationLevel.WARNING]

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0


class SchemaEnforcer:
    """Header and value checks for raw crime documents."""

    def __init__(self, required_columns: list[str] | None = None):
        self.required_columns = list(required_columns or RAW_COLUMNS)

    def validate_raw(self, df: pd.DataFrame, dataset: str) -> ValidationResult:
        """
        Validate a raw frame.

        Checks:
        - Required columns present (critical)
        - Blank values in required columns (warning)

        Args:
            df: Raw DataFrame with string cells
            dataset: Dataset name

        Returns:
            ValidationResult with issues
        """
        result = ValidationResult(
            dataset=dataset,
            is_valid=True,
            row_count=len(df),
            column_count=len(df.columns),
        )

        missing = [c for c in self.required_columns if c not in df.columns]
        for col in missing:
            result.issues.append(
                ValidationIssue(
                    level=ValidationLevel.CRITICAL,
                    check="required_column",
                    message=f"Missing required column '{col}'",
                    column=col,
                )
            )
        if missing:
            result.is_valid = False

        for col in self.required_columns:
            if col in missing or len(df) == 0:
                continue
            blank = int((df[col].isna() | (df[col].astype(str).str.strip() == "")).sum())
            if blank > 0:
                result.issues.append(
                    ValidationIssue(
                        level=ValidationLevel.WARNING,
                        check="blank_values",
                        message=f"Column '{col}' has {blank} blank values",
                        column=col,
                        count=blank,
                    )
                )

        if result.is_valid:
            logger.info(
                f"Raw validation passed for {dataset}",
                extra={"dataset": dataset, "warnings": len(result.warnings)},
            )
        else:
            logger.error(
                f"Raw validation failed for {dataset}: {result.errors}",
                extra={"dataset": dataset, "errors": result.errors},
            )

        return result

    def enforce_raw(self, df: pd.DataFrame, dataset: str) -> ValidationResult:
        """Validate a raw frame and raise ValidationError when it is invalid."""
        result = self.validate_raw(df, dataset)
        if not result.is_valid:
            raise ValidationError(result)
        return result


class ValidationError(Exception):
    """Raised when a document fails validation."""

    def __init__(self, result: ValidationResult):
        self.result = result
        error_msg = "\n".join([f"  - {error}" for error in result.errors])
        super().__init__(f"Validation failed for {result.dataset}:\n{error_msg}")
