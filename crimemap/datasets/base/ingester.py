"""
Crime Map - Base Ingester

Abstract base class for dataset ingesters. Provides a consistent interface
for fetching a tabular document with:
- Local file or HTTP source resolution
- Error handling
- Structured result reporting

Ingestion is all-or-nothing: a failed fetch publishes no data.

Usage:
    class CrimeIngester(BaseIngester):
        def fetch_data(self, source: str | None = None) -> pd.DataFrame:
            ...
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from crimemap.shared.config import Settings, get_config

logger = logging.getLogger(__name__)


class IngestionError(RuntimeError):
    """Raised when the source is unreachable or cannot be parsed as a table."""


@dataclass
class IngestionResult:
    """Result of a data ingestion operation."""

    dataset: str
    execution_date: str
    source: str | None
    rows_fetched: int
    duration_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "dataset": self.dataset,
            "execution_date": self.execution_date,
            "source": self.source,
            "rows_fetched": self.rows_fetched,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error_message": self.error_message,
            "metadata": self.metadata,
        }


class BaseIngester(ABC):
    """
    Abstract base class for dataset ingestion.

    Subclasses must implement:
    - fetch_data(): Fetch and parse the source document
    - get_dataset_name(): Return the dataset name
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize the ingester.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()

    @abstractmethod
    def fetch_data(self, source: str | None = None) -> pd.DataFrame:
        """
        Fetch data from the source.

        Args:
            source: Path or URL of the document. Uses the configured
                    source if None.

        Returns:
            DataFrame containing the raw rows

        Raises:
            IngestionError: If the source cannot be read or parsed
        """
        pass

    @abstractmethod
    def get_dataset_name(self) -> str:
        """
        Get the dataset name.

        Returns:
            Dataset name (e.g., "crime")
        """
        pass

    def resolve_source(self, source: str | None = None) -> str:
        """Return the explicit source or the configured default."""
        return source or self.config.ingestion.source

    def run(
        self,
        execution_date: str,
        source: str | None = None,
    ) -> IngestionResult:
        """
        Run the ingestion process.

        Args:
            execution_date: Execution date in YYYY-MM-DD format
            source: Path or URL of the document

        Returns:
            IngestionResult with details about the ingestion
        """
        import time

        start_time = time.time()
        dataset_name = self.get_dataset_name()
        source = self.resolve_source(source)

        # Nothing from a previous run survives a failed one
        self._data = None

        logger.info(
            f"Starting ingestion for {dataset_name}",
            extra={
                "dataset": dataset_name,
                "execution_date": execution_date,
                "source": source,
            },
        )

        try:
            df = self.fetch_data(source)

            duration = time.time() - start_time

            result = IngestionResult(
                dataset=dataset_name,
                execution_date=execution_date,
                source=source,
                rows_fetched=len(df),
                duration_seconds=duration,
                success=True,
                metadata={"columns": list(df.columns)},
            )

            logger.info(
                f"Ingestion complete for {dataset_name}: {len(df)} rows",
                extra=result.to_dict(),
            )

            # Store the dataframe for downstream access
            self._data = df

            return result

        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"Ingestion failed for {dataset_name}: {e}",
                extra={"dataset": dataset_name, "error": str(e)},
                exc_info=True,
            )

            return IngestionResult(
                dataset=dataset_name,
                execution_date=execution_date,
                source=source,
                rows_fetched=0,
                duration_seconds=duration,
                success=False,
                error_message=str(e),
            )

    def get_data(self) -> pd.DataFrame | None:
        """Get the most recently fetched data."""
        return getattr(self, "_data", None)
