"""
Crime Map - Crime Data Ingester

Reads the crime record document: a UTF-8 CSV with a header row carrying
date, crime_type, police_station, latitude, longitude, age, cncp_details and
crime_descriptions.

Sources:
    - Local file path
    - http(s) URL, fetched with requests

Every cell is kept as text; typing is the preprocessor's job. Blank lines
are skipped, missing trailing cells read as empty strings and cells beyond
the header width are dropped.

Usage:
    from crimemap.datasets.crime.ingest import CrimeIngester

    ingester = CrimeIngester()
    result = ingester.run(execution_date="2024-01-15", source="data/crime_data.csv")
    raw_df = ingester.get_data()
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any

import pandas as pd
import requests

from crimemap.datasets.base import BaseIngester, IngestionError
from crimemap.shared.config import Settings
from crimemap.validation.schema_enforcer import RAW_COLUMNS, SchemaEnforcer, ValidationError

logger = logging.getLogger(__name__)


class CrimeIngester(BaseIngester):
    """
    Ingester for crime record CSV documents.

    Failure anywhere (unreachable source, undecodable bytes, unparsable
    table, missing header columns) raises IngestionError from fetch_data;
    run() turns it into an unsuccessful IngestionResult.
    """

    REQUIRED_COLUMNS = RAW_COLUMNS

    def __init__(self, config: Settings | None = None):
        """Initialize crime ingester."""
        super().__init__(config)
        self.enforcer = SchemaEnforcer(self.REQUIRED_COLUMNS)

    def get_dataset_name(self) -> str:
        """Return dataset name."""
        return "crime"

    def fetch_data(self, source: str | None = None) -> pd.DataFrame:
        """
        Fetch and parse the crime document.

        Args:
            source: Local path or http(s) URL (uses config if None)

        Returns:
            DataFrame of raw string cells, one row per non-blank line
        """
        source = self.resolve_source(source)
        logger.info(f"Fetching crime data from {source}", extra={"source": source})

        text = self.fetch_text(source)
        df = self.parse_text(text)

        logger.info(
            f"Fetched {len(df)} crime records",
            extra={"rows": len(df), "columns": list(df.columns)},
        )
        return df

    def fetch_text(self, source: str) -> str:
        """Read the document as text from a URL or local path."""
        encoding = self.config.ingestion.encoding

        if source.startswith(("http://", "https://")):
            try:
                response = requests.get(source, timeout=self.config.ingestion.timeout_seconds)
                response.raise_for_status()
            except requests.RequestException as e:
                raise IngestionError(f"Could not fetch {source}: {e}") from e
            raw = response.content
        else:
            try:
                raw = Path(source).read_bytes()
            except OSError as e:
                raise IngestionError(f"Could not read {source}: {e}") from e

        try:
            # utf-8-sig drops a leading byte order mark if present
            return raw.decode("utf-8-sig" if encoding.lower() in ("utf-8", "utf8") else encoding)
        except UnicodeDecodeError as e:
            raise IngestionError(f"Could not decode {source} as {encoding}: {e}") from e

    def parse_text(self, text: str) -> pd.DataFrame:
        """
        Parse CSV text into a frame of string cells.

        Raises:
            IngestionError: If the text is not a table or lacks required columns
        """
        if not text.strip():
            raise IngestionError("Source document is empty")

        try:
            header = pd.read_csv(
                io.StringIO(text), dtype=str, nrows=0, index_col=False, engine="python"
            ).columns
            # Rows longer than the header keep their leading cells; surplus
            # cells (an unquoted comma in free text) are dropped
            df = pd.read_csv(
                io.StringIO(text),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                index_col=False,
                usecols=list(range(len(header))),
                engine="python",
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise IngestionError(f"Could not parse source as CSV: {e}") from e

        # Short rows leave NaN in trailing cells
        df = df.fillna("")

        try:
            self.enforcer.enforce_raw(df, self.get_dataset_name())
        except ValidationError as e:
            raise IngestionError(str(e)) from e

        return df

    def get_schema_info(self) -> list[dict[str, Any]]:
        """Describe the expected raw columns."""
        return [{"id": col, "type": "text"} for col in self.REQUIRED_COLUMNS]


# =============================================================================
# Convenience Functions
# =============================================================================


def ingest_crime_data(
    execution_date: str,
    source: str | None = None,
    config: Settings | None = None,
) -> dict[str, Any]:
    """
    Convenience function for ingesting crime data.

    Returns result dictionary suitable for logging.
    """
    ingester = CrimeIngester(config)
    result = ingester.run(execution_date, source)
    return result.to_dict()
