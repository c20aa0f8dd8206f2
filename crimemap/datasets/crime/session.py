"""
Crime Map - Session

Holds the state behind an interactive crime map: the valid record frame,
the active FilterState, and the latest snapshot of filtered records and
derived views.

The valid frame is established once per load (ingest -> normalize ->
validity filter) and treated as read-only afterwards. Each filter change
produces a new FilterState and a wholly new DashboardSnapshot; earlier
snapshots are left untouched, and the newest one wins.

Usage:
    from crimemap.datasets.crime.session import CrimeMapSession

    session = CrimeMapSession()
    session.load("data/crime_data.csv")
    snapshot = session.update_filters(category="petty", min_age=20)
    snapshot.views.category_distribution.as_mapping()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import pandas as pd

from crimemap.datasets.base import IngestionError
from crimemap.datasets.crime.filters import FilterState, apply_filters, station_options
from crimemap.datasets.crime.ingest import CrimeIngester
from crimemap.datasets.crime.models import CrimeRecord, records_from_frame
from crimemap.datasets.crime.preprocess import CrimePreprocessor
from crimemap.datasets.crime.views import CrimeViewBuilder, DerivedViews
from crimemap.shared.config import Settings, get_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardSnapshot:
    """Filtered records and their views for one FilterState."""

    filter_state: FilterState
    records: pd.DataFrame
    views: DerivedViews = field(default_factory=DerivedViews)

    @property
    def record_count(self) -> int:
        return len(self.records)

    def map_records(self) -> list[CrimeRecord]:
        """Filtered records as immutable objects for marker placement."""
        return records_from_frame(self.records)


class CrimeMapSession:
    """
    Reactive pipeline state for one user.

    Construct, then call load() (or set_dataset() with a preprocessed frame).
    Before a successful load the dataset is empty and every view is empty.
    """

    def __init__(self, config: Settings | None = None):
        self.config = config or get_config()
        self.ingester = CrimeIngester(self.config)
        self.preprocessor = CrimePreprocessor(self.config)
        self.view_builder = CrimeViewBuilder(self.config)

        self._dataset = pd.DataFrame(columns=CrimePreprocessor.OUTPUT_COLUMNS)
        self._filter_state = FilterState.from_config(self.config)
        self._snapshot = self._recompute()

    @property
    def dataset(self) -> pd.DataFrame:
        """The valid record frame (do not modify)."""
        return self._dataset

    @property
    def filter_state(self) -> FilterState:
        return self._filter_state

    @property
    def snapshot(self) -> DashboardSnapshot:
        return self._snapshot

    def load(self, source: str | None = None, execution_date: str | None = None) -> DashboardSnapshot:
        """
        Ingest, normalize and validity-filter a source, then publish it.

        Raises:
            IngestionError: If the source cannot be read, parsed or normalized.
                The session's dataset is left empty.
        """
        execution_date = execution_date or datetime.now(UTC).strftime("%Y-%m-%d")
        self._dataset = pd.DataFrame(columns=CrimePreprocessor.OUTPUT_COLUMNS)

        ingestion = self.ingester.run(execution_date, source)
        raw_df = self.ingester.get_data()
        if not ingestion.success or raw_df is None:
            self._snapshot = self._recompute()
            raise IngestionError(ingestion.error_message or "Ingestion failed")

        preprocessing = self.preprocessor.run(raw_df, execution_date)
        valid_df = self.preprocessor.get_data()
        if not preprocessing.success or valid_df is None:
            self._snapshot = self._recompute()
            raise IngestionError(preprocessing.error_message or "Preprocessing failed")

        logger.info(
            f"Loaded {len(valid_df)} valid records ({preprocessing.rows_dropped} dropped)",
            extra={"ingestion": ingestion.to_dict(), "preprocessing": preprocessing.to_dict()},
        )
        return self.set_dataset(valid_df)

    def set_dataset(self, valid_df: pd.DataFrame) -> DashboardSnapshot:
        """Publish an already normalized and validity-filtered frame."""
        self._dataset = valid_df.copy()
        self._snapshot = self._recompute()
        return self._snapshot

    def update_filters(self, **changes: Any) -> DashboardSnapshot:
        """
        Replace some filter fields and recompute.

        Raises:
            pydantic.ValidationError: If a changed field is not acceptable
        """
        self._filter_state = self._filter_state.updated(**changes)
        self._snapshot = self._recompute()
        return self._snapshot

    def reset_filters(self) -> DashboardSnapshot:
        """Return to the configured default filters."""
        self._filter_state = FilterState.from_config(self.config)
        self._snapshot = self._recompute()
        return self._snapshot

    def station_options(self) -> list[str]:
        return station_options(self._dataset)

    def _recompute(self) -> DashboardSnapshot:
        filtered = apply_filters(self._dataset, self._filter_state)
        result = self.view_builder.run(filtered)
        views = self.view_builder.get_data()
        if not result.success or views is None:
            # Views are total over well-formed frames; surface anything else
            raise RuntimeError(result.error_message or "View building failed")
        return DashboardSnapshot(filter_state=self._filter_state, records=filtered, views=views)
