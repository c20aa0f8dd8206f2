"""
Crime Map - Base View Builder

Abstract base class for derived-view builders. A view builder turns a
filtered record frame into the aggregate series a chart front end draws.
Views are pure recomputations: they hold no state between runs.

Usage:
    class CrimeViewBuilder(BaseViewBuilder):
        def build_views(self, df: pd.DataFrame) -> DerivedViews:
            ...
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import pandas as pd

from crimemap.shared.config import Settings, get_config

logger = logging.getLogger(__name__)

ViewsT = TypeVar("ViewsT")


@dataclass
class ViewBuildResult:
    """Result of a view building operation."""

    dataset: str
    rows_input: int
    views_computed: int
    duration_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None
    view_sizes: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "dataset": self.dataset,
            "rows_input": self.rows_input,
            "views_computed": self.views_computed,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error_message": self.error_message,
            "view_sizes": self.view_sizes,
        }


class BaseViewBuilder(ABC, Generic[ViewsT]):
    """
    Abstract base class for view building.

    Subclasses must implement:
    - build_views(): Compute views from filtered data
    - get_dataset_name(): Return the dataset name
    - get_view_sizes(): Report the number of entries in each view
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize the view builder.

        Args:
            config: Configuration object (uses default if not provided)
        """
        self.config = config or get_config()

    @abstractmethod
    def build_views(self, df: pd.DataFrame) -> ViewsT:
        """
        Build views from filtered data.

        Args:
            df: Filtered record frame

        Returns:
            Views object
        """
        pass

    @abstractmethod
    def get_dataset_name(self) -> str:
        """Get the dataset name."""
        pass

    @abstractmethod
    def get_view_sizes(self, views: ViewsT) -> dict[str, int]:
        """Return a mapping of view name to number of entries."""
        pass

    def run(self, df: pd.DataFrame) -> ViewBuildResult:
        """
        Run the view building pipeline.

        Args:
            df: Filtered record frame

        Returns:
            ViewBuildResult with details about the build
        """
        import time

        start_time = time.time()
        dataset_name = self.get_dataset_name()
        rows_input = len(df)

        self._data = None

        logger.debug(
            f"Starting view building for {dataset_name}",
            extra={"dataset": dataset_name, "rows_input": rows_input},
        )

        try:
            views = self.build_views(df)
            sizes = self.get_view_sizes(views)

            result = ViewBuildResult(
                dataset=dataset_name,
                rows_input=rows_input,
                views_computed=len(sizes),
                duration_seconds=time.time() - start_time,
                success=True,
                view_sizes=sizes,
            )

            logger.debug(
                f"View building complete for {dataset_name}: {rows_input} rows",
                extra=result.to_dict(),
            )

            self._data = views

            return result

        except Exception as e:
            logger.error(
                f"View building failed for {dataset_name}: {e}",
                extra={"dataset": dataset_name, "error": str(e)},
                exc_info=True,
            )

            return ViewBuildResult(
                dataset=dataset_name,
                rows_input=rows_input,
                views_computed=0,
                duration_seconds=time.time() - start_time,
                success=False,
                error_message=str(e),
            )

    def get_data(self) -> ViewsT | None:
        """Get the most recently built views."""
        return getattr(self, "_data", None)
