"""
Crime Map - Crime View Builder

Derives the chart views from a filtered record frame.

Views:
    - Category distribution: counts in display order, zero counts omitted,
      uncategorized never shown
    - Yearly trend: counts per calendar year, years ascending
    - Age histogram: five-year buckets labelled "<low>-<low+4>", empty
      buckets omitted
    - Summary statistics: per category count, share of total and average age

Every view is a pure function of its input frame. An empty frame yields
empty views, never an arithmetic error.

Usage:
    from crimemap.datasets.crime.views import CrimeViewBuilder

    builder = CrimeViewBuilder()
    result = builder.run(filtered_df)
    views = builder.get_data()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import pandas as pd

from crimemap.datasets.base import BaseViewBuilder
from crimemap.datasets.crime.models import DISPLAY_CATEGORIES
from crimemap.datasets.crime.styles import AGE_BAR_COLOR, TREND_LINE_COLOR, category_color
from crimemap.shared.config import Settings

logger = logging.getLogger(__name__)

AGE_BUCKET_WIDTH = 5


# =============================================================================
# View Types
# =============================================================================


@dataclass(frozen=True)
class CategoryDistribution:
    """Case counts per displayed category."""

    labels: list[str] = field(default_factory=list)
    counts: list[int] = field(default_factory=list)
    colors: list[str] = field(default_factory=list)

    def as_mapping(self) -> dict[str, int]:
        return dict(zip(self.labels, self.counts, strict=True))

    def to_dict(self) -> dict[str, Any]:
        return {
            "labels": list(self.labels),
            "datasets": [
                {
                    "label": "Number of Cases",
                    "data": list(self.counts),
                    "backgroundColor": list(self.colors),
                }
            ],
        }


@dataclass(frozen=True)
class YearlyTrend:
    """Case counts per calendar year."""

    points: list[tuple[int, int]] = field(default_factory=list)

    @property
    def labels(self) -> list[str]:
        return [str(year) for year, _ in self.points]

    @property
    def counts(self) -> list[int]:
        return [count for _, count in self.points]

    def as_mapping(self) -> dict[int, int]:
        return dict(self.points)

    def to_dict(self) -> dict[str, Any]:
        return {
            "labels": self.labels,
            "datasets": [
                {
                    "label": "Total Cases per Year",
                    "data": self.counts,
                    "borderColor": TREND_LINE_COLOR,
                    "fill": False,
                }
            ],
        }


@dataclass(frozen=True)
class AgeHistogram:
    """Case counts per five-year age bucket."""

    bucket_starts: list[int] = field(default_factory=list)
    counts: list[int] = field(default_factory=list)

    @property
    def labels(self) -> list[str]:
        return [f"{low}-{low + AGE_BUCKET_WIDTH - 1}" for low in self.bucket_starts]

    def as_mapping(self) -> dict[str, int]:
        return dict(zip(self.labels, self.counts, strict=True))

    def to_dict(self) -> dict[str, Any]:
        return {
            "labels": self.labels,
            "datasets": [
                {
                    "label": "Number of Cases",
                    "data": list(self.counts),
                    "backgroundColor": AGE_BAR_COLOR,
                }
            ],
        }


@dataclass(frozen=True)
class SummaryRow:
    """One row of the summary table."""

    category: str
    count: int
    percentage: float
    average_age: float | None

    def display(self) -> dict[str, str]:
        """Table cells as shown to the user."""
        return {
            "category": self.category,
            "cases": str(self.count),
            "percentage": f"{self.percentage:.1f}%",
            "avg_age": "-" if self.average_age is None else f"{self.average_age:.1f}",
        }


@dataclass(frozen=True)
class SummaryStats:
    """Per-category summary over the filtered set."""

    total: int = 0
    rows: list[SummaryRow] = field(default_factory=list)

    def row(self, category: str) -> SummaryRow | None:
        for r in self.rows:
            if r.category == category:
                return r
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "rows": [
                {
                    "category": r.category,
                    "count": r.count,
                    "percentage": r.percentage,
                    "average_age": r.average_age,
                }
                for r in self.rows
            ],
        }


@dataclass(frozen=True)
class DerivedViews:
    """All four views for one filtered set."""

    category_distribution: CategoryDistribution = field(default_factory=CategoryDistribution)
    yearly_trend: YearlyTrend = field(default_factory=YearlyTrend)
    age_histogram: AgeHistogram = field(default_factory=AgeHistogram)
    summary: SummaryStats = field(default_factory=SummaryStats)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready chart payloads."""
        return {
            "category_distribution": self.category_distribution.to_dict(),
            "yearly_trend": self.yearly_trend.to_dict(),
            "age_histogram": self.age_histogram.to_dict(),
            "summary": self.summary.to_dict(),
        }


# =============================================================================
# Aggregations
# =============================================================================


def round_half_up(value: float) -> float:
    """Round to one decimal, ties away from zero, on the exact binary value."""
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def category_counts(df: pd.DataFrame) -> dict[str, int]:
    """Counts for every category present, uncategorized included."""
    if len(df) == 0:
        return {}
    counts = df["category"].value_counts(sort=False)
    return {str(k): int(v) for k, v in counts.items()}


def category_distribution(df: pd.DataFrame) -> CategoryDistribution:
    """Counts for display categories present in df, in display order."""
    counts = category_counts(df)
    labels = [c.value for c in DISPLAY_CATEGORIES if counts.get(c.value, 0) > 0]
    return CategoryDistribution(
        labels=labels,
        counts=[counts[c] for c in labels],
        colors=[category_color(c) for c in labels],
    )


def yearly_trend(df: pd.DataFrame) -> YearlyTrend:
    """Counts per calendar year, ordered by the year's string form."""
    if len(df) == 0:
        return YearlyTrend()

    years = pd.to_datetime(df["date"], errors="coerce").dt.year.dropna().astype(int)
    counts = years.value_counts()
    ordered = sorted(counts.index, key=str)
    return YearlyTrend(points=[(int(year), int(counts[year])) for year in ordered])


def age_histogram(df: pd.DataFrame) -> AgeHistogram:
    """Counts per age bucket of width five; ages unknown are left out."""
    if len(df) == 0:
        return AgeHistogram()

    ages = df["age"].astype("Int64").dropna().astype(int)
    buckets = (ages // AGE_BUCKET_WIDTH) * AGE_BUCKET_WIDTH
    counts = buckets.value_counts().sort_index()
    return AgeHistogram(
        bucket_starts=[int(b) for b in counts.index],
        counts=[int(c) for c in counts.values],
    )


def summary_stats(df: pd.DataFrame) -> SummaryStats:
    """
    Count, percentage of total and average age per category present.

    Rows follow first appearance of each category in df. Percentages and
    averages are rounded half up to one decimal; a category whose ages are all
    unknown has no average.
    """
    total = len(df)
    if total == 0:
        return SummaryStats()

    ages = df["age"].astype("Int64")
    grouped = pd.DataFrame({"category": df["category"], "age": ages}).groupby(
        "category", sort=False
    )
    counts = grouped.size()
    age_sums = grouped["age"].sum()
    age_known = grouped["age"].count()

    rows = []
    for category, count in counts.items():
        known = int(age_known[category])
        average = round_half_up(float(age_sums[category]) / known) if known else None
        rows.append(
            SummaryRow(
                category=str(category),
                count=int(count),
                percentage=round_half_up(int(count) / total * 100),
                average_age=average,
            )
        )
    return SummaryStats(total=total, rows=rows)


def build_views(df: pd.DataFrame) -> DerivedViews:
    """Compute all four views for df."""
    return DerivedViews(
        category_distribution=category_distribution(df),
        yearly_trend=yearly_trend(df),
        age_histogram=age_histogram(df),
        summary=summary_stats(df),
    )


# =============================================================================
# View Builder
# =============================================================================


class CrimeViewBuilder(BaseViewBuilder[DerivedViews]):
    """View builder for filtered crime records."""

    def __init__(self, config: Settings | None = None):
        """Initialize crime view builder."""
        super().__init__(config)

    def get_dataset_name(self) -> str:
        """Return dataset name."""
        return "crime"

    def build_views(self, df: pd.DataFrame) -> DerivedViews:
        """Compute the derived views for a filtered frame."""
        if len(df) == 0:
            logger.info("No records match the current filters; views are empty")
        return build_views(df)

    def get_view_sizes(self, views: DerivedViews) -> dict[str, int]:
        return {
            "category_distribution": len(views.category_distribution.labels),
            "yearly_trend": len(views.yearly_trend.points),
            "age_histogram": len(views.age_histogram.bucket_starts),
            "summary": len(views.summary.rows),
        }
