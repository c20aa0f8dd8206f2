"""
Crime Map - Category Styles

Fixed lookup tables shared by the map and chart front ends. Tables are
read-only mappings built at import time.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from crimemap.datasets.crime.models import DISPLAY_CATEGORIES


@dataclass(frozen=True)
class MarkerStyle:
    """Circle marker appearance for one category."""

    stroke: str
    fill: str
    radius: int


CATEGORY_COLORS = MappingProxyType(
    {
        "petty": "yellow",
        "serious": "orange",
        "heinous": "red",
        "ccl": "purple",
        "cncp": "green",
    }
)

MARKER_STYLES = MappingProxyType(
    {
        "petty": MarkerStyle(stroke="yellow", fill="rgba(255, 255, 0, 0.5)", radius=9),
        "serious": MarkerStyle(stroke="orange", fill="rgba(255, 165, 0, 0.5)", radius=9),
        "heinous": MarkerStyle(stroke="red", fill="rgba(255, 0, 0, 0.5)", radius=9),
        "ccl": MarkerStyle(stroke="purple", fill="rgba(128, 0, 128, 0.5)", radius=8),
        "cncp": MarkerStyle(stroke="green", fill="rgba(0, 128, 0, 0.5)", radius=8),
    }
)

DEFAULT_MARKER_STYLE = MarkerStyle(stroke="blue", fill="rgba(0, 0, 255, 0.5)", radius=9)

TREND_LINE_COLOR = "blue"
AGE_BAR_COLOR = "teal"


def marker_style(category: str) -> MarkerStyle:
    """Style for a category, falling back to the default for anything unknown."""
    return MARKER_STYLES.get(str(category), DEFAULT_MARKER_STYLE)


def category_color(category: str) -> str | None:
    return CATEGORY_COLORS.get(str(category))


def legend_entries() -> list[tuple[str, str]]:
    """(category, color) pairs in display order."""
    return [(c.value, CATEGORY_COLORS[c.value]) for c in DISPLAY_CATEGORIES]
