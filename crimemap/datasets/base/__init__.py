"""
Crime Map - Base Classes for Datasets

Abstract base classes that dataset implementations inherit from.
These provide a consistent interface for:
- Data ingestion (BaseIngester)
- Data preprocessing (BasePreprocessor)
- Derived view building (BaseViewBuilder)

Usage:
    from crimemap.datasets.base import BaseIngester, BasePreprocessor, BaseViewBuilder

    class CrimeIngester(BaseIngester):
        def fetch_data(self, source: str | None = None) -> pd.DataFrame:
            ...
"""

from crimemap.datasets.base.ingester import BaseIngester, IngestionError, IngestionResult
from crimemap.datasets.base.preprocessor import BasePreprocessor, PreprocessingResult
from crimemap.datasets.base.view_builder import BaseViewBuilder, ViewBuildResult

__all__ = [
    "BaseIngester",
    "IngestionError",
    "IngestionResult",
    "BasePreprocessor",
    "PreprocessingResult",
    "BaseViewBuilder",
    "ViewBuildResult",
]
