"""
Crime Map - Crime Dataset

Components:
    - CrimeIngester: Reads the crime record CSV from a path or URL
    - CrimePreprocessor: Normalizes records and drops unusable coordinates
    - FilterState / apply_filters: Interactive query filters
    - CrimeViewBuilder: Category, yearly, age and summary views
    - CrimeMapSession: Ties the stages together and recomputes on change

Usage:
    from crimemap.datasets.crime import (
        CrimeIngester,
        CrimePreprocessor,
        CrimeViewBuilder,
        FilterState,
        apply_filters,
    )

    # Ingest
    ingester = CrimeIngester()
    result = ingester.run(execution_date="2024-01-15", source="data/crime_data.csv")
    raw_df = ingester.get_data()

    # Preprocess
    preprocessor = CrimePreprocessor()
    result = preprocessor.run(raw_df, execution_date="2024-01-15")
    valid_df = preprocessor.get_data()

    # Filter and build views
    filtered_df = apply_filters(valid_df, FilterState(category="petty"))
    builder = CrimeViewBuilder()
    result = builder.run(filtered_df)
    views = builder.get_data()
"""

from crimemap.datasets.crime.filters import FilterState, apply_filters, station_options
from crimemap.datasets.crime.ingest import CrimeIngester, ingest_crime_data
from crimemap.datasets.crime.models import CrimeCategory, CrimeRecord, records_from_frame
from crimemap.datasets.crime.preprocess import CrimePreprocessor, preprocess_crime_data
from crimemap.datasets.crime.session import CrimeMapSession, DashboardSnapshot
from crimemap.datasets.crime.views import CrimeViewBuilder, DerivedViews, build_views

__all__ = [
    "CrimeIngester",
    "CrimePreprocessor",
    "CrimeViewBuilder",
    "CrimeMapSession",
    "DashboardSnapshot",
    "CrimeCategory",
    "CrimeRecord",
    "DerivedViews",
    "FilterState",
    "apply_filters",
    "build_views",
    "ingest_crime_data",
    "preprocess_crime_data",
    "records_from_frame",
    "station_options",
]
