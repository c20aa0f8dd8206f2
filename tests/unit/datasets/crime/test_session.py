"""
Unit tests for CrimeMapSession.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from crimemap.datasets.base import IngestionError
from crimemap.datasets.crime.filters import FilterState
from crimemap.datasets.crime.models import CrimeCategory
from crimemap.datasets.crime.session import CrimeMapSession, DashboardSnapshot
from crimemap.datasets.crime.views import DerivedViews


@pytest.fixture
def csv_file(tmp_path, sample_csv_text):
    path = tmp_path / "crime_data.csv"
    path.write_text(sample_csv_text, encoding="utf-8")
    return path


@pytest.fixture
def session(test_config):
    return CrimeMapSession(test_config)


@pytest.fixture
def loaded_session(session, csv_file):
    session.load(str(csv_file), execution_date="2024-01-15")
    return session


class TestInitialState:
    """A fresh session has defaults and empty views."""

    def test_empty_dataset(self, session):
        assert len(session.dataset) == 0
        assert session.snapshot.record_count == 0
        assert session.snapshot.views == DerivedViews()

    def test_default_filters(self, session):
        assert session.filter_state == FilterState()

    def test_station_options(self, session):
        assert session.station_options() == ["All"]


class TestLoad:
    """Test the load pipeline."""

    def test_load_publishes_valid_records(self, loaded_session):
        # all three rows carry valid coordinates once Sheshadripuram is overridden
        assert len(loaded_session.dataset) == 3
        assert loaded_session.snapshot.record_count == 3

    def test_load_returns_snapshot(self, session, csv_file):
        snapshot = session.load(str(csv_file), execution_date="2024-01-15")

        assert isinstance(snapshot, DashboardSnapshot)
        assert snapshot is session.snapshot

    def test_views_after_load(self, loaded_session):
        views = loaded_session.snapshot.views

        assert views.category_distribution.as_mapping() == {
            "petty": 1,
            "serious": 1,
            "heinous": 1,
        }
        assert views.yearly_trend.as_mapping() == {2020: 1, 2021: 1, 2022: 1}

    def test_load_from_url(self, session, mock_remote_csv):
        snapshot = session.load("https://example.org/crime_data.csv")

        assert snapshot.record_count == 3

    def test_load_failure_raises(self, session, tmp_path):
        with pytest.raises(IngestionError):
            session.load(str(tmp_path / "missing.csv"))

    def test_load_failure_leaves_dataset_empty(self, loaded_session, tmp_path):
        with pytest.raises(IngestionError):
            loaded_session.load(str(tmp_path / "missing.csv"))

        assert len(loaded_session.dataset) == 0
        assert loaded_session.snapshot.views == DerivedViews()

    def test_load_missing_columns(self, session, tmp_path):
        path = tmp_path / "short.csv"
        path.write_text("date,crime_type\n2020-01-01,petty\n", encoding="utf-8")

        with pytest.raises(IngestionError, match="Missing required column"):
            session.load(str(path))

    def test_station_options_after_load(self, loaded_session):
        assert loaded_session.station_options() == [
            "All",
            "Sheshadripuram",
            "Kengeri",
            "Koramangala",
        ]


class TestFilters:
    """Test filter updates."""

    def test_update_filters(self, loaded_session):
        snapshot = loaded_session.update_filters(min_age=20)

        assert snapshot.filter_state.min_age == 20
        assert snapshot.record_count == 2
        assert snapshot.views.category_distribution.as_mapping() == {"serious": 1, "heinous": 1}

    def test_update_keeps_earlier_snapshot(self, loaded_session):
        before = loaded_session.snapshot
        after = loaded_session.update_filters(category="petty")

        assert before is not after
        assert before.record_count == 3
        assert after.record_count == 1

    def test_update_does_not_touch_dataset(self, loaded_session):
        loaded_session.update_filters(station="Kengeri")

        assert len(loaded_session.dataset) == 3

    def test_invalid_update_keeps_state(self, loaded_session):
        state = loaded_session.filter_state

        with pytest.raises(ValidationError):
            loaded_session.update_filters(category="robbery")

        assert loaded_session.filter_state == state

    def test_no_matches_gives_empty_views(self, loaded_session):
        snapshot = loaded_session.update_filters(end_date=date(2019, 12, 31))

        assert snapshot.record_count == 0
        assert snapshot.views == DerivedViews()

    def test_reset_filters(self, loaded_session):
        loaded_session.update_filters(category="heinous", min_age=40)
        snapshot = loaded_session.reset_filters()

        assert snapshot.filter_state == FilterState()
        assert snapshot.record_count == 3


class TestSnapshot:
    """Test snapshot helpers."""

    def test_map_records(self, loaded_session):
        records = loaded_session.update_filters(station="Sheshadripuram").map_records()

        assert len(records) == 1
        record = records[0]
        assert record.category == CrimeCategory.PETTY
        assert record.date == date(2020, 5, 1)
        assert record.age == 10
        assert record.latitude == pytest.approx(12.9913)
        assert record.has_valid_coordinates
        assert record.crime_descriptions == "phone theft"
        assert record.cncp_details is None

    def test_set_dataset(self, session, example_raw_rows):
        session.preprocessor.run(example_raw_rows, execution_date="2024-01-15")
        snapshot = session.set_dataset(session.preprocessor.get_data())

        assert snapshot.record_count == 2
        assert snapshot.views.summary.row("petty").average_age == 10.0
