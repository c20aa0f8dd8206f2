"""
Unit tests for the crime view builder and its aggregations.
"""

import pandas as pd
import pytest

from crimemap.datasets.crime.views import (
    CrimeViewBuilder,
    DerivedViews,
    SummaryRow,
    age_histogram,
    build_views,
    category_counts,
    category_distribution,
    round_half_up,
    summary_stats,
    yearly_trend,
)


def make_records(rows):
    """Build a filtered-record frame from (date, category, age) tuples."""
    return pd.DataFrame(
        {
            "date": pd.to_datetime([r[0] for r in rows]),
            "category": [r[1] for r in rows],
            "age": pd.array([r[2] for r in rows], dtype="Int64"),
        }
    )


@pytest.fixture
def example_filtered():
    """Petty age 10 in 2020 and heinous age 30 in 2021."""
    return make_records([("2020-05-01", "petty", 10), ("2021-07-01", "heinous", 30)])


@pytest.fixture
def mixed_filtered():
    return make_records(
        [
            ("2021-02-01", "serious", 31),
            ("2019-03-14", "petty", 24),
            ("2021-09-23", "uncategorized", 7),
            ("2020-06-30", "serious", None),
            ("2019-11-02", "serious", 44),
        ]
    )


class TestCategoryDistribution:
    """Test category distribution view."""

    def test_example(self, example_filtered):
        view = category_distribution(example_filtered)

        assert view.as_mapping() == {"petty": 1, "heinous": 1}
        assert view.colors == ["yellow", "red"]

    def test_display_order_and_zero_counts_omitted(self, mixed_filtered):
        view = category_distribution(mixed_filtered)

        assert view.labels == ["petty", "serious"]
        assert view.counts == [1, 3]

    def test_uncategorized_not_displayed_but_counted(self, mixed_filtered):
        view = category_distribution(mixed_filtered)
        counts = category_counts(mixed_filtered)

        assert "uncategorized" not in view.labels
        assert sum(counts.values()) == len(mixed_filtered)
        assert counts["uncategorized"] == 1

    def test_chart_payload(self, example_filtered):
        payload = category_distribution(example_filtered).to_dict()

        assert payload["labels"] == ["petty", "heinous"]
        assert payload["datasets"][0]["data"] == [1, 1]
        assert payload["datasets"][0]["backgroundColor"] == ["yellow", "red"]


class TestYearlyTrend:
    """Test yearly trend view."""

    def test_example(self, example_filtered):
        assert yearly_trend(example_filtered).as_mapping() == {2020: 1, 2021: 1}

    def test_years_ascending(self, mixed_filtered):
        view = yearly_trend(mixed_filtered)

        assert view.points == [(2019, 2), (2020, 1), (2021, 2)]
        assert view.labels == ["2019", "2020", "2021"]

    def test_counts_sum_to_total(self, mixed_filtered):
        assert sum(yearly_trend(mixed_filtered).counts) == len(mixed_filtered)


class TestAgeHistogram:
    """Test age histogram view."""

    def test_example(self, example_filtered):
        assert age_histogram(example_filtered).as_mapping() == {"10-14": 1, "30-34": 1}

    def test_bucket_boundaries(self):
        df = make_records(
            [("2020-01-01", "petty", 7), ("2020-01-01", "petty", 5), ("2020-01-01", "petty", 9)]
        )

        assert age_histogram(df).as_mapping() == {"5-9": 3}

    def test_buckets_ascending_and_unknown_ages_left_out(self, mixed_filtered):
        view = age_histogram(mixed_filtered)

        assert view.labels == ["5-9", "20-24", "30-34", "40-44"]
        assert sum(view.counts) == 4


class TestSummaryStats:
    """Test the summary table."""

    def test_example(self, example_filtered):
        stats = summary_stats(example_filtered)

        assert stats.total == 2
        assert stats.row("petty") == SummaryRow("petty", 1, 50.0, 10.0)
        assert stats.row("heinous") == SummaryRow("heinous", 1, 50.0, 30.0)

    def test_first_appearance_order(self, mixed_filtered):
        stats = summary_stats(mixed_filtered)

        assert [r.category for r in stats.rows] == ["serious", "petty", "uncategorized"]

    def test_average_uses_known_ages(self, mixed_filtered):
        row = summary_stats(mixed_filtered).row("serious")

        assert row.count == 3
        assert row.percentage == 60.0
        assert row.average_age == 37.5

    def test_rounding(self):
        df = make_records(
            [("2020-01-01", "petty", 10), ("2020-01-01", "petty", 11), ("2020-01-01", "heinous", 11)]
        )
        stats = summary_stats(df)

        assert stats.row("petty").percentage == 66.7
        assert stats.row("petty").average_age == 10.5
        assert stats.row("heinous").percentage == 33.3

    def test_rounding_ties_go_up(self):
        """Exact ties round up: 1 of 16 is 6.25% and ages 10,10,10,11 average 10.25."""
        rows = [("2020-01-01", "petty", 10)] + [("2020-01-01", "serious", 30)] * 15
        petty = summary_stats(make_records(rows)).row("petty")

        assert petty.percentage == 6.3
        assert petty.display()["percentage"] == "6.3%"

        ages = make_records([("2020-01-01", "heinous", age) for age in (10, 10, 10, 11)])
        heinous = summary_stats(ages).row("heinous")

        assert heinous.average_age == 10.3
        assert heinous.display()["avg_age"] == "10.3"

    def test_round_half_up(self):
        assert round_half_up(0.25) == 0.3
        assert round_half_up(12.5) == 12.5
        assert round_half_up(2 / 3 * 100) == 66.7

    def test_all_ages_unknown(self):
        df = make_records([("2020-01-01", "petty", None)])
        row = summary_stats(df).row("petty")

        assert row.average_age is None
        assert row.display()["avg_age"] == "-"

    def test_display(self):
        row = SummaryRow("petty", 1, 50.0, 10.0)

        assert row.display() == {
            "category": "petty",
            "cases": "1",
            "percentage": "50.0%",
            "avg_age": "10.0",
        }

    def test_missing_category(self, example_filtered):
        assert summary_stats(example_filtered).row("ccl") is None


class TestEmptyViews:
    """An empty filtered set yields empty views without errors."""

    def test_build_views_empty(self):
        views = build_views(make_records([]))

        assert views == DerivedViews()
        assert views.summary.total == 0
        assert views.category_distribution.as_mapping() == {}
        assert views.yearly_trend.points == []
        assert views.age_histogram.labels == []

    def test_to_dict_empty(self):
        payload = DerivedViews().to_dict()

        assert payload["summary"] == {"total": 0, "rows": []}
        assert payload["yearly_trend"]["labels"] == []


class TestCrimeViewBuilder:
    """Test cases for CrimeViewBuilder."""

    @pytest.fixture
    def builder(self):
        return CrimeViewBuilder()

    def test_get_dataset_name(self, builder):
        assert builder.get_dataset_name() == "crime"

    def test_run_success(self, builder, example_filtered):
        result = builder.run(example_filtered)

        assert result.success
        assert result.rows_input == 2
        assert result.views_computed == 4
        assert result.view_sizes == {
            "category_distribution": 2,
            "yearly_trend": 2,
            "age_histogram": 2,
            "summary": 2,
        }
        assert builder.get_data() == build_views(example_filtered)

    def test_run_empty(self, builder):
        result = builder.run(make_records([]))

        assert result.success
        assert builder.get_data() == DerivedViews()

    def test_run_failure(self, builder):
        """Frames without the expected columns fail without raising."""
        result = builder.run(pd.DataFrame({"x": [1]}))

        assert not result.success
        assert result.error_message
        assert builder.get_data() is None

    def test_result_to_dict(self, builder, example_filtered):
        result = builder.run(example_filtered)
        result_dict = result.to_dict()

        assert result_dict["dataset"] == "crime"
        assert result_dict["success"] is True
