"""
Unit tests for the multi-source merger.
"""

from datetime import UTC, datetime

import pytest

from neighborhood_safety.aggregation import (
    AggregateSource,
    AggregationResult,
    NeighborhoodAggregate,
    merge_aggregations,
    merge_results,
)
from neighborhood_safety.shared.temporal import DateRange


def _window(start_day, end_day):
    return DateRange(datetime(2024, 1, start_day, tzinfo=UTC), datetime(2024, 1, end_day, tzinfo=UTC))


class TestMergeAggregations:
    """Test cases for merge_aggregations."""

    @pytest.fixture
    def legacy(self):
        return {
            "Hollywood": NeighborhoodAggregate(
                name="Hollywood",
                violent=3,
                car_theft=1,
                total=5,
                incident_count=5,
                date_range=_window(1, 10),
            ),
            "Silver Lake": NeighborhoodAggregate(
                name="Silver Lake", petty_theft=2, total=2, incident_count=2, date_range=_window(1, 10)
            ),
        }

    @pytest.fixture
    def nibrs(self):
        return {
            "Hollywood": NeighborhoodAggregate(
                name="Hollywood",
                violent=1,
                break_in=2,
                total=3,
                incident_count=3,
                date_range=_window(5, 20),
                source=AggregateSource.SECONDARY,
            ),
            "Echo Park": NeighborhoodAggregate(
                name="Echo Park",
                violent=1,
                total=1,
                incident_count=1,
                date_range=_window(5, 20),
                source=AggregateSource.SECONDARY,
            ),
        }

    def test_counts_summed(self, legacy, nibrs):
        merged = merge_aggregations([legacy, nibrs])
        hollywood = merged["Hollywood"]

        assert hollywood.violent == 4
        assert hollywood.car_theft == 1
        assert hollywood.break_in == 2
        assert hollywood.total == 8
        assert hollywood.incident_count == 8

    def test_union_of_names(self, legacy, nibrs):
        """Test a neighborhood missing from one source contributes zero from it."""
        merged = merge_aggregations([legacy, nibrs])

        assert list(merged) == ["Hollywood", "Silver Lake", "Echo Park"]
        assert merged["Silver Lake"].petty_theft == 2
        assert merged["Echo Park"].violent == 1

    def test_date_range_union(self, legacy, nibrs):
        merged = merge_aggregations([legacy, nibrs])

        assert merged["Hollywood"].date_range == _window(1, 20)
        assert merged["Silver Lake"].date_range == _window(1, 10)

    def test_tagged_combined(self, legacy, nibrs):
        merged = merge_aggregations([legacy, nibrs])
        assert {a.source for a in merged.values()} == {AggregateSource.COMBINED}

    def test_commutative(self, legacy, nibrs):
        """Test merge(a, b) == merge(b, a) up to key order."""
        assert merge_aggregations([legacy, nibrs]) == merge_aggregations([nibrs, legacy])

    def test_inputs_not_mutated(self, legacy, nibrs):
        merge_aggregations([legacy, nibrs])
        assert legacy["Hollywood"].violent == 3
        assert legacy["Hollywood"].source == AggregateSource.PRIMARY

    def test_empty(self):
        assert merge_aggregations([]) == {}

    def test_single_source(self, legacy):
        merged = merge_aggregations([legacy])
        assert merged["Hollywood"].total == 5


class TestMergeResults:
    """Test cases for merge_results."""

    def test_quality_counters_summed(self):
        a = AggregationResult(
            per_neighborhood={"A": NeighborhoodAggregate(name="A", total=3, incident_count=3)},
            mapped_count=3,
            unmapped_count=1,
            invalid_coordinate_count=2,
            unclassified_count=1,
            invalid_reasons={"zero_sentinel": 2},
        )
        b = AggregationResult(
            per_neighborhood={"A": NeighborhoodAggregate(name="A", total=1, incident_count=1)},
            mapped_count=1,
            invalid_coordinate_count=1,
            invalid_reasons={"zero_sentinel": 1},
        )
        merged = merge_results([a, b])

        assert merged.mapped_count == 4
        assert merged.unmapped_count == 1
        assert merged.invalid_coordinate_count == 3
        assert merged.unclassified_count == 1
        assert merged.invalid_reasons == {"zero_sentinel": 3}
        assert merged.per_neighborhood["A"].total == 4
        assert merged.total_processed == 8
