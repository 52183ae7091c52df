"""
Unit tests for CrimeAggregator.

Tests the three-stage fold (coordinates -> neighborhood -> category) and
the conservation of processed incidents.
"""

from datetime import UTC, datetime

import pytest

from neighborhood_safety.aggregation import (
    AggregateSource,
    CrimeAggregator,
    NeighborhoodAggregate,
    aggregate_incidents,
    stamp_date_range,
)
from neighborhood_safety.classification import NIBRS_TABLE, CrimeCategory, CrimeClassifier
from neighborhood_safety.shared.geo import BoundaryConfigurationError
from neighborhood_safety.shared.temporal import DateRange


class TestCrimeAggregator:
    """Test cases for CrimeAggregator.aggregate."""

    @pytest.fixture
    def aggregator(self):
        return CrimeAggregator()

    @pytest.fixture
    def mixed_incidents(self, make_incident):
        """Eight incidents covering every outcome of the fold."""
        return [
            make_incident("624"),  # Hollywood, violent
            make_incident("510"),  # Hollywood, car theft
            make_incident("999", description="LOITERING"),  # Hollywood, unclassified
            make_incident("310", lat="34.10", lon="-118.27"),  # Silver Lake, break-in
            make_incident("440", lat="33.50", lon="-117.00"),  # outside every boundary
            make_incident("624", lat="0", lon="0"),  # sentinel
            make_incident("624", lat="not-a-number", lon="-118.33"),  # unparseable
            make_incident("624", lat=None, lon=None),  # missing
        ]

    def test_hollywood_violent_incident(self, aggregator, la_boundaries, make_incident):
        """Test one violent incident inside Hollywood."""
        result = aggregator.aggregate([make_incident("624", "34.1016", "-118.3267")], la_boundaries)
        hollywood = result.per_neighborhood["Hollywood"]

        assert hollywood.violent == 1
        assert hollywood.total == 1
        assert hollywood.incident_count == 1
        assert result.mapped_count == 1
        assert result.unmapped_count == 0
        assert result.invalid_coordinate_count == 0

    def test_all_neighborhoods_zero_initialized(self, aggregator, la_boundaries):
        """Test neighborhoods without incidents are present with zero counts."""
        result = aggregator.aggregate([], la_boundaries)

        assert list(result.per_neighborhood) == ["Hollywood", "Silver Lake", "Echo Park"]
        for aggregate in result.per_neighborhood.values():
            assert aggregate.total == 0
            assert aggregate.incident_count == 0
        assert result.percentage_mapped == 0.0

    def test_three_stage_counts(self, aggregator, la_boundaries, mixed_incidents):
        result = aggregator.aggregate(mixed_incidents, la_boundaries)

        assert result.mapped_count == 4
        assert result.unmapped_count == 1
        assert result.invalid_coordinate_count == 3
        assert result.unclassified_count == 1
        assert result.invalid_reasons == {"zero_sentinel": 1, "unparseable": 2}

    def test_conservation(self, aggregator, la_boundaries, mixed_incidents):
        """Test every processed incident lands in exactly one bucket."""
        result = aggregator.aggregate(mixed_incidents, la_boundaries)

        assert result.total_processed == len(mixed_incidents)
        assert result.mapped_count == sum(a.total for a in result.per_neighborhood.values())

    def test_unclassified_counts_toward_total(self, aggregator, la_boundaries, mixed_incidents):
        """Test an unclassified incident counts in total but in no category."""
        result = aggregator.aggregate(mixed_incidents, la_boundaries)
        hollywood = result.per_neighborhood["Hollywood"]

        assert hollywood.total == 3
        assert hollywood.incident_count == 3
        assert hollywood.classified == 2
        assert hollywood.unclassified == 1

    def test_percentage_mapped(self, aggregator, la_boundaries, mixed_incidents):
        result = aggregator.aggregate(mixed_incidents, la_boundaries)
        assert result.percentage_mapped == 50.0

    def test_source_tag(self, la_boundaries, make_incident):
        """Test every aggregate carries the source tag it was built with."""
        aggregator = CrimeAggregator(CrimeClassifier(NIBRS_TABLE))
        incident = make_incident(None, description="Motor Vehicle Theft")
        result = aggregator.aggregate([incident], la_boundaries, AggregateSource.SECONDARY)

        assert result.per_neighborhood["Hollywood"].car_theft == 1
        assert {a.source for a in result.per_neighborhood.values()} == {AggregateSource.SECONDARY}

    def test_duplicate_boundaries_rejected(self, aggregator, unit_square):
        with pytest.raises(BoundaryConfigurationError):
            aggregator.aggregate([], [unit_square, unit_square])

    def test_accepts_generator(self, aggregator, la_boundaries, make_incident):
        """Test incidents may be streamed."""
        result = aggregator.aggregate((make_incident() for _ in range(5)), la_boundaries)
        assert result.per_neighborhood["Hollywood"].violent == 5

    def test_convenience_function(self, la_boundaries, make_incident):
        result = aggregate_incidents([make_incident()], la_boundaries)
        assert result.mapped_count == 1

    def test_to_dict(self, aggregator, la_boundaries, mixed_incidents):
        summary = aggregator.aggregate(mixed_incidents, la_boundaries).to_dict()
        assert summary["total_processed"] == 8
        assert summary["neighborhoods"] == 3


class TestNeighborhoodAggregate:
    """Test cases for NeighborhoodAggregate."""

    def test_record(self):
        aggregate = NeighborhoodAggregate(name="Test")
        aggregate.record(CrimeCategory.BREAK_IN)
        aggregate.record(None)

        assert aggregate.break_in == 1
        assert aggregate.total == 2
        assert aggregate.category_counts() == {
            CrimeCategory.VIOLENT: 0,
            CrimeCategory.CAR_THEFT: 0,
            CrimeCategory.BREAK_IN: 1,
            CrimeCategory.PETTY_THEFT: 0,
        }

    def test_to_dict(self):
        aggregate = NeighborhoodAggregate(name="Test", violent=1, total=1, incident_count=1)
        data = aggregate.to_dict()

        assert data["violent"] == 1
        assert data["date_range"] is None
        assert data["source"] == "primary"

    def test_with_date_range_returns_copy(self):
        window = DateRange(datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 1, 8, tzinfo=UTC))
        original = NeighborhoodAggregate(name="Test", violent=2, total=2, incident_count=2)
        stamped = original.with_date_range(window)

        assert stamped.date_range == window
        assert original.date_range is None
        assert stamped.violent == 2


class TestStampDateRange:
    """Test cases for stamp_date_range."""

    def test_uniform_window(self, la_boundaries, make_incident):
        window = DateRange(datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 1, 29, tzinfo=UTC))
        result = CrimeAggregator().aggregate([make_incident()], la_boundaries)

        stamped = stamp_date_range(result.per_neighborhood, window)

        assert all(a.date_range == window for a in stamped.values())
        assert all(a.date_range is None for a in result.per_neighborhood.values())

    def test_result_date_range(self, la_boundaries, make_incident):
        window = DateRange(datetime(2024, 1, 1, tzinfo=UTC), datetime(2024, 1, 29, tzinfo=UTC))
        result = CrimeAggregator().aggregate([make_incident()], la_boundaries)

        assert result.date_range is None
        assert result.with_date_range(window).date_range == window
