"""
Unit tests for the cross-neighborhood summary.
"""

import pytest

from neighborhood_safety.aggregation import NeighborhoodAggregate, category_averages, summarize


class TestSummarize:
    """Test cases for summarize and category_averages."""

    @pytest.fixture
    def aggregates(self):
        return [
            NeighborhoodAggregate(name="A", violent=4, petty_theft=2, total=6, incident_count=6),
            NeighborhoodAggregate(name="B", violent=1, total=2, incident_count=2),
            NeighborhoodAggregate(name="C", car_theft=3, break_in=1, total=4, incident_count=4),
        ]

    def test_safest_and_most_dangerous(self, aggregates):
        summary = summarize(aggregates)

        assert summary.safest == "B"
        assert summary.safest_total == 2
        assert summary.most_dangerous == "A"
        assert summary.most_dangerous_total == 6

    def test_totals(self, aggregates):
        summary = summarize(aggregates)
        assert summary.totals == {
            "violent": 5,
            "car_theft": 3,
            "break_in": 1,
            "petty_theft": 2,
            "total": 12,
        }

    def test_averages(self, aggregates):
        averages = category_averages(aggregates)
        assert averages["violent"] == pytest.approx(5 / 3)
        assert averages["total"] == pytest.approx(4.0)

    def test_rounded_averages_in_summary(self, aggregates):
        assert summarize(aggregates).averages["violent"] == 1.67

    def test_tie_goes_to_first(self):
        tied = [NeighborhoodAggregate(name=n, total=1, incident_count=1) for n in ("X", "Y")]
        summary = summarize(tied)
        assert summary.safest == "X"
        assert summary.most_dangerous == "X"

    def test_empty(self):
        summary = summarize([])
        assert summary.neighborhoods == 0
        assert summary.safest is None
        assert summary.totals["total"] == 0
        assert category_averages([])["violent"] == 0.0
        assert summary.to_dict()["safest"] is None
