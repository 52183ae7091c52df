"""
Unit tests for population reference data.
"""

import pandas as pd
import pytest

from neighborhood_safety.enrichment import (
    PopulationConfidence,
    PopulationDataError,
    PopulationRecord,
    PopulationTable,
)


class TestPopulationRecord:
    """Test cases for PopulationRecord."""

    def test_confidence_coerced(self):
        record = PopulationRecord("Hollywood", 89000, confidence="medium")
        assert record.confidence == PopulationConfidence.MEDIUM

    def test_density(self):
        record = PopulationRecord("Hollywood", 89000, area_sq_miles=3.5)
        assert record.density == pytest.approx(25428.571, rel=1e-6)

    def test_density_without_area(self):
        assert PopulationRecord("Hollywood", 89000).density is None

    def test_negative_population(self):
        with pytest.raises(PopulationDataError, match="Negative population"):
            PopulationRecord("Hollywood", -1)

    def test_negative_area(self):
        with pytest.raises(PopulationDataError, match="Negative area"):
            PopulationRecord("Hollywood", 10, area_sq_miles=-2.0)

    def test_unknown_confidence(self):
        with pytest.raises(PopulationDataError, match="Unknown confidence"):
            PopulationRecord("Hollywood", 10, confidence="guess")


class TestPopulationTable:
    """Test cases for PopulationTable."""

    def test_lookup(self, population_table):
        assert population_table.population("Hollywood") == 89000
        assert population_table.confidence("Silver Lake") == "medium"
        assert "Hollywood" in population_table
        assert len(population_table) == 2

    def test_missing_neighborhood(self, population_table):
        """Test no default population is ever substituted."""
        assert population_table.population("Echo Park") is None
        assert population_table.confidence("Echo Park") == "unknown"
        assert population_table.density("Echo Park") is None

    def test_zero_population_is_unknown(self):
        table = PopulationTable([PopulationRecord("Industrial", 0)])
        assert table.population("Industrial") is None

    def test_duplicate_rejected(self):
        with pytest.raises(PopulationDataError, match="Duplicate"):
            PopulationTable([PopulationRecord("A", 1), PopulationRecord("A", 2)])

    def test_read_only(self, population_table):
        with pytest.raises(TypeError):
            population_table["New"] = PopulationRecord("New", 1)

    def test_total_population(self, population_table):
        assert population_table.total_population() == 121000


class TestPopulationLoading:
    """Test cases for DataFrame and CSV loading."""

    @pytest.fixture
    def population_df(self):
        return pd.DataFrame(
            {
                "neighborhood": ["Hollywood", " Silver Lake "],
                "population": [89000, "32000"],
                "area_sq_miles": [3.5, None],
                "confidence": ["HIGH", None],
                "source": ["census_2020", None],
            }
        )

    def test_from_dataframe(self, population_df):
        table = PopulationTable.from_dataframe(population_df)

        assert table.population("Silver Lake") == 32000
        assert table["Hollywood"].source == "census_2020"
        assert table["Silver Lake"].area_sq_miles is None
        assert table["Silver Lake"].confidence == PopulationConfidence.HIGH

    def test_minimal_columns(self):
        table = PopulationTable.from_dataframe(
            pd.DataFrame({"neighborhood": ["A"], "population": [100]})
        )
        assert table["A"].area_sq_miles is None

    def test_missing_columns(self):
        with pytest.raises(PopulationDataError, match="missing columns"):
            PopulationTable.from_dataframe(pd.DataFrame({"neighborhood": ["A"]}))

    def test_non_numeric_population(self):
        df = pd.DataFrame({"neighborhood": ["A"], "population": ["lots"]})
        with pytest.raises(PopulationDataError, match="Non-numeric"):
            PopulationTable.from_dataframe(df)

    def test_from_csv(self, tmp_path, population_df):
        path = tmp_path / "population.csv"
        population_df.to_csv(path, index=False)

        table = PopulationTable.from_csv(path)

        assert table.population("Hollywood") == 89000
        assert table.population("Silver Lake") == 32000

    def test_to_dataframe(self, population_table):
        df = population_table.to_dataframe()
        assert list(df.columns) == PopulationTable.COLUMNS
        assert len(df) == 2
