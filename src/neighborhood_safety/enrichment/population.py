"""
Neighborhood Safety - Population Reference Data

Read-only population table keyed by neighborhood name. A neighborhood
with no record (or a recorded population of zero) has no per-capita
figures; nothing downstream substitutes a default population.

Usage:
    from neighborhood_safety.enrichment import PopulationTable

    table = PopulationTable.from_csv("data/population.csv")
    table.population("Hollywood")  # 89000
    table.population("Atlantis")   # None
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

UNKNOWN_CONFIDENCE = "unknown"


class PopulationConfidence(StrEnum):
    """Quality of the population estimate's source."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class PopulationRecord:
    """Population estimate for one neighborhood."""

    neighborhood: str
    population: int
    area_sq_miles: float | None = None
    confidence: PopulationConfidence = PopulationConfidence.HIGH
    source: str | None = None

    def __post_init__(self) -> None:
        if self.population < 0:
            raise PopulationDataError(
                f"Negative population for '{self.neighborhood}': {self.population}"
            )
        if self.area_sq_miles is not None and self.area_sq_miles < 0:
            raise PopulationDataError(
                f"Negative area for '{self.neighborhood}': {self.area_sq_miles}"
            )
        try:
            object.__setattr__(self, "confidence", PopulationConfidence(self.confidence))
        except ValueError as e:
            raise PopulationDataError(
                f"Unknown confidence tag for '{self.neighborhood}': {self.confidence!r}"
            ) from e

    @property
    def density(self) -> float | None:
        """People per square mile."""
        if not self.area_sq_miles:
            return None
        return self.population / self.area_sq_miles


class PopulationTable(Mapping[str, PopulationRecord]):
    """Immutable neighborhood name -> ``PopulationRecord`` lookup."""

    COLUMNS = ["neighborhood", "population", "area_sq_miles", "confidence", "source"]

    def __init__(self, records: Iterable[PopulationRecord] = ()):
        table: dict[str, PopulationRecord] = {}
        for record in records:
            if record.neighborhood in table:
                raise PopulationDataError(
                    f"Duplicate population record for '{record.neighborhood}'"
                )
            table[record.neighborhood] = record
        self._records = MappingProxyType(table)

    def __getitem__(self, name: str) -> PopulationRecord:
        return self._records[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"PopulationTable({len(self)} neighborhoods)"

    def population(self, name: str) -> int | None:
        """Population, or None when unknown or zero."""
        record = self._records.get(name)
        if record is None or record.population == 0:
            return None
        return record.population

    def confidence(self, name: str) -> str:
        """Confidence tag, or ``"unknown"`` when there is no record."""
        record = self._records.get(name)
        return str(record.confidence) if record else UNKNOWN_CONFIDENCE

    def density(self, name: str) -> float | None:
        record = self._records.get(name)
        return record.density if record else None

    def total_population(self) -> int:
        return sum(r.population for r in self._records.values())

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> PopulationTable:
        """
        Build a table from a DataFrame with ``COLUMNS``.

        ``area_sq_miles``, ``confidence`` and ``source`` are optional.

        Raises:
            PopulationDataError: On missing required columns or bad values
        """
        missing = {"neighborhood", "population"} - set(df.columns)
        if missing:
            raise PopulationDataError(f"Population data missing columns: {sorted(missing)}")

        records = []
        for row in df.to_dict("records"):
            population = _optional_float(row["population"])
            if population is None:
                raise PopulationDataError(
                    f"Non-numeric population for '{row['neighborhood']}': {row['population']!r}"
                )
            area = _optional_float(row.get("area_sq_miles"))
            confidence = row.get("confidence")
            source = row.get("source")
            records.append(
                PopulationRecord(
                    neighborhood=str(row["neighborhood"]).strip(),
                    population=int(population),
                    area_sq_miles=area,
                    confidence=(
                        PopulationConfidence.HIGH
                        if confidence is None or pd.isna(confidence)
                        else str(confidence).strip().lower()
                    ),
                    source=None if source is None or pd.isna(source) else str(source),
                )
            )

        return cls(records)

    @classmethod
    def from_csv(cls, path: str | Path) -> PopulationTable:
        """Load a population table from CSV."""
        path = Path(path)
        table = cls.from_dataframe(pd.read_csv(path))
        logger.info(
            f"Loaded population data for {len(table)} neighborhoods from {path.name}",
            extra={"path": str(path), "neighborhoods": len(table)},
        )
        return table

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "neighborhood": r.neighborhood,
                    "population": r.population,
                    "area_sq_miles": r.area_sq_miles if r.area_sq_miles is not None else math.nan,
                    "confidence": str(r.confidence),
                    "source": r.source,
                }
                for r in self._records.values()
            ],
            columns=self.COLUMNS,
        )


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    parsed = pd.to_numeric(value, errors="coerce")
    return None if pd.isna(parsed) else float(parsed)


# =============================================================================
# Exception Classes
# =============================================================================


class PopulationDataError(Exception):
    """Raised when population reference data is structurally invalid."""
