"""
Neighborhood Safety - Incident Preprocessor

Turns a raw incident DataFrame, as returned by the open-data fetch
collaborator, into ``RawIncident`` records.

Transformations:
    - Column renaming from the source scheme to standardized names
    - Missing optional columns added as empty
    - String trimming for code, description and area
    - Occurrence timestamp parsing (unparseable values become None)
    - Duplicate incident removal

Coordinates are passed through untouched. Validating them is the
aggregation engine's job, so malformed coordinates always show up in its
invalid counter rather than disappearing here.

Usage:
    from neighborhood_safety.ingestion import IncidentPreprocessor, IncidentScheme

    preprocessor = IncidentPreprocessor(IncidentScheme.LEGACY)
    result = preprocessor.run(raw_df)
    incidents = preprocessor.get_data()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

import pandas as pd

from neighborhood_safety.classification import (
    LEGACY_TABLE,
    NIBRS_TABLE,
    ClassificationTable,
    legacy_table,
    nibrs_table,
)

logger = logging.getLogger(__name__)


class IncidentScheme(StrEnum):
    """Source schema of a raw incident feed."""

    LEGACY = "legacy"
    NIBRS = "nibrs"


@dataclass(frozen=True)
class RawIncident:
    """
    One reported crime, as received.

    ``lat`` and ``lon`` keep their raw form (usually numeric strings) and
    may be missing, zero or garbage.
    """

    code: Any
    description: str | None
    occurred_at: datetime | None
    lat: Any
    lon: Any
    area_name: str | None = None
    incident_id: str | None = None


@dataclass
class PreprocessingResult:
    """Result of a preprocessing operation."""

    scheme: str
    rows_input: int
    rows_output: int
    rows_dropped: int
    duration_seconds: float = 0.0
    success: bool = True
    error_message: str | None = None
    transformations_applied: list[str] = field(default_factory=list)
    drop_reasons: dict[str, int] = field(default_factory=dict)
    unparseable_dates: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for logging."""
        return {
            "scheme": self.scheme,
            "rows_input": self.rows_input,
            "rows_output": self.rows_output,
            "rows_dropped": self.rows_dropped,
            "duration_seconds": self.duration_seconds,
            "success": self.success,
            "error_message": self.error_message,
            "transformations_applied": self.transformations_applied,
            "drop_reasons": self.drop_reasons,
            "unparseable_dates": self.unparseable_dates,
        }


class IncidentPreprocessor:
    """Preprocessor for raw incident feeds in either supported scheme."""

    # Column mapping from raw API names to standardized names, per scheme
    COLUMN_MAPPINGS: dict[IncidentScheme, dict[str, str]] = {
        IncidentScheme.LEGACY: {
            "dr_no": "incident_id",
            "crm_cd": "code",
            "crm_cd_desc": "description",
            "date_occ": "occurred_at",
            "lat": "lat",
            "lon": "lon",
            "area_name": "area_name",
        },
        IncidentScheme.NIBRS: {
            "incident_number": "incident_id",
            "offense_code": "code",
            "offense_description": "description",
            "occurred_date": "occurred_at",
            "location_latitude": "lat",
            "location_longitude": "lon",
            "area_name": "area_name",
        },
    }

    REQUIRED_COLUMNS = ["lat", "lon"]

    OUTPUT_COLUMNS = ["code", "description", "occurred_at", "lat", "lon", "area_name", "incident_id"]

    def __init__(self, scheme: IncidentScheme = IncidentScheme.LEGACY):
        self.scheme = IncidentScheme(scheme)
        self._transformations: list[str] = []
        self._drop_reasons: dict[str, int] = {}
        self._unparseable_dates = 0
        self._data: list[RawIncident] | None = None

    def get_column_mappings(self) -> dict[str, str]:
        """Return column name mappings for this scheme."""
        return self.COLUMN_MAPPINGS[self.scheme]

    def get_classification_table(self, code_width: int | None = None) -> ClassificationTable:
        """
        Return the classification table matching this scheme.

        The built-in table is shared unless a different ``code_width`` is
        requested, in which case a table padded to that width is built.
        """
        if self.scheme == IncidentScheme.NIBRS:
            table, build = NIBRS_TABLE, nibrs_table
        else:
            table, build = LEGACY_TABLE, legacy_table

        if code_width is None or code_width == table.code_width:
            return table
        return build(code_width)

    def run(self, df: pd.DataFrame) -> PreprocessingResult:
        """
        Run the preprocessing pipeline.

        Args:
            df: Raw DataFrame in this preprocessor's scheme

        Returns:
            PreprocessingResult; ``get_data()`` returns the records on success
        """
        start_time = time.time()
        rows_input = len(df)

        logger.info(
            f"Starting preprocessing for {self.scheme} incidents",
            extra={"scheme": str(self.scheme), "rows_input": rows_input},
        )

        try:
            self._transformations = []
            self._drop_reasons = {}
            self._unparseable_dates = 0

            df = self._apply_column_mappings(df)
            self._validate_required_columns(df)
            df = self.transform(df)
            incidents = self._to_records(df)

            result = PreprocessingResult(
                scheme=str(self.scheme),
                rows_input=rows_input,
                rows_output=len(incidents),
                rows_dropped=rows_input - len(incidents),
                duration_seconds=time.time() - start_time,
                success=True,
                transformations_applied=self._transformations,
                drop_reasons=self._drop_reasons,
                unparseable_dates=self._unparseable_dates,
            )

            logger.info(
                f"Preprocessing complete for {self.scheme}: {rows_input} -> {len(incidents)} rows",
                extra=result.to_dict(),
            )

            self._data = incidents
            return result

        except Exception as e:
            logger.error(
                f"Preprocessing failed for {self.scheme}: {e}",
                extra={"scheme": str(self.scheme), "error": str(e)},
                exc_info=True,
            )
            self._data = None

            return PreprocessingResult(
                scheme=str(self.scheme),
                rows_input=rows_input,
                rows_output=0,
                rows_dropped=rows_input,
                duration_seconds=time.time() - start_time,
                success=False,
                error_message=str(e),
            )

    def get_data(self) -> list[RawIncident] | None:
        """Get the most recently processed records."""
        return self._data

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """Apply incident transformations to the renamed frame."""
        df = self._add_missing_columns(df)
        df = self._standardize_text(df)
        df = self._process_datetime(df)
        df = self._drop_duplicates(df)
        return df[self.OUTPUT_COLUMNS]

    def _apply_column_mappings(self, df: pd.DataFrame) -> pd.DataFrame:
        mappings = self.get_column_mappings()
        df = df.rename(columns=mappings)
        self._transformations.append(f"renamed_columns: {list(mappings.keys())}")
        return df

    def _validate_required_columns(self, df: pd.DataFrame) -> None:
        missing = set(self.REQUIRED_COLUMNS) - set(df.columns)
        if missing:
            raise ValueError(f"Missing required columns: {sorted(missing)}")

    def _add_missing_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        for col in self.OUTPUT_COLUMNS:
            if col not in df.columns:
                df[col] = None
                self.log_transformation(f"add_missing_{col}")
        return df

    def _standardize_text(self, df: pd.DataFrame) -> pd.DataFrame:
        """Trim whitespace; blank strings become missing."""
        for col in ["code", "description", "area_name", "incident_id"]:
            df[col] = df[col].map(_clean_text)
        self.log_transformation("standardize_text")
        return df

    def _process_datetime(self, df: pd.DataFrame) -> pd.DataFrame:
        parsed = pd.to_datetime(df["occurred_at"], errors="coerce", utc=True, format="mixed")
        unparseable = int((parsed.isna() & df["occurred_at"].notna()).sum())
        if unparseable > 0:
            logger.warning(f"Found {unparseable} records with unparseable occurrence dates")
            self._unparseable_dates = unparseable

        df["occurred_at"] = [None if pd.isna(ts) else ts.to_pydatetime() for ts in parsed]
        self.log_transformation("process_datetime")
        return df

    def _drop_duplicates(self, df: pd.DataFrame) -> pd.DataFrame:
        """Drop repeated incident ids; rows without an id are all kept."""
        has_id = df["incident_id"].notna()
        duplicated = has_id & df.duplicated(subset=["incident_id"], keep="last")
        dropped = int(duplicated.sum())
        if dropped > 0:
            self.log_dropped_rows("duplicates", dropped)
            self.log_transformation("drop_duplicates")
        return df[~duplicated]

    def _to_records(self, df: pd.DataFrame) -> list[RawIncident]:
        df = df.astype(object).where(df.notna(), None)
        return [
            RawIncident(
                code=row.code,
                description=row.description,
                occurred_at=row.occurred_at,
                lat=row.lat,
                lon=row.lon,
                area_name=row.area_name,
                incident_id=row.incident_id,
            )
            for row in df.itertuples(index=False)
        ]

    def log_transformation(self, name: str) -> None:
        """Log a transformation that was applied."""
        self._transformations.append(name)

    def log_dropped_rows(self, reason: str, count: int) -> None:
        """Log rows that were dropped."""
        self._drop_reasons[reason] = self._drop_reasons.get(reason, 0) + count


def _clean_text(value: Any) -> Any:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


# =============================================================================
# Convenience Functions
# =============================================================================


def incidents_from_records(
    records: Iterable[dict[str, Any]],
    scheme: IncidentScheme = IncidentScheme.LEGACY,
) -> list[RawIncident]:
    """
    Preprocess API-style JSON records into ``RawIncident`` objects.

    Raises:
        ValueError: If preprocessing fails
    """
    rows = list(records)
    if not rows:
        return []

    preprocessor = IncidentPreprocessor(scheme)
    result = preprocessor.run(pd.DataFrame(rows))
    if not result.success:
        raise ValueError(f"Could not preprocess {scheme} incidents: {result.error_message}")
    return preprocessor.get_data() or []
