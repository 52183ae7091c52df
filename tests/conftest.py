"""
Neighborhood Safety - Pytest Configuration and Fixtures

Shared fixtures for all tests:
- Configuration fixtures
- Boundary and population reference data
- Incident builders
"""

import os
from collections.abc import Callable, Generator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

# Set test environment
os.environ["NS_ENVIRONMENT"] = "dev"

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def configs_dir(project_root: Path) -> Path:
    """Get the configs directory."""
    return project_root / "configs"


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def test_config() -> Any:
    """Get test configuration."""
    from neighborhood_safety.shared.config import get_config, reload_config

    # Ensure fresh config for tests
    reload_config("dev")
    return get_config("dev")


@pytest.fixture
def as_of() -> datetime:
    """Fixed reference time for staleness calculations."""
    return datetime(2024, 6, 1, tzinfo=UTC)


# =============================================================================
# Reference Data Fixtures
# =============================================================================


@pytest.fixture
def unit_square() -> Any:
    """Unit square boundary with corners (0, 0) and (1, 1)."""
    from neighborhood_safety.shared.geo import NeighborhoodBoundary

    return NeighborhoodBoundary(
        name="Unit Square",
        vertices=((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)),
    )


@pytest.fixture
def la_boundaries() -> list[Any]:
    """Three adjacent rectangular neighborhoods around Hollywood."""
    from neighborhood_safety.shared.geo import NeighborhoodBoundary

    return [
        NeighborhoodBoundary(
            name="Hollywood",
            vertices=(
                (-118.36, 34.08),
                (-118.30, 34.08),
                (-118.30, 34.12),
                (-118.36, 34.12),
                (-118.36, 34.08),
            ),
        ),
        NeighborhoodBoundary(
            name="Silver Lake",
            vertices=(
                (-118.30, 34.08),
                (-118.25, 34.08),
                (-118.25, 34.12),
                (-118.30, 34.12),
            ),
        ),
        NeighborhoodBoundary(
            name="Echo Park",
            vertices=(
                (-118.30, 34.04),
                (-118.24, 34.04),
                (-118.24, 34.08),
                (-118.30, 34.08),
            ),
        ),
    ]


@pytest.fixture
def population_table() -> Any:
    """Population for Hollywood and Silver Lake; Echo Park is unknown."""
    from neighborhood_safety.enrichment import PopulationRecord, PopulationTable

    return PopulationTable(
        [
            PopulationRecord("Hollywood", 89000, area_sq_miles=3.5, confidence="high"),
            PopulationRecord("Silver Lake", 32000, area_sq_miles=2.0, confidence="medium"),
        ]
    )


@pytest.fixture
def make_incident() -> Callable[..., Any]:
    """Factory for RawIncident records with sensible defaults."""
    from neighborhood_safety.ingestion import RawIncident

    def _make(
        code: Any = "624",
        lat: Any = "34.10",
        lon: Any = "-118.33",
        description: str | None = None,
        occurred_at: datetime | None = None,
        incident_id: str | None = None,
    ) -> Any:
        return RawIncident(
            code=code,
            description=description,
            occurred_at=occurred_at,
            lat=lat,
            lon=lon,
            incident_id=incident_id,
        )

    return _make


# =============================================================================
# Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def cleanup_env() -> Generator[None, None, None]:
    """Clean up environment variables after each test."""
    original_env = os.environ.copy()
    yield
    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)
