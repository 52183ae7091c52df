"""
Neighborhood Safety - Configuration Loader

Pydantic-based configuration management with:
- Environment-based configuration (dev/prod)
- YAML file loading with inheritance
- Environment variable overrides
- Type validation via Pydantic

Usage:
    from neighborhood_safety.shared.config import get_config

    config = get_config()  # Uses NS_ENVIRONMENT env var
    config = get_config("dev")  # Explicit environment

    # Access config values
    weights = config.scoring.weights
    threshold = config.quality.sufficiency_threshold
"""

from __future__ import annotations

import logging
import math
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

logger = logging.getLogger(__name__)

VALID_ENVIRONMENTS = {"dev", "prod"}

# =============================================================================
# Configuration Models
# =============================================================================


class ProjectConfig(BaseModel):
    """Project metadata configuration."""

    name: str = "neighborhood-safety"
    version: str = "0.1.0"
    description: str = "Neighborhood crime profiles from point-located incident records"


class ClassificationConfig(BaseModel):
    """Crime code normalization settings."""

    code_width: int = Field(default=3, ge=1)


class EnrichmentConfig(BaseModel):
    """Per-capita and interval settings."""

    default_period_weeks: float = Field(default=1.0, gt=0)
    confidence_z: float = Field(default=1.96, gt=0)
    interval_precision: int = Field(default=1, ge=0)


class CategoryWeights(BaseModel):
    """Safety score weight per crime category."""

    violent: float = 0.40
    break_in: float = 0.25
    car_theft: float = 0.20
    petty_theft: float = 0.15

    @model_validator(mode="after")
    def validate_sum(self) -> CategoryWeights:
        """Weights must sum to 1.0."""
        total = self.violent + self.break_in + self.car_theft + self.petty_theft
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"Scoring weights must sum to 1.0, got {total}")
        return self


class CalibrationBand(BaseModel):
    """Weekly count band used to normalize one category."""

    min: float
    max: float

    @model_validator(mode="after")
    def validate_range(self) -> CalibrationBand:
        """Band must be non-empty."""
        if self.min >= self.max:
            raise ValueError(f"Calibration band min ({self.min}) must be below max ({self.max})")
        return self


class CalibrationBands(BaseModel):
    """Calibration bands for all categories."""

    violent: CalibrationBand = Field(default_factory=lambda: CalibrationBand(min=1, max=16))
    break_in: CalibrationBand = Field(default_factory=lambda: CalibrationBand(min=3, max=19))
    car_theft: CalibrationBand = Field(default_factory=lambda: CalibrationBand(min=3, max=18))
    petty_theft: CalibrationBand = Field(default_factory=lambda: CalibrationBand(min=5, max=28))


class GradeThresholds(BaseModel):
    """Minimum safety score for each letter tier. Anything lower is F."""

    A: int = 85
    B: int = 70
    C: int = 55
    D: int = 40

    @model_validator(mode="after")
    def validate_order(self) -> GradeThresholds:
        """Thresholds must be strictly decreasing."""
        if not (self.A > self.B > self.C > self.D):
            raise ValueError("Grade thresholds must satisfy A > B > C > D")
        return self


class ScoringConfig(BaseModel):
    """Safety score configuration."""

    weights: CategoryWeights = Field(default_factory=CategoryWeights)
    bands: CalibrationBands = Field(default_factory=CalibrationBands)
    grade_thresholds: GradeThresholds = Field(default_factory=GradeThresholds)


class StalenessTier(BaseModel):
    """Penalty applied once data is older than a number of days."""

    older_than_days: float
    penalty: int


class QualityConfig(BaseModel):
    """Data-quality score penalties and thresholds."""

    missing_population_penalty: int = 30
    confidence_penalties: dict[str, int] = Field(
        default_factory=lambda: {"high": 0, "medium": 10, "low": 15, "unknown": 20}
    )
    staleness_tiers: list[StalenessTier] = Field(
        default_factory=lambda: [
            StalenessTier(older_than_days=30, penalty=30),
            StalenessTier(older_than_days=14, penalty=20),
            StalenessTier(older_than_days=7, penalty=10),
        ]
    )
    zero_incident_penalty: int = 20
    low_incident_penalty: int = 10
    low_incident_threshold: int = 3
    sufficiency_threshold: int = Field(default=50, ge=0, le=100)

    @field_validator("staleness_tiers")
    @classmethod
    def sort_tiers(cls, v: list[StalenessTier]) -> list[StalenessTier]:
        """Oldest tier first so the first match is the largest penalty."""
        return sorted(v, key=lambda tier: tier.older_than_days, reverse=True)


class TrendConfig(BaseModel):
    """Trend detection settings."""

    min_points: int = Field(default=3, ge=2)
    slope_threshold_pct: float = 5.0


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["json", "text"] = "text"


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """
    Main configuration class for Neighborhood Safety.

    Loads configuration from:
    1. YAML files in configs/environments/
    2. Environment variables (NS_ prefix, __ for nesting)

    Environment variables take precedence over YAML values.
    """

    model_config = SettingsConfigDict(
        env_prefix="NS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Environment
    environment: Literal["dev", "prod"] = "dev"

    # Configuration sections
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    classification: ClassificationConfig = Field(default_factory=ClassificationConfig)
    enrichment: EnrichmentConfig = Field(default_factory=EnrichmentConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    quality: QualityConfig = Field(default_factory=QualityConfig)
    trend: TrendConfig = Field(default_factory=TrendConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs; environment variables win over them
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        if v not in VALID_ENVIRONMENTS:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {VALID_ENVIRONMENTS}")
        return v


# =============================================================================
# Configuration Loading Functions
# =============================================================================


def _get_config_dir() -> Path | None:
    """Get the configuration directory path, if one can be found."""
    # Repository checkout: <root>/src/neighborhood_safety/shared/config.py
    config_dir = Path(__file__).resolve().parents[3] / "configs"
    if config_dir.exists():
        return config_dir

    config_dir = Path.cwd() / "configs"
    if config_dir.exists():
        return config_dir

    return None


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents."""
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_config_for_environment(environment: str) -> dict[str, Any]:
    """Load and merge configuration for a specific environment."""
    config_dir = _get_config_dir()
    if config_dir is None:
        logger.warning("No configs directory found, using built-in defaults")
        return {"environment": environment}

    env_dir = config_dir / "environments"

    base_config = _load_yaml_file(env_dir / "base.yaml")
    env_config = _load_yaml_file(env_dir / f"{environment}.yaml")

    # Remove inheritance marker if present
    env_config.pop("_inherit", None)

    merged = _deep_merge(base_config, env_config)
    merged["environment"] = environment

    return merged


@lru_cache(maxsize=4)
def get_config(environment: str | None = None) -> Settings:
    """
    Get configuration for the specified environment.

    Args:
        environment: Environment name (dev, prod).
                    If None, uses NS_ENVIRONMENT env var, defaulting to "dev".

    Returns:
        Settings: Validated configuration object.
    """
    if environment is None:
        environment = os.getenv("NS_ENVIRONMENT", "dev")

    if environment not in VALID_ENVIRONMENTS:
        raise ValueError(f"Invalid environment: {environment}. Must be one of: {VALID_ENVIRONMENTS}")

    yaml_config = _load_config_for_environment(environment)

    settings = Settings(**yaml_config)
    if settings.environment != environment:
        # NS_ENVIRONMENT must not relabel an explicitly requested environment
        settings = settings.model_copy(update={"environment": environment})
    return settings


def reload_config(environment: str | None = None) -> Settings:
    """
    Reload configuration, clearing the cache.

    Useful for testing or when config files have changed.
    """
    get_config.cache_clear()
    return get_config(environment)


def is_production() -> bool:
    """Check if running in production environment."""
    return get_config().environment == "prod"
