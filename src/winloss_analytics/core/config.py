"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings

from .enums import SampleReliability
from .errors import ConfigError

DEFAULT_THRESHOLDS: list[float] = [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 12, 15, 20]
DEFAULT_BUCKET_EDGES: list[float] = [-10.0, -5.0, 0.0, 5.0, 10.0]


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class ReliabilityConfig(BaseModel):
    high: int = 50  # Decided trades needed for "high"
    medium: int = 20  # Decided trades needed for "medium"

    @model_validator(mode="after")
    def _check_order(self) -> ReliabilityConfig:
        if self.medium < 0 or self.high < self.medium:
            raise ValueError("reliability thresholds must satisfy 0 <= medium <= high")
        return self

    def classify(self, sample_size: int) -> SampleReliability:
        if sample_size >= self.high:
            return SampleReliability.HIGH
        if sample_size >= self.medium:
            return SampleReliability.MEDIUM
        return SampleReliability.LOW


class ExpirationConfig(BaseModel):
    almost_hit_pct: float = 75.0  # Progress to target flagged as "almost hit"
    very_close_pct: float = 90.0  # Progress to target flagged as "very close"
    cohort_alert_pct: float = 40.0  # Cohort almost-hit share that triggers advice
    cohort_critical_pct: float = 60.0
    very_close_alert_pct: float = 20.0
    stop_breach_alert_pct: float = 50.0
    low_progress_pct: float = 25.0
    min_cohort_size: int = 5  # Cohorts smaller than this get no advice


class EngineConfig(BaseModel):
    loss_threshold_pct: float = Field(default=3.0, ge=0)
    thresholds: list[float] = Field(default_factory=lambda: list(DEFAULT_THRESHOLDS))
    confidence_z: float = Field(default=1.96, gt=0)
    distribution_bucket_edges: list[float] = Field(
        default_factory=lambda: list(DEFAULT_BUCKET_EDGES)
    )
    reliability: ReliabilityConfig = Field(default_factory=ReliabilityConfig)
    min_reliability: SampleReliability = SampleReliability.MEDIUM
    simulation_workers: int | None = None  # >1 fans thresholds out to a thread pool
    expiration: ExpirationConfig = Field(default_factory=ExpirationConfig)

    @field_validator("thresholds")
    @classmethod
    def _non_negative_thresholds(cls, v: list[float]) -> list[float]:
        if any(t < 0 for t in v):
            raise ValueError("simulation thresholds must be >= 0")
        return v

    @field_validator("distribution_bucket_edges")
    @classmethod
    def _sorted_edges(cls, v: list[float]) -> list[float]:
        if not v or any(b <= a for a, b in zip(v, v[1:])):
            raise ValueError("bucket edges must be non-empty and strictly increasing")
        return v


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level settings.

    Loaded from TOML config files, overridden by environment variables
    (``WINLOSS_ENGINE__LOSS_THRESHOLD_PCT=5``).
    """

    engine: EngineConfig = Field(default_factory=EngineConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "WINLOSS_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            try:
                with open(path, "rb") as f:
                    data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    if overrides:
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value

    try:
        return Settings(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
