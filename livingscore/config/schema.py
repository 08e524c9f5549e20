"""Pydantic models for livingscore.yaml validation."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from livingscore.config.defaults import (
    BACKEND_TABLES,
    DATABASE_DEFAULTS,
    GHOST_THRESHOLD,
    MAX_AGE_DAYS,
    MEDAL_THRESHOLDS,
    REST_DEFAULTS,
    SCORE_DECIMALS,
    THERMOMETER_MONTHS,
    TOP_SIGNALS_LIMIT,
)


# ---------------------------------------------------------------------------
# Backend Configs
# ---------------------------------------------------------------------------

class TablesConfig(BaseModel):
    signal_definitions: str = BACKEND_TABLES["signal_definitions"]
    place_taps: str = BACKEND_TABLES["place_taps"]
    place_reviews: str = BACKEND_TABLES["place_reviews"]
    legacy_place_signals: str = BACKEND_TABLES["legacy_place_signals"]
    event_taps: str = BACKEND_TABLES["event_taps"]
    event_reviews: str = BACKEND_TABLES["event_reviews"]


class RestConfig(BaseModel):
    url: str = REST_DEFAULTS["url"]
    api_key: str = ""
    timeout: float = REST_DEFAULTS["timeout"]

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class DatabaseConfig(BaseModel):
    path: str = DATABASE_DEFAULTS["path"]


class BackendConfig(BaseModel):
    kind: Literal["rest", "sqlite"] = "sqlite"
    rest: RestConfig = Field(default_factory=RestConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    tables: TablesConfig = Field(default_factory=TablesConfig)

    @model_validator(mode="after")
    def rest_needs_url(self) -> "BackendConfig":
        if self.kind == "rest" and not self.rest.url:
            raise ValueError("backend.rest.url is required when backend.kind is 'rest'")
        return self


# ---------------------------------------------------------------------------
# Scoring Configs
# ---------------------------------------------------------------------------

class ScoringConfig(BaseModel):
    max_age_days: int = MAX_AGE_DAYS
    ghost_threshold: float = GHOST_THRESHOLD
    score_decimals: int = SCORE_DECIMALS
    top_signals_limit: int = TOP_SIGNALS_LIMIT
    thermometer_months: int = THERMOMETER_MONTHS

    @field_validator("max_age_days", "top_signals_limit", "thermometer_months")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"must be positive, got {v}")
        return v

    @field_validator("ghost_threshold")
    @classmethod
    def ghost_threshold_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"ghost_threshold must be >= 0, got {v}")
        return v


# ---------------------------------------------------------------------------
# Medal Configs
# ---------------------------------------------------------------------------

class VibeCheckConfig(BaseModel):
    min_grand_total: float = MEDAL_THRESHOLDS["vibe_check"]["min_grand_total"]
    min_positive_ratio: float = MEDAL_THRESHOLDS["vibe_check"]["min_positive_ratio"]

    @field_validator("min_positive_ratio")
    @classmethod
    def ratio_in_range(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError(f"min_positive_ratio must be in (0, 1], got {v}")
        return v


class SpeedDemonConfig(BaseModel):
    fast_label: str = MEDAL_THRESHOLDS["speed_demon"]["fast_label"]
    slow_label: str = MEDAL_THRESHOLDS["speed_demon"]["slow_label"]
    min_fast_score: float = MEDAL_THRESHOLDS["speed_demon"]["min_fast_score"]
    slow_multiplier: float = MEDAL_THRESHOLDS["speed_demon"]["slow_multiplier"]


class HiddenGemConfig(BaseModel):
    min_positive_total: float = MEDAL_THRESHOLDS["hidden_gem"]["min_positive_total"]
    max_grand_total: float = MEDAL_THRESHOLDS["hidden_gem"]["max_grand_total"]
    min_positive_ratio: float = MEDAL_THRESHOLDS["hidden_gem"]["min_positive_ratio"]

    @field_validator("min_positive_ratio")
    @classmethod
    def ratio_in_range(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError(f"min_positive_ratio must be in (0, 1], got {v}")
        return v


class MedalsConfig(BaseModel):
    vibe_check: VibeCheckConfig = Field(default_factory=VibeCheckConfig)
    speed_demon: SpeedDemonConfig = Field(default_factory=SpeedDemonConfig)
    hidden_gem: HiddenGemConfig = Field(default_factory=HiddenGemConfig)


# ---------------------------------------------------------------------------
# Top-Level Config
# ---------------------------------------------------------------------------

class LivingScoreConfig(BaseModel):
    """Root configuration model for the Living Score engine."""

    version: int = 1
    backend: BackendConfig = Field(default_factory=BackendConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    medals: MedalsConfig = Field(default_factory=MedalsConfig)

    @model_validator(mode="before")
    @classmethod
    def coerce_none_to_defaults(cls, data: Any) -> Any:
        """YAML parses empty keys as None. Drop them so defaults apply."""
        if isinstance(data, dict):
            for key in ("backend", "scoring", "medals"):
                if key in data and data[key] is None:
                    del data[key]
        return data
