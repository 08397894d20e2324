"""Shared configuration management using pydantic-settings."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from src.shared.constants import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_TOLERANCE,
    DEFAULT_TOP_N,
)


class SharedConfig(BaseSettings):
    """Base configuration shared across all consumers of the engine."""
    log_level: str = Field(default="info", validation_alias="LOG_LEVEL")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


class InsightsConfig(SharedConfig):
    """Tunables for graph insight computation."""
    top_n: int = Field(
        default=DEFAULT_TOP_N, ge=1, validation_alias="INSIGHTS_TOP_N"
    )
    max_iterations: int = Field(
        default=DEFAULT_MAX_ITERATIONS,
        ge=1,
        validation_alias="INSIGHTS_MAX_ITERATIONS",
    )
    tolerance: float = Field(
        default=DEFAULT_TOLERANCE, gt=0.0, validation_alias="INSIGHTS_TOLERANCE"
    )
    include_closed: bool = Field(
        default=False, validation_alias="INSIGHTS_INCLUDE_CLOSED"
    )
