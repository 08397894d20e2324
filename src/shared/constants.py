"""Shared constants used across the engine."""
from __future__ import annotations

# Application version
VERSION: str = "1.0.0"

# Service name used for structured logging
INSIGHTS_SERVICE_NAME: str = "graph-insights"

# Ranking defaults
DEFAULT_TOP_N: int = 10

# Power iteration (eigenvector / HITS) stopping rule
DEFAULT_MAX_ITERATIONS: int = 100
DEFAULT_TOLERANCE: float = 1e-6

# Fields compared when classifying an issue as modified between snapshots
DIFF_FIELDS: tuple[str, ...] = (
    "title",
    "status",
    "priority",
    "issue_type",
    "owner",
    "updated_at",
)

# Issue priority scale (0 = most urgent); out-of-range values are clamped
MIN_PRIORITY: int = 0
MAX_PRIORITY: int = 4
DEFAULT_PRIORITY: int = 2
