"""Observability helpers (Prometheus metrics)."""

from __future__ import annotations

from .metrics import (
    COMPUTE_ERRORS,
    LUNAR_MONTH_COMPUTE_DURATION,
    PROFILE_COMPUTE_DURATION,
    SOLAR_TERM_COMPUTE_DURATION,
    TABLE_CACHE_HITS,
    TABLE_CACHE_MISSES,
    ensure_metrics_registered,
    record_error,
)

__all__ = [
    "COMPUTE_ERRORS",
    "LUNAR_MONTH_COMPUTE_DURATION",
    "PROFILE_COMPUTE_DURATION",
    "SOLAR_TERM_COMPUTE_DURATION",
    "TABLE_CACHE_HITS",
    "TABLE_CACHE_MISSES",
    "ensure_metrics_registered",
    "record_error",
]
