"""Prometheus metric definitions shared across SajuEngine components."""

from __future__ import annotations

from collections.abc import Iterable

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

__all__ = [
    "COMPUTE_ERRORS",
    "PROFILE_COMPUTE_DURATION",
    "SOLAR_TERM_COMPUTE_DURATION",
    "TABLE_CACHE_HITS",
    "TABLE_CACHE_MISSES",
    "LUNAR_MONTH_COMPUTE_DURATION",
    "ensure_metrics_registered",
    "record_error",
]


TABLE_CACHE_HITS = Counter(
    "sajuengine_table_cache_hits_total",
    "Per-year table lookups served from the in-memory cache.",
    ("table",),
    registry=None,
)

TABLE_CACHE_MISSES = Counter(
    "sajuengine_table_cache_misses_total",
    "Per-year table lookups that required an ephemeris computation.",
    ("table",),
    registry=None,
)

SOLAR_TERM_COMPUTE_DURATION = Histogram(
    "sajuengine_solar_terms_compute_duration_seconds",
    "Duration of a full 24-term solar table computation.",
    registry=None,
)

LUNAR_MONTH_COMPUTE_DURATION = Histogram(
    "sajuengine_lunar_months_compute_duration_seconds",
    "Duration of a lunar month table computation for one sui.",
    registry=None,
)

PROFILE_COMPUTE_DURATION = Histogram(
    "sajuengine_profile_compute_duration_seconds",
    "Duration of end-to-end profile builds.",
    ("convention",),
    registry=None,
)


COMPUTE_ERRORS = Counter(
    "sajuengine_compute_errors_total",
    "Count of calculation failures surfaced to callers.",
    ("component", "error"),
    registry=None,
)


def record_error(component: str, exc: BaseException) -> None:
    """Increment :data:`COMPUTE_ERRORS` for ``exc`` raised inside ``component``."""

    COMPUTE_ERRORS.labels(component=component, error=type(exc).__name__).inc()


def _iter_metrics() -> Iterable[Counter | Histogram]:
    yield TABLE_CACHE_HITS
    yield TABLE_CACHE_MISSES
    yield SOLAR_TERM_COMPUTE_DURATION
    yield LUNAR_MONTH_COMPUTE_DURATION
    yield PROFILE_COMPUTE_DURATION
    yield COMPUTE_ERRORS


def ensure_metrics_registered(
    registry: CollectorRegistry | None = None,
) -> None:
    """Register shared metrics with ``registry`` if not already present."""

    target = registry or REGISTRY
    for metric in _iter_metrics():
        try:
            target.register(metric)
        except ValueError:
            # Prometheus raises when a metric name already exists in the registry.
            continue
