"""Core helpers shared by the calculators."""

from __future__ import annotations

from .time import coerce_timestamp, ensure_utc, from_julian_day, julian_day, local_mean_time

__all__ = [
    "coerce_timestamp",
    "ensure_utc",
    "from_julian_day",
    "julian_day",
    "local_mean_time",
]
