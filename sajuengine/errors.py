"""Exception types raised by the SajuEngine calculators."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .ephemeris.solar_terms import SolarTerm

__all__ = [
    "SajuError",
    "InvalidTimestamp",
    "UnsupportedYearRange",
    "AmbiguousBoundary",
]


class SajuError(Exception):
    """Base class for every error surfaced by the engine."""


class InvalidTimestamp(SajuError, ValueError):
    """Raised when a timestamp is malformed, naive, or non-finite."""

    def __init__(self, message: str, *, value: object | None = None) -> None:
        super().__init__(message)
        self.value = value


class UnsupportedYearRange(SajuError, ValueError):
    """Raised when the ephemeris cannot serve the requested year."""

    def __init__(
        self,
        year: int,
        *,
        min_year: int,
        max_year: int,
        reason: str | None = None,
    ) -> None:
        message = f"Year {year} is outside the supported range {min_year}-{max_year}"
        if reason:
            message = f"Ephemeris unavailable for year {year}: {reason}"
        super().__init__(message)
        self.year = year
        self.min_year = min_year
        self.max_year = max_year
        self.reason = reason


class AmbiguousBoundary(SajuError):
    """Raised when a moment lies within the tolerance window of a Jie crossing."""

    def __init__(
        self,
        moment: datetime,
        term: "SolarTerm",
        *,
        offset_seconds: float,
        tolerance_seconds: float,
    ) -> None:
        super().__init__(
            f"{moment.isoformat()} is {offset_seconds:+.0f}s from {term.name} "
            f"({term.moment.isoformat()}); tolerance is {tolerance_seconds:.0f}s"
        )
        self.moment = moment
        self.term = term
        self.offset_seconds = offset_seconds
        self.tolerance_seconds = tolerance_seconds
