"""Apparent geocentric longitudes of the Sun and Moon."""

from __future__ import annotations

from typing import Callable

from .swe import calc_flags, swe

__all__ = [
    "LongitudeFn",
    "EphemerisError",
    "sun_longitude",
    "moon_longitude",
    "moon_sun_elongation",
]

LongitudeFn = Callable[[float], float]


class EphemerisError(RuntimeError):
    """Raised when Swiss Ephemeris cannot evaluate a body position."""

    def __init__(self, body: str, jd_ut: float, detail: str) -> None:
        super().__init__(f"{body} position unavailable at JD {jd_ut:.5f}: {detail}")
        self.body = body
        self.jd_ut = jd_ut
        self.detail = detail


def _longitude(body_id: int, body: str, jd_ut: float) -> float:
    try:
        values, _ret = swe().calc_ut(jd_ut, body_id, calc_flags())
    except Exception as exc:
        raise EphemerisError(body, jd_ut, str(exc)) from exc
    return float(values[0]) % 360.0


def sun_longitude(jd_ut: float) -> float:
    """Apparent ecliptic longitude of the Sun in degrees ``[0, 360)``."""

    return _longitude(swe.SUN, "Sun", jd_ut)


def moon_longitude(jd_ut: float) -> float:
    """Apparent ecliptic longitude of the Moon in degrees ``[0, 360)``."""

    return _longitude(swe.MOON, "Moon", jd_ut)


def moon_sun_elongation(jd_ut: float) -> float:
    """Moon minus Sun longitude in ``[0, 360)``; zero at a true new moon."""

    return (moon_longitude(jd_ut) - sun_longitude(jd_ut)) % 360.0
