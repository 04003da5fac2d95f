"""Ephemeris access: Swiss Ephemeris loader, root finding and solar terms."""

from __future__ import annotations

from .refinement import RefineResult, angle_delta, refine_root
from .solar_terms import (
    SOLAR_TERM_NAMES,
    SolarTerm,
    SolarTermCalculator,
    SolarTermTable,
    get_solar_term_calculator,
    solar_terms_for_year,
)
from .swe import configure_ephemeris, swe

__all__ = [
    "RefineResult",
    "SOLAR_TERM_NAMES",
    "SolarTerm",
    "SolarTermCalculator",
    "SolarTermTable",
    "angle_delta",
    "configure_ephemeris",
    "get_solar_term_calculator",
    "refine_root",
    "solar_terms_for_year",
    "swe",
]
