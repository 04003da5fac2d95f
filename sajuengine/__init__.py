"""SajuEngine: Four Pillars (BaZi / Saju) profiles from timestamps."""

from __future__ import annotations

from .chinese import (
    CalculationOptions,
    FourPillars,
    LunarCalendarConverter,
    LunarDate,
    Pillar,
    PillarCalculator,
    RelationalAttributes,
    RelationalDeriver,
    SajuProfile,
    SajuProfileBuilder,
    build_profile,
)
from .ephemeris import SolarTerm, SolarTermCalculator, SolarTermTable
from .errors import AmbiguousBoundary, InvalidTimestamp, SajuError, UnsupportedYearRange

__version__ = "0.1.0"

__all__ = [
    "AmbiguousBoundary",
    "CalculationOptions",
    "FourPillars",
    "InvalidTimestamp",
    "LunarCalendarConverter",
    "LunarDate",
    "Pillar",
    "PillarCalculator",
    "RelationalAttributes",
    "RelationalDeriver",
    "SajuError",
    "SajuProfile",
    "SajuProfileBuilder",
    "SolarTerm",
    "SolarTermCalculator",
    "SolarTermTable",
    "UnsupportedYearRange",
    "__version__",
    "build_profile",
]
