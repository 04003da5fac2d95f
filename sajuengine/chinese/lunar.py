"""Chinese lunisolar calendar computed from true new moons and solar terms.

Months begin on the civil date (UTC+8 unless configured otherwise) of each
true new moon. The month holding the winter solstice is month 11. When the
span between two consecutive month-11 starts (a *sui*) holds 13 months, the
first month without a Qi term is the leap month and repeats the number of the
month before it.
"""

from __future__ import annotations

import datetime as _dt
import logging
import math
import threading
from dataclasses import dataclass
from typing import Callable

from ..config.settings import Settings, get_settings
from ..core.time import fixed_offset, from_julian_day, julian_day
from ..ephemeris.cache import YearTableCache
from ..ephemeris.refinement import angle_delta, expand_bracket, refine_root
from ..ephemeris.solar_terms import SolarTermCalculator, get_solar_term_calculator
from ..ephemeris.sun import EphemerisError, moon_sun_elongation
from ..errors import UnsupportedYearRange
from ..observability.metrics import LUNAR_MONTH_COMPUTE_DURATION, record_error

__all__ = [
    "LunarDate",
    "LunarMonth",
    "LunarCalendarConverter",
    "get_lunar_converter",
    "to_lunar",
]

LOG = logging.getLogger(__name__)

SYNODIC_MONTH = 29.530588861
# Mean new moon of 2000-01-06 (lunation 0).
_LUNATION_EPOCH_JD = 2451550.09766
_NEW_MOON_HALF_WIDTHS = (2.0, 3.0)

ElongationFn = Callable[[float], float]


@dataclass(frozen=True)
class LunarDate:
    """A date in the Chinese lunisolar calendar."""

    year: int
    month: int
    day: int
    is_leap_month: bool = False

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Lunar month must be within 1-12, got {self.month}")
        if not 1 <= self.day <= 30:
            raise ValueError(f"Lunar day must be within 1-30, got {self.day}")

    def label(self) -> str:
        leap = "閏" if self.is_leap_month else ""
        return f"{self.year}年{leap}{self.month}月{self.day}日"

    def to_dict(self) -> dict[str, object]:
        return {
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "isLeapMonth": self.is_leap_month,
        }


@dataclass(frozen=True)
class LunarMonth:
    """One lunar month: its number and the civil dates it spans."""

    year: int
    number: int
    is_leap: bool
    start: _dt.date
    end: _dt.date  # exclusive: the next month's first day
    has_zhongqi: bool

    @property
    def days(self) -> int:
        return (self.end - self.start).days

    def contains(self, day: _dt.date) -> bool:
        return self.start <= day < self.end


class LunarCalendarConverter:
    """Convert between Gregorian and lunisolar dates.

    Supported Gregorian years are ``[min_year + 1, max_year - 1]`` because a
    sui straddles the solar-term tables of two adjacent years.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        solar_terms: SolarTermCalculator | None = None,
        elongation_fn: ElongationFn | None = None,
    ) -> None:
        self._settings = settings or (solar_terms.settings if solar_terms else get_settings())
        self._solar_terms = solar_terms or (
            SolarTermCalculator(self._settings) if settings else get_solar_term_calculator()
        )
        self._elongation_fn = elongation_fn or moon_sun_elongation
        self._tz = fixed_offset(self._settings.lunar.utc_offset_hours)
        self._cache: YearTableCache[int, tuple[LunarMonth, ...]] = YearTableCache(
            "lunar_months", maxsize=self._settings.lunar.cache_size
        )

    @property
    def tz(self) -> _dt.tzinfo:
        return self._tz

    @property
    def min_year(self) -> int:
        return self._settings.supported_range.min_year + 1

    @property
    def max_year(self) -> int:
        return self._settings.supported_range.max_year - 1

    def supports(self, year: int) -> bool:
        return self.min_year <= year <= self.max_year

    def _check_year(self, year: int) -> None:
        if not self.supports(year):
            exc = UnsupportedYearRange(year, min_year=self.min_year, max_year=self.max_year)
            record_error("lunar", exc)
            raise exc

    # -------------------- public API --------------------

    def to_lunar(self, day: _dt.date) -> LunarDate:
        """Return the lunar date for a Gregorian civil ``day``."""

        if isinstance(day, _dt.datetime):
            day = day.astimezone(self._tz).date() if day.tzinfo else day.date()
        self._check_year(day.year)
        months = self.sui_months(day.year)
        if day >= months[-1].end:
            months = self.sui_months(day.year + 1)
        for month in months:
            if month.contains(day):
                return LunarDate(
                    year=month.year,
                    month=month.number,
                    day=(day - month.start).days + 1,
                    is_leap_month=month.is_leap,
                )
        raise AssertionError(f"{day} not covered by the sui tables")  # pragma: no cover

    def to_gregorian(self, lunar: LunarDate) -> _dt.date:
        """Return the Gregorian date of ``lunar``; unknown months raise ``ValueError``."""

        for month in self.months_for_year(lunar.year):
            if month.number == lunar.month and month.is_leap == lunar.is_leap_month:
                if lunar.day > month.days:
                    raise ValueError(
                        f"{lunar.label()} does not exist: the month has {month.days} days"
                    )
                return month.start + _dt.timedelta(days=lunar.day - 1)
        raise ValueError(f"{lunar.label()} does not exist")

    def months_for_year(self, year: int) -> tuple[LunarMonth, ...]:
        """Return months 1-12 (plus any leap month) of lunar ``year`` in order."""

        self._check_year(year)
        # Months 11 and 12 of ``year`` open the following sui.
        candidates = (*self.sui_months(year), *self.sui_months(year + 1))
        return tuple(
            month
            for month in candidates
            if month.year == year
        )

    def leap_month(self, year: int) -> int | None:
        """Return the number of the leap month in lunar ``year`` (``None`` if absent)."""

        for month in self.months_for_year(year):
            if month.is_leap:
                return month.number
        return None

    def sui_months(self, year: int) -> tuple[LunarMonth, ...]:
        """Return the months from the month-11 holding 冬至 of ``year - 1`` up to,
        but excluding, the month-11 holding 冬至 of ``year``."""

        return self._cache.get_or_compute(year, self._compute_sui)

    # -------------------- computation --------------------

    def _civil_date(self, jd_ut: float) -> _dt.date:
        moment = from_julian_day(jd_ut)
        moment = (moment + _dt.timedelta(microseconds=500_000)).replace(microsecond=0)
        return moment.astimezone(self._tz).date()

    def _new_moon_jd(self, lunation: int) -> float:
        estimate = _LUNATION_EPOCH_JD + SYNODIC_MONTH * lunation

        def delta(jd_ut: float) -> float:
            return angle_delta(self._elongation_fn(jd_ut), 0.0)

        lo, hi = expand_bracket(delta, estimate, _NEW_MOON_HALF_WIDTHS)
        result = refine_root(
            delta,
            lo,
            hi,
            tol_seconds=self._settings.solar_terms.tolerance_seconds,
            max_iter=self._settings.solar_terms.max_iter,
        )
        if not result.converged:
            raise ValueError(f"New moon of lunation {lunation} did not converge")
        return result.t_exact_jd

    def _lunation_on_or_before(self, day: _dt.date) -> int:
        """Return the lunation whose new moon is the last one on or before ``day``."""

        day_end = _dt.datetime.combine(
            day + _dt.timedelta(days=1), _dt.time(), tzinfo=self._tz
        )
        lunation = math.floor((julian_day(day_end) - _LUNATION_EPOCH_JD) / SYNODIC_MONTH)
        while self._civil_date(self._new_moon_jd(lunation)) > day:
            lunation -= 1
        while self._civil_date(self._new_moon_jd(lunation + 1)) <= day:
            lunation += 1
        return lunation

    def _compute_sui(self, year: int) -> tuple[LunarMonth, ...]:
        LOG.debug("Computing lunar months for the sui ending in %d", year)
        with LUNAR_MONTH_COMPUTE_DURATION.time():
            try:
                return self._build_sui(year)
            except UnsupportedYearRange:
                raise
            except (EphemerisError, RuntimeError, ValueError) as exc:
                LOG.warning("Lunar month computation failed for %d: %s", year, exc)
                raise UnsupportedYearRange(
                    year, min_year=self.min_year, max_year=self.max_year, reason=str(exc)
                ) from exc

    def _build_sui(self, year: int) -> tuple[LunarMonth, ...]:
        previous = self._solar_terms.solar_terms_for_year(year - 1)
        current = self._solar_terms.solar_terms_for_year(year)
        solstice_start = previous.winter_solstice.local_date(self._tz)
        solstice_end = current.winter_solstice.local_date(self._tz)
        zhongqi_dates = sorted(
            term.local_date(self._tz)
            for term in (*previous.qi_terms(), *current.qi_terms())
        )

        first = self._lunation_on_or_before(solstice_start)
        last = self._lunation_on_or_before(solstice_end)
        starts = [self._civil_date(self._new_moon_jd(k)) for k in range(first, last + 1)]
        spans = list(zip(starts, starts[1:]))
        has_zhongqi = [
            any(start <= qi < end for qi in zhongqi_dates) for start, end in spans
        ]

        leap_index: int | None = None
        if len(spans) == 13:
            leap_index = next(
                (index for index, flag in enumerate(has_zhongqi) if not flag), None
            )
            if leap_index is None:  # pragma: no cover - astronomically impossible
                raise ValueError(f"Sui {year} has 13 months but no month lacks a Qi term")
        elif len(spans) != 12:
            raise ValueError(f"Sui {year} has {len(spans)} months")

        months: list[LunarMonth] = []
        number = 10
        lunar_year = year - 1
        for index, ((start, end), zhongqi) in enumerate(zip(spans, has_zhongqi)):
            is_leap = index == leap_index
            if not is_leap:
                number = number % 12 + 1
                if number == 1:
                    lunar_year = year
            months.append(
                LunarMonth(
                    year=lunar_year,
                    number=number,
                    is_leap=is_leap,
                    start=start,
                    end=end,
                    has_zhongqi=zhongqi,
                )
            )
        return tuple(months)


_DEFAULT: LunarCalendarConverter | None = None
_DEFAULT_LOCK = threading.Lock()


def get_lunar_converter() -> LunarCalendarConverter:
    global _DEFAULT
    with _DEFAULT_LOCK:
        if _DEFAULT is None:
            _DEFAULT = LunarCalendarConverter()
        return _DEFAULT


def to_lunar(day: _dt.date) -> LunarDate:
    """Module-level shortcut for :meth:`LunarCalendarConverter.to_lunar`."""

    return get_lunar_converter().to_lunar(day)
