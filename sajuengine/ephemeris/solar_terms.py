"""Solar-term (節氣) moments derived from the apparent solar longitude.

Each of the 24 terms is the instant the Sun's apparent geocentric longitude
crosses ``315° + 15° × ordinal``. A table for year ``Y`` starts at 立春 of
``Y`` (ordinal 0) and ends at 大寒 of ``Y + 1`` (ordinal 23). Even ordinals
are Jie terms that open a solar month; odd ordinals are the Qi (中氣) terms
that the lunar calendar uses to place leap months.
"""

from __future__ import annotations

import bisect
import datetime as _dt
import logging
import threading
from dataclasses import dataclass
from typing import Iterator, Sequence

from ..config.settings import Settings, get_settings
from ..core.time import civil_date, ensure_utc, from_julian_day, julian_day
from ..errors import UnsupportedYearRange
from ..observability.metrics import SOLAR_TERM_COMPUTE_DURATION, record_error
from .cache import YearTableCache
from .refinement import angle_delta, expand_bracket, refine_root
from .sun import EphemerisError, LongitudeFn, sun_longitude
from .swe import configure_ephemeris

__all__ = [
    "SOLAR_TERM_NAMES",
    "SolarTerm",
    "SolarTermTable",
    "SolarTermCalculator",
    "get_solar_term_calculator",
    "solar_terms_for_year",
    "term_longitude",
]

LOG = logging.getLogger(__name__)

# (hanzi, english) from 立春 onwards.
SOLAR_TERM_NAMES: tuple[tuple[str, str], ...] = (
    ("立春", "Start of Spring"),
    ("雨水", "Rain Water"),
    ("驚蟄", "Awakening of Insects"),
    ("春分", "Spring Equinox"),
    ("清明", "Pure Brightness"),
    ("穀雨", "Grain Rain"),
    ("立夏", "Start of Summer"),
    ("小滿", "Grain Buds"),
    ("芒種", "Grain in Ear"),
    ("夏至", "Summer Solstice"),
    ("小暑", "Minor Heat"),
    ("大暑", "Major Heat"),
    ("立秋", "Start of Autumn"),
    ("處暑", "End of Heat"),
    ("白露", "White Dew"),
    ("秋分", "Autumn Equinox"),
    ("寒露", "Cold Dew"),
    ("霜降", "Frost Descent"),
    ("立冬", "Start of Winter"),
    ("小雪", "Minor Snow"),
    ("大雪", "Major Snow"),
    ("冬至", "Winter Solstice"),
    ("小寒", "Minor Cold"),
    ("大寒", "Major Cold"),
)

TERMS_PER_YEAR = 24
LI_CHUN_LONGITUDE = 315.0
WINTER_SOLSTICE_ORDINAL = 21

# Mean spacing between consecutive terms in days (tropical year / 24).
_MEAN_TERM_DAYS = 15.2184
_BRACKET_HALF_WIDTHS = (4.0, 8.0)


def term_longitude(ordinal: int) -> float:
    """Return the apparent solar longitude that defines term ``ordinal``."""

    if not 0 <= ordinal < TERMS_PER_YEAR:
        raise ValueError(f"Solar term ordinal must be within 0-23, got {ordinal}")
    return (LI_CHUN_LONGITUDE + 15.0 * ordinal) % 360.0


def _round_to_second(moment: _dt.datetime) -> _dt.datetime:
    return (moment + _dt.timedelta(microseconds=500_000)).replace(microsecond=0)


@dataclass(frozen=True)
class SolarTerm:
    """A single solar-term crossing expressed in UTC."""

    ordinal: int
    name: str
    english: str
    longitude: float
    moment: _dt.datetime

    @property
    def is_jie(self) -> bool:
        """``True`` for the month-opening Jie (節) terms."""

        return self.ordinal % 2 == 0

    @property
    def is_qi(self) -> bool:
        return not self.is_jie

    @property
    def month_number(self) -> int:
        """Solar month (0 = Tiger) that this term falls in."""

        return self.ordinal // 2

    def local_date(self, tz: _dt.tzinfo) -> _dt.date:
        return civil_date(self.moment, tz)

    def to_dict(self) -> dict[str, object]:
        return {
            "ordinal": self.ordinal,
            "name": self.name,
            "english": self.english,
            "longitude": self.longitude,
            "kind": "jie" if self.is_jie else "qi",
            "moment": self.moment.isoformat().replace("+00:00", "Z"),
        }


@dataclass(frozen=True)
class SolarTermTable:
    """The 24 terms from 立春 of ``year`` to 大寒 of ``year + 1``."""

    year: int
    terms: tuple[SolarTerm, ...]

    def __post_init__(self) -> None:
        if len(self.terms) != TERMS_PER_YEAR:
            raise ValueError(f"A solar term table needs 24 terms, got {len(self.terms)}")
        for index, term in enumerate(self.terms):
            if term.ordinal != index:
                raise ValueError(f"Term at position {index} has ordinal {term.ordinal}")
        for earlier, later in zip(self.terms, self.terms[1:]):
            if not earlier.moment < later.moment:
                raise ValueError(
                    f"Solar terms must be strictly increasing: {earlier.name} >= {later.name}"
                )

    @classmethod
    def from_moments(cls, year: int, moments: Sequence[_dt.datetime]) -> "SolarTermTable":
        """Build a table from 24 aware datetimes ordered from 立春."""

        terms = tuple(
            SolarTerm(
                ordinal=ordinal,
                name=SOLAR_TERM_NAMES[ordinal][0],
                english=SOLAR_TERM_NAMES[ordinal][1],
                longitude=term_longitude(ordinal),
                moment=ensure_utc(moment),
            )
            for ordinal, moment in enumerate(moments)
        )
        return cls(year=year, terms=terms)

    def __iter__(self) -> Iterator[SolarTerm]:
        return iter(self.terms)

    def __len__(self) -> int:
        return len(self.terms)

    def __getitem__(self, ordinal: int) -> SolarTerm:
        return self.terms[ordinal]

    @property
    def li_chun(self) -> SolarTerm:
        return self.terms[0]

    @property
    def winter_solstice(self) -> SolarTerm:
        return self.terms[WINTER_SOLSTICE_ORDINAL]

    def jie_terms(self) -> tuple[SolarTerm, ...]:
        return self.terms[0::2]

    def qi_terms(self) -> tuple[SolarTerm, ...]:
        return self.terms[1::2]

    def _position(self, moment: _dt.datetime, terms: Sequence[SolarTerm]) -> int:
        instant = ensure_utc(moment)
        return bisect.bisect_right([term.moment for term in terms], instant) - 1

    def term_at(self, moment: _dt.datetime) -> SolarTerm | None:
        """Return the latest term at or before ``moment`` (``None`` before 立春)."""

        position = self._position(moment, self.terms)
        return self.terms[position] if position >= 0 else None

    def month_index_at(self, moment: _dt.datetime) -> int:
        """Return the number of Jie terms passed since 立春 (0-11).

        ``moment`` must fall on or after this table's 立春 and before the next
        year's 立春.
        """

        position = self._position(moment, self.jie_terms())
        if position < 0:
            raise ValueError(
                f"{moment.isoformat()} precedes 立春 {self.li_chun.moment.isoformat()}"
            )
        return position

    def terms_on(self, day: _dt.date, tz: _dt.tzinfo = _dt.UTC) -> tuple[SolarTerm, ...]:
        """Return the terms whose civil date in ``tz`` is ``day``."""

        return tuple(term for term in self.terms if term.local_date(tz) == day)

    def to_dict(self) -> dict[str, object]:
        return {"year": self.year, "terms": [term.to_dict() for term in self.terms]}


class SolarTermCalculator:
    """Compute and memoise :class:`SolarTermTable` values per year.

    ``longitude_fn`` maps a Julian Day (UT) to the apparent solar longitude
    and defaults to Swiss Ephemeris; tests may inject an analytic model.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        longitude_fn: LongitudeFn | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._longitude_fn = longitude_fn
        self._ephemeris_ready = longitude_fn is not None
        self._cache: YearTableCache[int, SolarTermTable] = YearTableCache(
            "solar_terms", maxsize=self._settings.solar_terms.cache_size
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def min_year(self) -> int:
        return self._settings.supported_range.min_year

    @property
    def max_year(self) -> int:
        return self._settings.supported_range.max_year

    def supports(self, year: int) -> bool:
        return self._settings.supported_range.contains(year)

    def check_year(self, year: int) -> None:
        if not self.supports(year):
            raise UnsupportedYearRange(year, min_year=self.min_year, max_year=self.max_year)

    def solar_terms_for_year(self, year: int) -> SolarTermTable:
        """Return the 24-term table opening at 立春 of ``year``."""

        try:
            self.check_year(year)
            return self._cache.get_or_compute(year, self._compute_table)
        except UnsupportedYearRange as exc:
            record_error("solar_terms", exc)
            raise

    def li_chun(self, year: int) -> SolarTerm:
        return self.solar_terms_for_year(year).li_chun

    def terms_between(
        self, start: _dt.datetime, end: _dt.datetime
    ) -> tuple[SolarTerm, ...]:
        """Return every term with ``start <= moment < end``."""

        lo, hi = ensure_utc(start), ensure_utc(end)
        found: list[SolarTerm] = []
        for year in range(lo.year - 1, hi.year + 1):
            found.extend(
                term for term in self.solar_terms_for_year(year) if lo <= term.moment < hi
            )
        return tuple(found)

    # -------------------- computation --------------------

    def _longitude(self, jd_ut: float) -> float:
        if self._longitude_fn is not None:
            return self._longitude_fn(jd_ut)
        if not self._ephemeris_ready:
            eph = self._settings.ephemeris
            configure_ephemeris(eph.path, prefer_moshier=eph.prefer_moshier)
            self._ephemeris_ready = True
        return sun_longitude(jd_ut)

    def _crossing(self, year: int, ordinal: int) -> _dt.datetime:
        target = term_longitude(ordinal)
        anchor = julian_day(_dt.datetime(year, 2, 4, tzinfo=_dt.UTC))
        estimate = anchor + ordinal * _MEAN_TERM_DAYS

        def delta(jd_ut: float) -> float:
            return angle_delta(self._longitude(jd_ut), target)

        cfg = self._settings.solar_terms
        lo, hi = expand_bracket(delta, estimate, _BRACKET_HALF_WIDTHS)
        result = refine_root(
            delta, lo, hi, tol_seconds=cfg.tolerance_seconds, max_iter=cfg.max_iter
        )
        if not result.converged:
            raise ValueError(
                f"{SOLAR_TERM_NAMES[ordinal][0]} {year} did not converge after "
                f"{result.iterations} iterations ({result.achieved_tol_sec:.3f}s)"
            )
        return _round_to_second(from_julian_day(result.t_exact_jd))

    def _compute_table(self, year: int) -> SolarTermTable:
        LOG.debug("Computing solar terms for %d", year)
        with SOLAR_TERM_COMPUTE_DURATION.time():
            try:
                moments = [self._crossing(year, ordinal) for ordinal in range(TERMS_PER_YEAR)]
                table = SolarTermTable.from_moments(year, moments)
            except (EphemerisError, RuntimeError, ValueError) as exc:
                LOG.warning("Solar term computation failed for %d: %s", year, exc)
                raise UnsupportedYearRange(
                    year, min_year=self.min_year, max_year=self.max_year, reason=str(exc)
                ) from exc
        return table

    def clear_cache(self) -> None:
        self._cache.clear()


_DEFAULT: SolarTermCalculator | None = None
_DEFAULT_LOCK = threading.Lock()


def get_solar_term_calculator() -> SolarTermCalculator:
    """Return the process-wide calculator bound to :func:`get_settings`."""

    global _DEFAULT
    with _DEFAULT_LOCK:
        if _DEFAULT is None:
            _DEFAULT = SolarTermCalculator()
        return _DEFAULT


def solar_terms_for_year(year: int) -> SolarTermTable:
    return get_solar_term_calculator().solar_terms_for_year(year)


