"""Four Pillars (BaZi) computation logic."""

from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass, field
from typing import Iterator, Literal, Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..config.settings import Settings
from ..core.time import TimestampInput, coerce_timestamp, local_mean_time
from ..ephemeris.solar_terms import (
    SolarTerm,
    SolarTermCalculator,
    SolarTermTable,
    get_solar_term_calculator,
)
from ..errors import AmbiguousBoundary, SajuError
from ..observability.metrics import record_error
from .constants import EarthlyBranch, HeavenlyStem, stem_for_index
from .lunar import LunarCalendarConverter, LunarDate
from .sexagenary import (
    SexagenaryCycleEntry,
    cycle_offset,
    entry_for_label,
    hour_branch_index,
    hour_entry,
    month_entry,
    year_entry,
)

__all__ = [
    "CalculationOptions",
    "CalendarDay",
    "FourPillars",
    "FourPillarsChart",
    "Pillar",
    "PillarCalculator",
    "ReferenceEpoch",
    "compute_four_pillars",
]

LOG = logging.getLogger(__name__)

PILLAR_NAMES: tuple[str, ...] = ("year", "month", "day", "hour")

MonthPillarConvention = Literal["solarTerm", "lunarMonth"]


class ReferenceEpoch(BaseModel):
    """A civil date whose day pillar is known."""

    model_config = ConfigDict(frozen=True)

    date: _dt.date = _dt.date(2023, 10, 2)
    pillar: str = "癸巳"

    @field_validator("pillar")
    @classmethod
    def _check_pillar(cls, value: str) -> str:
        entry_for_label(value)
        return value.strip()

    @property
    def entry(self) -> SexagenaryCycleEntry:
        return entry_for_label(self.pillar)


class CalculationOptions(BaseModel):
    """Options accepted by :class:`PillarCalculator`.

    Field names accept both ``snake_case`` and the ``camelCase`` spelling used
    in serialised records (``monthPillarConvention``, ``referenceEpoch``...).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    reference_epoch: ReferenceEpoch = Field(default_factory=ReferenceEpoch)
    month_pillar_convention: MonthPillarConvention = "solarTerm"
    boundary_tolerance_seconds: float = Field(0.0, ge=0.0)
    longitude: float | None = Field(None, ge=-180.0, le=180.0)
    late_zi_next_day: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "CalculationOptions":
        calc = settings.calculation
        return cls(
            month_pillar_convention=calc.month_pillar_convention,
            boundary_tolerance_seconds=calc.boundary_tolerance_seconds,
            late_zi_next_day=calc.late_zi_next_day,
        )

    def to_dict(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class Pillar:
    """A single pillar made up of a Heavenly Stem and Earthly Branch."""

    stem: HeavenlyStem
    branch: EarthlyBranch
    cycle_index: int

    @classmethod
    def from_entry(cls, entry: SexagenaryCycleEntry) -> "Pillar":
        return cls(stem=entry.stem, branch=entry.branch, cycle_index=entry.index)

    def label(self) -> str:
        return f"{self.stem.hanzi}{self.branch.hanzi}"

    @property
    def full_stem_branch(self) -> str:
        return self.label()

    @property
    def hidden_stems(self) -> tuple[HeavenlyStem, ...]:
        return tuple(stem_for_index(index) for index in self.branch.hidden_stems)

    def to_dict(self) -> dict[str, object]:
        return {
            "stem": self.stem.hanzi,
            "branch": self.branch.hanzi,
            "fullStemBranch": self.label(),
            "hiddenStems": [stem.hanzi for stem in self.hidden_stems],
        }


@dataclass(frozen=True)
class FourPillars:
    """The year, month, day and hour pillars."""

    year: Pillar
    month: Pillar
    day: Pillar
    hour: Pillar

    def __iter__(self) -> Iterator[Pillar]:
        return iter((self.year, self.month, self.day, self.hour))

    def items(self) -> Sequence[tuple[str, Pillar]]:
        return tuple(zip(PILLAR_NAMES, self))

    @property
    def day_master(self) -> HeavenlyStem:
        return self.day.stem

    def labels(self) -> tuple[str, str, str, str]:
        return (self.year.label(), self.month.label(), self.day.label(), self.hour.label())

    def to_dict(self) -> dict[str, dict[str, object]]:
        return {name: pillar.to_dict() for name, pillar in self.items()}


@dataclass(frozen=True)
class FourPillarsChart:
    """Pillars together with the context they were derived from."""

    moment: _dt.datetime
    pillars: FourPillars
    options: CalculationOptions
    solar_term: SolarTerm | None = None
    lunar_date: LunarDate | None = None
    provenance: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class CalendarDay:
    """Year, month and day pillars for one civil date plus its solar terms."""

    date: _dt.date
    year: Pillar
    month: Pillar
    day: Pillar
    solar_terms: tuple[SolarTerm, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "date": self.date.isoformat(),
            "year": self.year.label(),
            "month": self.month.label(),
            "day": self.day.label(),
            "solarTerms": [term.name for term in self.solar_terms],
        }


class PillarCalculator:
    """Derive four pillars from timestamps.

    The year and month pillars follow the UTC instant measured against the
    solar-term table; the day and hour pillars follow the wall clock in the
    timestamp's own offset (or local mean time when a longitude is given).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        solar_terms: SolarTermCalculator | None = None,
        lunar: LunarCalendarConverter | None = None,
    ) -> None:
        if solar_terms is not None:
            self._solar_terms = solar_terms
        elif settings is not None:
            self._solar_terms = SolarTermCalculator(settings)
        else:
            self._solar_terms = get_solar_term_calculator()
        self._settings = settings or self._solar_terms.settings
        self._lunar = lunar

    @property
    def solar_terms(self) -> SolarTermCalculator:
        return self._solar_terms

    @property
    def lunar(self) -> LunarCalendarConverter:
        if self._lunar is None:
            self._lunar = LunarCalendarConverter(self._settings, solar_terms=self._solar_terms)
        return self._lunar

    def default_options(self) -> CalculationOptions:
        return CalculationOptions.from_settings(self._settings)

    # -------------------- public API --------------------

    def compute_pillars(
        self, timestamp: TimestampInput, options: CalculationOptions | None = None
    ) -> FourPillars:
        """Return the four pillars for ``timestamp``."""

        return self.compute_chart(timestamp, options).pillars

    def compute_chart(
        self,
        timestamp: TimestampInput,
        options: CalculationOptions | None = None,
        *,
        include_lunar_date: bool = False,
    ) -> FourPillarsChart:
        """Return the pillars with the governing solar term and provenance.

        The lunar date is resolved when the ``lunarMonth`` convention is in
        effect or ``include_lunar_date`` is set.
        """

        opts = options or self.default_options()
        try:
            return self._compute_chart(timestamp, opts, include_lunar_date)
        except SajuError as exc:
            record_error("pillars", exc)
            raise

    def daily_calendar(
        self,
        start: _dt.date,
        end: _dt.date,
        tz: _dt.tzinfo = _dt.UTC,
        options: CalculationOptions | None = None,
    ) -> tuple[CalendarDay, ...]:
        """Return year, month and day pillars for every civil day in ``[start, end]``.

        Year and month pillars are those in force at local noon; every solar
        term whose civil date in ``tz`` matches is attached to the day.
        """

        if end < start:
            raise ValueError(f"end {end} precedes start {start}")
        opts = options or self.default_options()
        days: list[CalendarDay] = []
        current = start
        while current <= end:
            noon = _dt.datetime.combine(current, _dt.time(12), tzinfo=tz)
            chart = self.compute_chart(noon, opts)
            terms: list[SolarTerm] = []
            for year in {current.year - 1, current.year}:
                if self._solar_terms.supports(year):
                    terms.extend(self._solar_terms.solar_terms_for_year(year).terms_on(current, tz))
            days.append(
                CalendarDay(
                    date=current,
                    year=chart.pillars.year,
                    month=chart.pillars.month,
                    day=chart.pillars.day,
                    solar_terms=tuple(sorted(terms, key=lambda term: term.moment)),
                )
            )
            current += _dt.timedelta(days=1)
        return tuple(days)

    # -------------------- internals --------------------

    def _table_for_instant(self, instant: _dt.datetime) -> SolarTermTable:
        table = self._solar_terms.solar_terms_for_year(instant.year)
        if instant < table.li_chun.moment:
            table = self._solar_terms.solar_terms_for_year(instant.year - 1)
        return table

    def _check_boundary(
        self,
        moment: _dt.datetime,
        instant: _dt.datetime,
        table: SolarTermTable,
        month_index: int,
        tolerance: float,
    ) -> None:
        jie = table.jie_terms()
        neighbours = [jie[month_index]]
        if month_index + 1 < len(jie):
            neighbours.append(jie[month_index + 1])
        elif self._solar_terms.supports(table.year + 1):
            neighbours.append(self._solar_terms.li_chun(table.year + 1))
        for term in neighbours:
            offset = (instant - term.moment).total_seconds()
            if abs(offset) <= tolerance:
                raise AmbiguousBoundary(
                    moment, term, offset_seconds=offset, tolerance_seconds=tolerance
                )

    def _compute_chart(
        self,
        timestamp: TimestampInput,
        opts: CalculationOptions,
        include_lunar_date: bool,
    ) -> FourPillarsChart:
        moment = coerce_timestamp(timestamp)
        instant = moment.astimezone(_dt.UTC)

        table = self._table_for_instant(instant)
        year = year_entry(table.year)
        solar_month = table.month_index_at(instant)
        if opts.boundary_tolerance_seconds > 0:
            self._check_boundary(
                moment, instant, table, solar_month, opts.boundary_tolerance_seconds
            )

        wall = moment if opts.longitude is None else local_mean_time(moment, opts.longitude)
        civil = wall.date()

        lunar_date: LunarDate | None = None
        if opts.month_pillar_convention == "lunarMonth":
            lunar_date = self.lunar.to_lunar(civil)
            month = month_entry(year_entry(lunar_date.year).stem_index, lunar_date.month - 1)
        else:
            if include_lunar_date and self.lunar.supports(civil.year):
                lunar_date = self.lunar.to_lunar(civil)
            month = month_entry(year.stem_index, solar_month)

        day_date = civil
        if opts.late_zi_next_day and wall.hour == 23:
            day_date += _dt.timedelta(days=1)
        epoch = opts.reference_epoch
        day_offset = (day_date - epoch.date).days
        epoch_entry = epoch.entry
        day = cycle_offset(day_offset, epoch_entry.stem_index, epoch_entry.branch_index)

        hour_branch = hour_branch_index(wall.hour)
        hour = hour_entry(day.stem_index, hour_branch)

        pillars = FourPillars(
            year=Pillar.from_entry(year),
            month=Pillar.from_entry(month),
            day=Pillar.from_entry(day),
            hour=Pillar.from_entry(hour),
        )
        provenance: dict[str, object] = {
            "utc_offset": wall.strftime("%z") or "+0000",
            "sexagenary_year": table.year,
            "solar_month_index": solar_month,
            "month_pillar_convention": opts.month_pillar_convention,
            "reference_epoch": f"{epoch.date.isoformat()} {epoch.pillar}",
            "day_offset": day_offset,
            "hour_branch_index": hour_branch,
            "local_mean_time": opts.longitude is not None,
        }
        LOG.debug("Pillars for %s: %s", moment.isoformat(), " ".join(pillars.labels()))
        return FourPillarsChart(
            moment=moment,
            pillars=pillars,
            options=opts,
            solar_term=table.term_at(instant),
            lunar_date=lunar_date,
            provenance=provenance,
        )


def compute_four_pillars(
    timestamp: TimestampInput, options: CalculationOptions | None = None
) -> FourPillars:
    """Compute the pillars with the process-wide calculator."""

    return PillarCalculator().compute_pillars(timestamp, options)
