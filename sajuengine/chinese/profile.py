"""Assemble complete Saju profiles from a timestamp."""

from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from ..config.settings import Settings
from ..core.time import TimestampInput
from ..ephemeris.solar_terms import SolarTerm
from ..observability.metrics import PROFILE_COMPUTE_DURATION
from .constants import Element, HeavenlyStem, Polarity
from .four_pillars import CalculationOptions, FourPillars, PillarCalculator
from .lunar import LunarDate
from .relations import (
    BranchRelation,
    RelationalAttributes,
    RelationalDeriver,
    TenGod,
)

__all__ = ["SajuProfile", "SajuProfileBuilder", "build_profile"]

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class SajuProfile:
    """Immutable profile combining the pillars with their derived attributes.

    :meth:`to_dict` is the hand-off format for persistence and prompt
    assembly; it contains only JSON-safe values.
    """

    moment: _dt.datetime
    four_pillars: FourPillars
    relations: RelationalAttributes
    options: CalculationOptions
    solar_term: SolarTerm | None = None
    lunar_date: LunarDate | None = None

    @property
    def day_master(self) -> HeavenlyStem:
        return self.relations.day_master

    @property
    def main_element(self) -> Element:
        return self.relations.main_element

    @property
    def secondary_element(self) -> Element:
        return self.relations.secondary_element

    @property
    def yin_yang(self) -> Polarity:
        return self.relations.yin_yang

    @property
    def ten_gods(self) -> Mapping[str, TenGod]:
        return self.relations.ten_gods

    @property
    def branch_ten_gods(self) -> Mapping[str, TenGod]:
        return self.relations.branch_ten_gods

    @property
    def twelve_spirits(self) -> Mapping[str, BranchRelation | None]:
        return self.relations.twelve_spirits

    @property
    def hidden_stems(self) -> Mapping[str, tuple[HeavenlyStem, ...]]:
        return self.relations.hidden_stems

    def to_dict(self) -> dict[str, Any]:
        rel = self.relations
        return {
            "timestamp": self.moment.isoformat(),
            "pillars": self.four_pillars.to_dict(),
            "dayMaster": {
                "stem": rel.day_master.hanzi,
                "element": rel.day_master.element.value,
                "polarity": rel.day_master.polarity.value,
            },
            "mainElement": rel.main_element.value,
            "secondaryElement": rel.secondary_element.value,
            "yinYang": rel.yin_yang.value,
            "tenGods": {name: god.hanzi for name, god in rel.ten_gods.items()},
            "branchTenGods": {name: god.hanzi for name, god in rel.branch_ten_gods.items()},
            "twelveSpirits": {
                name: (marker.value if marker is not None else None)
                for name, marker in rel.twelve_spirits.items()
            },
            "twelveStages": dict(rel.twelve_stages),
            "spiritKillers": dict(rel.spirit_killers),
            "branchInteractions": [item.to_dict() for item in rel.branch_interactions],
            "elementCounts": {element.value: count for element, count in rel.element_counts.items()},
            "solarTerm": self.solar_term.to_dict() if self.solar_term else None,
            "lunarDate": self.lunar_date.to_dict() if self.lunar_date else None,
            "options": self.options.to_dict(),
        }


class SajuProfileBuilder:
    """Run the pillar calculator and the relational deriver in one step."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        calculator: PillarCalculator | None = None,
        deriver: RelationalDeriver | None = None,
        include_lunar_date: bool = True,
    ) -> None:
        self._calculator = calculator or PillarCalculator(settings)
        self._deriver = deriver or RelationalDeriver()
        self._include_lunar_date = include_lunar_date

    @property
    def calculator(self) -> PillarCalculator:
        return self._calculator

    def build(
        self, timestamp: TimestampInput, options: CalculationOptions | None = None
    ) -> SajuProfile:
        opts = options or self._calculator.default_options()
        with PROFILE_COMPUTE_DURATION.labels(convention=opts.month_pillar_convention).time():
            chart = self._calculator.compute_chart(
                timestamp, opts, include_lunar_date=self._include_lunar_date
            )
            relations = self._deriver.derive(chart.pillars)
        LOG.debug("Built profile for %s", chart.moment.isoformat())
        return SajuProfile(
            moment=chart.moment,
            four_pillars=chart.pillars,
            relations=relations,
            options=opts,
            solar_term=chart.solar_term,
            lunar_date=chart.lunar_date,
        )


def build_profile(
    timestamp: TimestampInput, options: CalculationOptions | dict | None = None
) -> SajuProfile:
    """Build a profile with the process-wide calculators.

    ``options`` may be a :class:`CalculationOptions` or a plain mapping using
    either spelling of the option names.
    """

    if isinstance(options, dict):
        options = CalculationOptions.model_validate(options)
    return SajuProfileBuilder().build(timestamp, options)
