"""Four Pillars engines exposed by :mod:`sajuengine`."""

from __future__ import annotations

from .constants import (
    EARTHLY_BRANCHES,
    HEAVENLY_STEMS,
    EarthlyBranch,
    Element,
    HeavenlyStem,
    Polarity,
)
from .four_pillars import (
    CalculationOptions,
    CalendarDay,
    FourPillars,
    FourPillarsChart,
    Pillar,
    PillarCalculator,
    ReferenceEpoch,
    compute_four_pillars,
)
from .lunar import LunarCalendarConverter, LunarDate, LunarMonth, get_lunar_converter, to_lunar
from .profile import SajuProfile, SajuProfileBuilder, build_profile
from .relations import (
    BranchInteraction,
    BranchRelation,
    RelationalAttributes,
    RelationalDeriver,
    TenGod,
    derive_relations,
    ten_god,
)
from .sexagenary import (
    SexagenaryCycleEntry,
    cycle_offset,
    entry_for_label,
    hour_branch_index,
    sexagenary_entry_for_index,
    sexagenary_index,
)

__all__ = [
    "EARTHLY_BRANCHES",
    "HEAVENLY_STEMS",
    "EarthlyBranch",
    "Element",
    "HeavenlyStem",
    "Polarity",
    "SexagenaryCycleEntry",
    "cycle_offset",
    "entry_for_label",
    "hour_branch_index",
    "sexagenary_entry_for_index",
    "sexagenary_index",
    "CalculationOptions",
    "CalendarDay",
    "FourPillars",
    "FourPillarsChart",
    "Pillar",
    "PillarCalculator",
    "ReferenceEpoch",
    "compute_four_pillars",
    "LunarCalendarConverter",
    "LunarDate",
    "LunarMonth",
    "get_lunar_converter",
    "to_lunar",
    "BranchInteraction",
    "BranchRelation",
    "RelationalAttributes",
    "RelationalDeriver",
    "TenGod",
    "derive_relations",
    "ten_god",
    "SajuProfile",
    "SajuProfileBuilder",
    "build_profile",
]
