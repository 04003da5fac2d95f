"""Relational attributes derived from a set of four pillars.

Everything here is a pure function of the pillars: hidden stems, the Ten Gods
of each stem and branch relative to the Day Master, branch-pair relations
(six clashes, six harms, six combinations), the twelve life stages, the
twelve spirit killers and the elemental balance.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Final, Mapping

from .constants import (
    EarthlyBranch,
    Element,
    HeavenlyStem,
    Polarity,
    stem_for_index,
)
from .four_pillars import FourPillars

__all__ = [
    "TEN_GOD_TABLE",
    "TEN_GODS",
    "BRANCH_RELATION_TABLE",
    "BranchInteraction",
    "BranchRelation",
    "RelationalAttributes",
    "RelationalDeriver",
    "TenGod",
    "branch_relation",
    "derive_relations",
    "spirit_killer",
    "ten_god",
    "twelve_stage",
]


# -------------------- Ten Gods --------------------


@dataclass(frozen=True)
class TenGod:
    index: int
    hanzi: str
    english: str


TEN_GODS: Final[tuple[TenGod, ...]] = tuple(
    TenGod(index, hanzi, english)
    for index, (hanzi, english) in enumerate(
        (
            ("比肩", "Friend"),
            ("劫財", "Rob Wealth"),
            ("食神", "Eating God"),
            ("傷官", "Hurting Officer"),
            ("偏財", "Indirect Wealth"),
            ("正財", "Direct Wealth"),
            ("偏官", "Seven Killings"),
            ("正官", "Direct Officer"),
            ("偏印", "Indirect Resource"),
            ("正印", "Direct Resource"),
        )
    )
)


def _ten_god_index(day_master: int, other: int) -> int:
    # Element offset: 0 peer, 1 output, 2 wealth, 3 officer, 4 resource.
    offset = (other // 2 - day_master // 2) % 5
    return offset * 2 + (0 if day_master % 2 == other % 2 else 1)


# TEN_GOD_TABLE[day_master_stem][other_stem] -> index into TEN_GODS
TEN_GOD_TABLE: Final[tuple[tuple[int, ...], ...]] = tuple(
    tuple(_ten_god_index(dm, other) for other in range(10)) for dm in range(10)
)


def ten_god(day_master: HeavenlyStem, other: HeavenlyStem) -> TenGod:
    """Return the Ten God that ``other`` plays for ``day_master``."""

    return TEN_GODS[TEN_GOD_TABLE[day_master.index][other.index]]


# -------------------- Branch relations --------------------


class BranchRelation(str, Enum):
    """Pairwise branch relations, strongest first."""

    CLASH = "六冲"
    HARM = "六害"
    COMBINATION = "六合"

    @property
    def english(self) -> str:
        return {"六冲": "clash", "六害": "harm", "六合": "combination"}[self.value]


def _relation(a: int, b: int) -> BranchRelation | None:
    if (a - b) % 12 == 6:
        return BranchRelation.CLASH
    if (a + b) % 12 == 7:
        return BranchRelation.HARM
    if (a + b) % 12 == 1:
        return BranchRelation.COMBINATION
    return None


BRANCH_RELATION_TABLE: Final[tuple[tuple[BranchRelation | None, ...], ...]] = tuple(
    tuple(_relation(a, b) for b in range(12)) for a in range(12)
)

# Relations that mark a pillar in the twelve-spirit column, strongest first.
_SPIRIT_MARKERS: Final[tuple[BranchRelation, ...]] = (BranchRelation.CLASH, BranchRelation.HARM)


def branch_relation(a: EarthlyBranch, b: EarthlyBranch) -> BranchRelation | None:
    return BRANCH_RELATION_TABLE[a.index][b.index]


@dataclass(frozen=True)
class BranchInteraction:
    kind: BranchRelation
    pillars: tuple[str, str]
    branches: tuple[str, str]

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "pillars": list(self.pillars),
            "branches": list(self.branches),
        }


# -------------------- Twelve stages and spirit killers --------------------

TWELVE_STAGE_NAMES: Final[tuple[str, ...]] = (
    "長生", "沐浴", "冠帯", "臨官", "帝旺", "衰", "病", "死", "墓", "絶", "胎", "養",
)

# Branch where each stem's 長生 falls; yang stems advance, yin stems retreat.
_LONG_LIFE_BRANCH: Final[tuple[int, ...]] = (11, 6, 2, 9, 2, 9, 5, 0, 8, 3)


def twelve_stage(stem: HeavenlyStem, branch: EarthlyBranch) -> str:
    start = _LONG_LIFE_BRANCH[stem.index]
    if stem.polarity is Polarity.YANG:
        step = (branch.index - start) % 12
    else:
        step = (start - branch.index) % 12
    return TWELVE_STAGE_NAMES[step]


SPIRIT_KILLER_NAMES: Final[tuple[str, ...]] = (
    "劫殺", "災殺", "天殺", "地殺", "年殺", "月殺",
    "亡身殺", "將星殺", "攀鞍殺", "驛馬殺", "六害殺", "華蓋殺",
)

# Cardinal branch (將星) of each trine group, keyed by ``branch % 4``.
_TRINE_GENERAL: Final[tuple[int, ...]] = (0, 9, 6, 3)


def spirit_killer(base: EarthlyBranch, target: EarthlyBranch) -> str:
    """Return the spirit killer ``target`` carries relative to ``base`` (usually the year branch)."""

    general = _TRINE_GENERAL[base.index % 4]
    return SPIRIT_KILLER_NAMES[(target.index - (general + 5)) % 12]


# -------------------- Derived attributes --------------------


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(mapping)


@dataclass(frozen=True)
class RelationalAttributes:
    """Read-only view of everything derived from a :class:`FourPillars`."""

    day_master: HeavenlyStem
    hidden_stems: Mapping[str, tuple[HeavenlyStem, ...]]
    ten_gods: Mapping[str, TenGod]
    branch_ten_gods: Mapping[str, TenGod]
    twelve_spirits: Mapping[str, BranchRelation | None]
    main_element: Element
    secondary_element: Element
    yin_yang: Polarity
    twelve_stages: Mapping[str, str]
    spirit_killers: Mapping[str, str]
    branch_interactions: tuple[BranchInteraction, ...]
    element_counts: Mapping[Element, int]


class RelationalDeriver:
    """Compute :class:`RelationalAttributes` from pillars."""

    def derive(self, pillars: FourPillars) -> RelationalAttributes:
        day_master = pillars.day_master
        named = pillars.items()

        hidden = {
            name: tuple(stem_for_index(index) for index in pillar.branch.hidden_stems)
            for name, pillar in named
        }
        ten_gods = {name: ten_god(day_master, pillar.stem) for name, pillar in named}
        branch_ten_gods = {
            name: ten_god(day_master, stem_for_index(pillar.branch.main_hidden_stem))
            for name, pillar in named
        }

        interactions: list[BranchInteraction] = []
        for i, (first_name, first) in enumerate(named):
            for second_name, second in named[i + 1 :]:
                kind = branch_relation(first.branch, second.branch)
                if kind is not None:
                    interactions.append(
                        BranchInteraction(
                            kind=kind,
                            pillars=(first_name, second_name),
                            branches=(first.branch.hanzi, second.branch.hanzi),
                        )
                    )

        spirits: dict[str, BranchRelation | None] = {}
        for name, pillar in named:
            found = {
                branch_relation(pillar.branch, other.branch)
                for other_name, other in named
                if other_name != name
            }
            spirits[name] = next((kind for kind in _SPIRIT_MARKERS if kind in found), None)

        year_branch = pillars.year.branch
        stages = {name: twelve_stage(day_master, pillar.branch) for name, pillar in named}
        killers = {name: spirit_killer(year_branch, pillar.branch) for name, pillar in named}

        counts = {element: 0 for element in Element}
        for pillar in pillars:
            counts[pillar.stem.element] += 1
            counts[pillar.branch.element] += 1

        return RelationalAttributes(
            day_master=day_master,
            hidden_stems=_frozen(hidden),
            ten_gods=_frozen(ten_gods),
            branch_ten_gods=_frozen(branch_ten_gods),
            twelve_spirits=_frozen(spirits),
            main_element=day_master.element,
            secondary_element=pillars.month.stem.element,
            yin_yang=day_master.polarity,
            twelve_stages=_frozen(stages),
            spirit_killers=_frozen(killers),
            branch_interactions=tuple(interactions),
            element_counts=_frozen(counts),
        )


_DERIVER = RelationalDeriver()


def derive_relations(pillars: FourPillars) -> RelationalAttributes:
    return _DERIVER.derive(pillars)

