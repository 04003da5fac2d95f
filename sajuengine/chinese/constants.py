"""Lookup tables for Heavenly Stems and Earthly Branches.

Polarity follows the index: even positions are yang, odd positions are yin,
for stems and branches alike.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final


class Element(str, Enum):
    """The five phases in generating order (wood feeds fire, ...)."""

    WOOD = "wood"
    FIRE = "fire"
    EARTH = "earth"
    METAL = "metal"
    WATER = "water"

    @property
    def order(self) -> int:
        return _ELEMENT_ORDER.index(self)

    @property
    def hanzi(self) -> str:
        return _ELEMENT_HANZI[self.order]

    def generates(self) -> "Element":
        return _ELEMENT_ORDER[(self.order + 1) % 5]

    def overcomes(self) -> "Element":
        return _ELEMENT_ORDER[(self.order + 2) % 5]


class Polarity(str, Enum):
    YANG = "yang"
    YIN = "yin"

    @classmethod
    def for_index(cls, index: int) -> "Polarity":
        return cls.YANG if index % 2 == 0 else cls.YIN


_ELEMENT_ORDER: Final[tuple[Element, ...]] = (
    Element.WOOD,
    Element.FIRE,
    Element.EARTH,
    Element.METAL,
    Element.WATER,
)
_ELEMENT_HANZI: Final[tuple[str, ...]] = ("木", "火", "土", "金", "水")


@dataclass(frozen=True)
class HeavenlyStem:
    """Representation of one of the ten Heavenly Stems (天干)."""

    index: int
    hanzi: str
    name: str
    element: Element
    polarity: Polarity


@dataclass(frozen=True)
class EarthlyBranch:
    """Representation of one of the twelve Earthly Branches (地支).

    ``hidden_stems`` lists stem indices with the main qi first.
    """

    index: int
    hanzi: str
    name: str
    animal: str
    element: Element
    polarity: Polarity
    hidden_stems: tuple[int, ...]

    @property
    def main_hidden_stem(self) -> int:
        return self.hidden_stems[0]


def _stem(index: int, hanzi: str, name: str) -> HeavenlyStem:
    return HeavenlyStem(
        index=index,
        hanzi=hanzi,
        name=name,
        element=_ELEMENT_ORDER[index // 2],
        polarity=Polarity.for_index(index),
    )


HEAVENLY_STEMS: Final[tuple[HeavenlyStem, ...]] = (
    _stem(0, "甲", "Jia"),
    _stem(1, "乙", "Yi"),
    _stem(2, "丙", "Bing"),
    _stem(3, "丁", "Ding"),
    _stem(4, "戊", "Wu"),
    _stem(5, "己", "Ji"),
    _stem(6, "庚", "Geng"),
    _stem(7, "辛", "Xin"),
    _stem(8, "壬", "Ren"),
    _stem(9, "癸", "Gui"),
)

_STEM_BY_HANZI: Final[dict[str, int]] = {stem.hanzi: stem.index for stem in HEAVENLY_STEMS}


def _branch(
    index: int,
    hanzi: str,
    name: str,
    animal: str,
    element: Element,
    hidden: str,
) -> EarthlyBranch:
    return EarthlyBranch(
        index=index,
        hanzi=hanzi,
        name=name,
        animal=animal,
        element=element,
        polarity=Polarity.for_index(index),
        hidden_stems=tuple(_STEM_BY_HANZI[char] for char in hidden),
    )


EARTHLY_BRANCHES: Final[tuple[EarthlyBranch, ...]] = (
    _branch(0, "子", "Zi", "Rat", Element.WATER, "癸"),
    _branch(1, "丑", "Chou", "Ox", Element.EARTH, "己辛癸"),
    _branch(2, "寅", "Yin", "Tiger", Element.WOOD, "甲丙戊"),
    _branch(3, "卯", "Mao", "Rabbit", Element.WOOD, "乙"),
    _branch(4, "辰", "Chen", "Dragon", Element.EARTH, "戊乙癸"),
    _branch(5, "巳", "Si", "Snake", Element.FIRE, "丙庚戊"),
    _branch(6, "午", "Wu", "Horse", Element.FIRE, "丁己丙"),
    _branch(7, "未", "Wei", "Goat", Element.EARTH, "己乙丁"),
    _branch(8, "申", "Shen", "Monkey", Element.METAL, "庚壬戊"),
    _branch(9, "酉", "You", "Rooster", Element.METAL, "辛"),
    _branch(10, "戌", "Xu", "Dog", Element.EARTH, "戊丁辛"),
    _branch(11, "亥", "Hai", "Pig", Element.WATER, "壬甲戊"),
)

_BRANCH_BY_HANZI: Final[dict[str, int]] = {
    branch.hanzi: branch.index for branch in EARTHLY_BRANCHES
}


def stem_for_index(index: int) -> HeavenlyStem:
    """Return the Heavenly Stem for ``index`` (wrapped into 0-9)."""

    return HEAVENLY_STEMS[index % len(HEAVENLY_STEMS)]


def branch_for_index(index: int) -> EarthlyBranch:
    """Return the Earthly Branch for ``index`` (wrapped into 0-11)."""

    return EARTHLY_BRANCHES[index % len(EARTHLY_BRANCHES)]


def stem_for_hanzi(char: str) -> HeavenlyStem:
    try:
        return HEAVENLY_STEMS[_STEM_BY_HANZI[char]]
    except KeyError:
        raise ValueError(f"Unknown Heavenly Stem: {char!r}") from None


def branch_for_hanzi(char: str) -> EarthlyBranch:
    try:
        return EARTHLY_BRANCHES[_BRANCH_BY_HANZI[char]]
    except KeyError:
        raise ValueError(f"Unknown Earthly Branch: {char!r}") from None


def element_for_index(index: int) -> Element:
    return _ELEMENT_ORDER[index % 5]


__all__ = [
    "Element",
    "Polarity",
    "HeavenlyStem",
    "EarthlyBranch",
    "HEAVENLY_STEMS",
    "EARTHLY_BRANCHES",
    "stem_for_index",
    "branch_for_index",
    "stem_for_hanzi",
    "branch_for_hanzi",
    "element_for_index",
]
