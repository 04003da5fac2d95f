"""Utilities for working with the sixty Jia-Zi combinations.

Every pillar is produced by :func:`cycle_offset`: the stem advances modulo 10
and the branch modulo 12 from a reference pair, so year, month, day and hour
lookups differ only in the offset and the reference they pass in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .constants import (
    EARTHLY_BRANCHES,
    HEAVENLY_STEMS,
    EarthlyBranch,
    HeavenlyStem,
    branch_for_hanzi,
    stem_for_hanzi,
)

SEXAGENARY_CYCLE_LENGTH: Final[int] = 60

# 1984 opened a Jia-Zi year.
YEAR_CYCLE_EPOCH: Final[int] = 1984

# Tiger (Yin) is the first solar month.
FIRST_MONTH_BRANCH: Final[int] = 2


@dataclass(frozen=True)
class SexagenaryCycleEntry:
    """Pairing of a Heavenly Stem and Earthly Branch."""

    index: int
    stem_index: int
    branch_index: int

    @property
    def stem(self) -> HeavenlyStem:
        return HEAVENLY_STEMS[self.stem_index]

    @property
    def branch(self) -> EarthlyBranch:
        return EARTHLY_BRANCHES[self.branch_index]

    def label(self) -> str:
        """Return the two-character label (e.g. ``甲子``)."""

        return f"{self.stem.hanzi}{self.branch.hanzi}"


def sexagenary_index(stem_index: int, branch_index: int) -> int:
    """Return the 0-59 index for the provided stem/branch combination.

    Only pairs of matching polarity exist in the cycle; any other pairing
    raises :class:`ValueError`.
    """

    stem = stem_index % 10
    branch = branch_index % 12
    if stem % 2 != branch % 2:
        raise ValueError(f"Invalid stem/branch pairing: stem={stem_index}, branch={branch_index}")
    # Chinese remainder solution of i ≡ stem (mod 10), i ≡ branch (mod 12).
    return (6 * stem - 5 * branch) % SEXAGENARY_CYCLE_LENGTH


def cycle_offset(n: int, ref_stem: int = 0, ref_branch: int = 0) -> SexagenaryCycleEntry:
    """Return the cycle entry ``n`` steps away from ``(ref_stem, ref_branch)``.

    Total over every integer ``n``; negative offsets walk backwards through the
    cycle. The reference pair must itself be a valid combination.
    """

    stem = (ref_stem + n) % 10
    branch = (ref_branch + n) % 12
    return SexagenaryCycleEntry(
        index=sexagenary_index(stem, branch),
        stem_index=stem,
        branch_index=branch,
    )


def sexagenary_entry_for_index(index: int) -> SexagenaryCycleEntry:
    """Return the cycle entry for ``index`` (wrapped into 0-59)."""

    return cycle_offset(index)


def entry_for_label(label: str) -> SexagenaryCycleEntry:
    """Parse a two-character label such as ``癸巳``."""

    text = label.strip()
    if len(text) != 2:
        raise ValueError(f"Expected a two-character stem-branch label, got {label!r}")
    stem = stem_for_hanzi(text[0])
    branch = branch_for_hanzi(text[1])
    return sexagenary_entry_for_index(sexagenary_index(stem.index, branch.index))


def year_entry(sexagenary_year: int) -> SexagenaryCycleEntry:
    """Return the year pillar entry for a sexagenary (Li Chun based) year."""

    return cycle_offset(sexagenary_year - YEAR_CYCLE_EPOCH)


def month_stem_base(year_stem_index: int) -> int:
    """Return the stem of the Tiger month for a year stem (five-tiger rule)."""

    return (2 * year_stem_index + 2) % 10


def month_entry(year_stem_index: int, month_number: int) -> SexagenaryCycleEntry:
    """Return the month entry ``month_number`` (0 = Tiger) months into the year."""

    return cycle_offset(month_number, month_stem_base(year_stem_index), FIRST_MONTH_BRANCH)


def hour_branch_index(hour: int) -> int:
    """Return the double-hour (時辰) branch for a civil ``hour``; 23:00 opens Zi."""

    return ((int(hour) % 24 + 1) // 2) % 12


def hour_stem_base(day_stem_index: int) -> int:
    """Return the stem of the Zi hour for a day stem (five-rat rule)."""

    return (2 * day_stem_index) % 10


def hour_entry(day_stem_index: int, hour_branch: int) -> SexagenaryCycleEntry:
    return cycle_offset(hour_branch, hour_stem_base(day_stem_index), 0)


__all__ = [
    "SexagenaryCycleEntry",
    "SEXAGENARY_CYCLE_LENGTH",
    "YEAR_CYCLE_EPOCH",
    "FIRST_MONTH_BRANCH",
    "cycle_offset",
    "sexagenary_entry_for_index",
    "sexagenary_index",
    "entry_for_label",
    "year_entry",
    "month_stem_base",
    "month_entry",
    "hour_branch_index",
    "hour_stem_base",
    "hour_entry",
]
