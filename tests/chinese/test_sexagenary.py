from __future__ import annotations

import pytest

from sajuengine.chinese.constants import EARTHLY_BRANCHES, HEAVENLY_STEMS, Element, Polarity
from sajuengine.chinese.sexagenary import (
    cycle_offset,
    entry_for_label,
    hour_branch_index,
    hour_entry,
    month_entry,
    sexagenary_entry_for_index,
    sexagenary_index,
    year_entry,
)


def test_cycle_starts_and_ends_where_expected() -> None:
    assert sexagenary_entry_for_index(0).label() == "甲子"
    assert sexagenary_entry_for_index(1).label() == "乙丑"
    assert sexagenary_entry_for_index(59).label() == "癸亥"
    assert sexagenary_entry_for_index(60).label() == "甲子"


def test_sexagenary_index_round_trips_every_entry() -> None:
    for index in range(60):
        entry = sexagenary_entry_for_index(index)
        assert sexagenary_index(entry.stem_index, entry.branch_index) == index
        assert entry_for_label(entry.label()).index == index


def test_mismatched_parity_is_rejected() -> None:
    with pytest.raises(ValueError):
        sexagenary_index(0, 1)
    with pytest.raises(ValueError):
        entry_for_label("甲丑")


@pytest.mark.parametrize("label", ["甲", "甲子丑", "XY"])
def test_malformed_labels_are_rejected(label: str) -> None:
    with pytest.raises(ValueError):
        entry_for_label(label)


def test_cycle_offset_wraps_negative_offsets() -> None:
    assert cycle_offset(-1).label() == "癸亥"
    assert cycle_offset(-61).label() == "癸亥"
    assert cycle_offset(13, 9, 5).label() == "丙午"  # 癸巳 + 13 days


def test_year_entries_follow_1984_jia_zi() -> None:
    assert year_entry(1984).label() == "甲子"
    assert year_entry(2023).label() == "癸卯"
    assert year_entry(2024).label() == "甲辰"
    assert year_entry(1924).label() == "甲子"
    assert year_entry(1983).label() == "癸亥"


@pytest.mark.parametrize(
    ("year_stem", "expected"),
    [(0, "丙寅"), (5, "丙寅"), (1, "戊寅"), (6, "戊寅"), (2, "庚寅"), (7, "庚寅"),
     (3, "壬寅"), (8, "壬寅"), (4, "甲寅"), (9, "甲寅")],
)
def test_five_tiger_rule(year_stem: int, expected: str) -> None:
    assert month_entry(year_stem, 0).label() == expected


def test_month_sequence_for_gui_mao_year() -> None:
    labels = [month_entry(9, m).label() for m in range(12)]
    assert labels == [
        "甲寅", "乙卯", "丙辰", "丁巳", "戊午", "己未",
        "庚申", "辛酉", "壬戌", "癸亥", "甲子", "乙丑",
    ]


@pytest.mark.parametrize(
    ("hour", "branch"),
    [(23, 0), (0, 0), (1, 1), (2, 1), (3, 2), (5, 3), (11, 6), (12, 6), (13, 7), (22, 11)],
)
def test_hour_branch_slots(hour: int, branch: int) -> None:
    assert hour_branch_index(hour) == branch


def test_five_rat_rule() -> None:
    assert hour_entry(0, 0).label() == "甲子"
    assert hour_entry(5, 0).label() == "甲子"
    assert hour_entry(1, 0).label() == "丙子"
    assert hour_entry(4, 0).label() == "壬子"
    assert hour_entry(2, 6).label() == "甲午"


def test_constant_tables_are_consistent() -> None:
    assert [stem.hanzi for stem in HEAVENLY_STEMS] == list("甲乙丙丁戊己庚辛壬癸")
    assert [branch.hanzi for branch in EARTHLY_BRANCHES] == list("子丑寅卯辰巳午未申酉戌亥")
    assert HEAVENLY_STEMS[0].element is Element.WOOD
    assert HEAVENLY_STEMS[9].element is Element.WATER
    assert HEAVENLY_STEMS[1].polarity is Polarity.YIN
    assert EARTHLY_BRANCHES[0].polarity is Polarity.YANG
    assert EARTHLY_BRANCHES[6].main_hidden_stem == 3  # 午 -> 丁
    for branch in EARTHLY_BRANCHES:
        assert 1 <= len(branch.hidden_stems) <= 3
    assert Element.WOOD.generates() is Element.FIRE
    assert Element.WATER.overcomes() is Element.FIRE
