from __future__ import annotations

import pytest

from sajuengine.chinese.constants import EARTHLY_BRANCHES, HEAVENLY_STEMS, Element, Polarity
from sajuengine.chinese.four_pillars import FourPillars, Pillar
from sajuengine.chinese.relations import (
    BRANCH_RELATION_TABLE,
    TEN_GOD_TABLE,
    BranchRelation,
    RelationalDeriver,
    derive_relations,
    spirit_killer,
    ten_god,
    twelve_stage,
)
from sajuengine.chinese.sexagenary import entry_for_label


def _chart(*labels: str) -> FourPillars:
    year, month, day, hour = (Pillar.from_entry(entry_for_label(label)) for label in labels)
    return FourPillars(year=year, month=month, day=day, hour=hour)


STEM = {stem.hanzi: stem for stem in HEAVENLY_STEMS}
BRANCH = {branch.hanzi: branch for branch in EARTHLY_BRANCHES}


@pytest.mark.parametrize(
    ("other", "expected"),
    [
        ("甲", "比肩"), ("乙", "劫財"), ("丙", "食神"), ("丁", "傷官"), ("戊", "偏財"),
        ("己", "正財"), ("庚", "偏官"), ("辛", "正官"), ("壬", "偏印"), ("癸", "正印"),
    ],
)
def test_ten_gods_for_jia_day_master(other: str, expected: str) -> None:
    assert ten_god(STEM["甲"], STEM[other]).hanzi == expected


def test_ten_gods_for_yin_day_master() -> None:
    assert ten_god(STEM["丁"], STEM["丙"]).hanzi == "劫財"
    assert ten_god(STEM["丁"], STEM["庚"]).hanzi == "正財"
    assert ten_god(STEM["丁"], STEM["壬"]).hanzi == "正官"
    assert ten_god(STEM["丁"], STEM["乙"]).hanzi == "偏印"


def test_ten_god_table_is_complete() -> None:
    assert len(TEN_GOD_TABLE) == 10
    for row in TEN_GOD_TABLE:
        assert sorted(row) == list(range(10))
    assert all(TEN_GOD_TABLE[i][i] == 0 for i in range(10))


def test_branch_relation_table_is_symmetric_and_total() -> None:
    for a in range(12):
        for b in range(12):
            assert BRANCH_RELATION_TABLE[a][b] is BRANCH_RELATION_TABLE[b][a]
    clashes = {(a, b) for a in range(12) for b in range(12)
               if BRANCH_RELATION_TABLE[a][b] is BranchRelation.CLASH}
    assert (0, 6) in clashes and (2, 8) in clashes and len(clashes) == 12
    assert BRANCH_RELATION_TABLE[0][7] is BranchRelation.HARM  # 子未
    assert BRANCH_RELATION_TABLE[3][4] is BranchRelation.HARM  # 卯辰
    assert BRANCH_RELATION_TABLE[0][1] is BranchRelation.COMBINATION  # 子丑
    assert BRANCH_RELATION_TABLE[0][0] is None


def test_derive_known_chart() -> None:
    attrs = RelationalDeriver().derive(_chart("癸卯", "壬戌", "丙午", "甲午"))

    assert attrs.day_master.hanzi == "丙"
    assert attrs.main_element is Element.FIRE
    assert attrs.secondary_element is Element.WATER
    assert attrs.yin_yang is Polarity.YANG
    assert {name: god.hanzi for name, god in attrs.ten_gods.items()} == {
        "year": "正官", "month": "偏官", "day": "比肩", "hour": "偏印",
    }
    assert {name: god.hanzi for name, god in attrs.branch_ten_gods.items()} == {
        "year": "正印", "month": "食神", "day": "劫財", "hour": "劫財",
    }
    assert [stem.hanzi for stem in attrs.hidden_stems["month"]] == ["戊", "丁", "辛"]
    assert dict(attrs.twelve_spirits) == {
        "year": None, "month": None, "day": None, "hour": None,
    }
    assert dict(attrs.twelve_stages) == {
        "year": "沐浴", "month": "墓", "day": "帝旺", "hour": "帝旺",
    }
    assert attrs.element_counts[Element.FIRE] == 3
    assert sum(attrs.element_counts.values()) == 8


def test_clash_beats_harm_for_twelve_spirits() -> None:
    # 子 year, 午 month (clash), 未 day (harm with 子), 寅 hour.
    attrs = RelationalDeriver().derive(_chart("甲子", "庚午", "辛未", "庚寅"))
    assert attrs.twelve_spirits["year"] is BranchRelation.CLASH
    assert attrs.twelve_spirits["month"] is BranchRelation.CLASH
    assert attrs.twelve_spirits["day"] is BranchRelation.HARM
    assert attrs.twelve_spirits["hour"] is None
    kinds = {(item.kind, item.pillars) for item in attrs.branch_interactions}
    assert (BranchRelation.CLASH, ("year", "month")) in kinds
    assert (BranchRelation.HARM, ("year", "day")) in kinds
    assert (BranchRelation.COMBINATION, ("month", "day")) in kinds


def test_attributes_are_read_only() -> None:
    attrs = RelationalDeriver().derive(_chart("癸卯", "壬戌", "丙午", "甲午"))
    with pytest.raises(TypeError):
        attrs.ten_gods["year"] = attrs.ten_gods["day"]  # type: ignore[index]


def test_twelve_stages() -> None:
    assert twelve_stage(STEM["甲"], BRANCH["亥"]) == "長生"
    assert twelve_stage(STEM["甲"], BRANCH["卯"]) == "帝旺"
    assert twelve_stage(STEM["乙"], BRANCH["午"]) == "長生"
    assert twelve_stage(STEM["乙"], BRANCH["寅"]) == "帝旺"
    assert twelve_stage(STEM["庚"], BRANCH["巳"]) == "長生"
    assert twelve_stage(STEM["癸"], BRANCH["子"]) == "臨官"


def test_spirit_killers_by_trine_group() -> None:
    rat = BRANCH["子"]
    assert spirit_killer(rat, BRANCH["巳"]) == "劫殺"
    assert spirit_killer(rat, BRANCH["子"]) == "將星殺"
    assert spirit_killer(rat, BRANCH["寅"]) == "驛馬殺"
    assert spirit_killer(rat, BRANCH["酉"]) == "年殺"
    assert spirit_killer(rat, BRANCH["辰"]) == "華蓋殺"
    tiger = BRANCH["寅"]
    assert spirit_killer(tiger, BRANCH["申"]) == "驛馬殺"
    assert spirit_killer(tiger, BRANCH["午"]) == "將星殺"
    assert spirit_killer(BRANCH["巳"], BRANCH["亥"]) == "驛馬殺"
    assert spirit_killer(BRANCH["亥"], BRANCH["巳"]) == "驛馬殺"


def test_module_level_derive_matches_deriver() -> None:
    chart = _chart("丙寅", "癸巳", "庚午", "己卯")
    assert derive_relations(chart) == RelationalDeriver().derive(chart)
