from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from sajuengine.cli import app, main

runner = CliRunner()


@pytest.fixture(autouse=True)
def _analytic_defaults(default_calculator):
    return default_calculator


def test_terms_json():
    result = runner.invoke(app, ["terms", "2023", "--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["year"] == 2023
    assert len(payload["terms"]) == 24
    assert payload["terms"][0]["name"] == "立春"


def test_terms_text_in_zone():
    result = runner.invoke(app, ["terms", "2023", "--tz", "Asia/Seoul"])
    assert result.exit_code == 0, result.output
    lines = result.stdout.strip().splitlines()
    assert len(lines) == 24
    assert "立春" in lines[0] and "+09:00" in lines[0]


def test_profile_json():
    result = runner.invoke(
        app, ["profile", "2023-10-15T12:00:00+09:00", "--no-lunar", "--json"]
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert [payload["pillars"][name]["fullStemBranch"] for name in ("year", "month", "day", "hour")] == [
        "癸卯", "壬戌", "丙午", "甲午",
    ]
    assert payload["lunarDate"] is None


def test_profile_text_with_tz_for_naive_input():
    result = runner.invoke(
        app, ["profile", "2023-10-15T12:00", "--tz", "Asia/Seoul", "--no-lunar"]
    )
    assert result.exit_code == 0, result.output
    assert "Day  : 丙午" in result.stdout
    assert "Day master: 丙 (fire, yang)" in result.stdout
    assert "Solar term: 寒露" in result.stdout


def test_profile_rejects_naive_timestamp_without_tz():
    result = runner.invoke(app, ["profile", "2023-10-15T12:00", "--no-lunar"])
    assert result.exit_code == 1
    assert "InvalidTimestamp" in result.output


def test_profile_rejects_unknown_convention():
    result = runner.invoke(
        app, ["profile", "2023-10-15T12:00:00+09:00", "--convention", "gregorian"]
    )
    assert result.exit_code == 2


def test_profile_unsupported_year():
    result = runner.invoke(app, ["profile", "2300-01-01T00:00:00Z", "--no-lunar"])
    assert result.exit_code == 1
    assert "UnsupportedYearRange" in result.output


def test_calendar_json():
    result = runner.invoke(
        app, ["calendar", "2023-10-08", "2023-10-09", "--tz", "+09:00", "--json"]
    )
    assert result.exit_code == 0, result.output
    rows = json.loads(result.stdout)
    assert [row["date"] for row in rows] == ["2023-10-08", "2023-10-09"]
    assert rows[1]["day"] == "庚子"
    assert rows[0]["solarTerms"] == ["寒露"]
    assert rows[1]["solarTerms"] == []


def test_calendar_rejects_reversed_range():
    result = runner.invoke(app, ["calendar", "2023-10-09", "2023-10-08"])
    assert result.exit_code == 2


def test_main_returns_exit_code():
    assert main(["terms", "2023", "--json"]) == 0
    assert main(["terms", "1200"]) == 1


def test_lunar_command():
    pytest.importorskip("swisseph")
    result = runner.invoke(app, ["lunar", "2023-03-22", "--json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"year": 2023, "month": 2, "day": 1, "isLeapMonth": True}


def test_lunar_command_rejects_bad_date():
    result = runner.invoke(app, ["lunar", "2023-13-01"])
    assert result.exit_code == 2


def test_profile_tz_leaves_aware_input_on_its_own_wall_clock():
    result = runner.invoke(
        app,
        ["profile", "2023-10-16T01:00:00+09:00", "--tz", "UTC", "--no-lunar", "--json"],
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["timestamp"] == "2023-10-16T01:00:00+09:00"
    assert payload["pillars"]["day"]["fullStemBranch"] == "丁未"
    assert payload["pillars"]["hour"]["fullStemBranch"] == "辛丑"


def test_profile_convention_choice_is_passed_through():
    result = runner.invoke(
        app,
        ["profile", "2023-10-15T12:00:00+09:00", "--convention", "solarTerm", "--no-lunar", "--json"],
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["options"]["monthPillarConvention"] == "solarTerm"


def test_profile_rejects_timestamp_outside_datetime_range():
    result = runner.invoke(app, ["profile", "9999-12-31T23:00:00-05:00", "--no-lunar"])
    assert result.exit_code == 1
    assert "InvalidTimestamp" in result.output
