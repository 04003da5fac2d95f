from __future__ import annotations

import datetime as dt
import math

import pytest

from sajuengine.core.time import (
    civil_date,
    coerce_timestamp,
    ensure_utc,
    fixed_offset,
    from_julian_day,
    julian_day,
    local_mean_time,
    parse_offset,
)
from sajuengine.errors import InvalidTimestamp, SajuError


def test_coerce_preserves_offset():
    moment = coerce_timestamp("2023-10-15T12:00:00+09:00")
    assert moment.utcoffset() == dt.timedelta(hours=9)
    assert moment.hour == 12


def test_coerce_accepts_zulu_and_posix():
    assert coerce_timestamp("2000-01-01T12:00:00Z") == dt.datetime(2000, 1, 1, 12, tzinfo=dt.UTC)
    assert coerce_timestamp(946728000) == dt.datetime(2000, 1, 1, 12, tzinfo=dt.UTC)
    assert coerce_timestamp(946728000.5).microsecond == 500000


def test_coerce_passes_aware_datetimes_through():
    moment = dt.datetime(2020, 5, 5, 5, 5, tzinfo=dt.timezone(dt.timedelta(hours=-3)))
    assert coerce_timestamp(moment) is moment


@pytest.mark.parametrize(
    "value",
    [
        dt.datetime(2023, 1, 1, 12, 0),
        "2023-01-01T12:00:00",
        "",
        "   ",
        "yesterday",
        math.nan,
        math.inf,
        True,
        1e20,
        None,
        [2023, 1, 1],
        "0001-01-01T00:00:00+05:00",
        "9999-12-31T23:00:00-05:00",
    ],
)
def test_coerce_rejects_invalid_input(value):
    with pytest.raises(InvalidTimestamp) as excinfo:
        coerce_timestamp(value)
    assert isinstance(excinfo.value, SajuError)
    assert isinstance(excinfo.value, ValueError)


def test_ensure_utc_rejects_naive():
    with pytest.raises(InvalidTimestamp):
        ensure_utc(dt.datetime(2023, 1, 1))


def test_julian_day_round_trip():
    assert julian_day(dt.datetime(2000, 1, 1, 12, tzinfo=dt.UTC)) == 2451545.0
    moment = dt.datetime(1986, 5, 25, 20, 0, 0, 250000, tzinfo=dt.UTC)
    restored = from_julian_day(julian_day(moment))
    assert abs((restored - moment).total_seconds()) < 1e-3
    assert restored.tzinfo is dt.UTC


def test_fixed_offset():
    assert fixed_offset(0) is dt.UTC
    assert fixed_offset(8).utcoffset(None) == dt.timedelta(hours=8)
    assert fixed_offset(-3.5).utcoffset(None) == dt.timedelta(hours=-3, minutes=-30)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Z", dt.timedelta(0)),
        ("utc", dt.timedelta(0)),
        ("+09:00", dt.timedelta(hours=9)),
        ("-0530", dt.timedelta(hours=-5, minutes=-30)),
        ("+08", dt.timedelta(hours=8)),
    ],
)
def test_parse_offset(text, expected):
    assert parse_offset(text).utcoffset(None) == expected


@pytest.mark.parametrize("text", ["", "+9", "+25:00", "+09:75", "Asia/Seoul"])
def test_parse_offset_rejects_garbage(text):
    with pytest.raises(InvalidTimestamp):
        parse_offset(text)


def test_local_mean_time_shifts_four_minutes_per_degree():
    moment = dt.datetime(2023, 10, 15, 0, 0, tzinfo=dt.UTC)
    seoul = local_mean_time(moment, 127.0)
    assert seoul.utcoffset() == dt.timedelta(hours=8, minutes=28)
    assert seoul == moment
    assert local_mean_time(moment, -90.0).utcoffset() == dt.timedelta(hours=-6)
    with pytest.raises(ValueError):
        local_mean_time(moment, 181.0)


def test_civil_date():
    moment = dt.datetime(2023, 10, 15, 20, 0, tzinfo=dt.UTC)
    assert civil_date(moment) == dt.date(2023, 10, 15)
    assert civil_date(moment, dt.timezone(dt.timedelta(hours=9))) == dt.date(2023, 10, 16)
