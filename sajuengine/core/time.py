"""Time conversion helpers used across SajuEngine.

Every calculator accepts the same family of timestamp inputs and works on
timezone-aware ``datetime`` values only. Naive values are rejected instead of
being read in the host time zone, and "now" is never substituted for a
missing value. Julian days are expressed in UT and derived from an exact
offset against the J2000 epoch so that :func:`from_julian_day` inverts
:func:`julian_day` to the microsecond.
"""

from __future__ import annotations

import datetime as _dt
import math
from typing import Final, Union

from ..errors import InvalidTimestamp

__all__ = [
    "TimestampInput",
    "SECONDS_PER_DAY",
    "coerce_timestamp",
    "ensure_utc",
    "julian_day",
    "from_julian_day",
    "local_mean_time",
    "civil_date",
    "fixed_offset",
    "parse_offset",
]


SECONDS_PER_DAY: Final[float] = 86_400.0

J2000_JD: Final[float] = 2_451_545.0
J2000_EPOCH: Final[_dt.datetime] = _dt.datetime(2000, 1, 1, 12, 0, tzinfo=_dt.UTC)

TimestampInput = Union[_dt.datetime, str, int, float]


def coerce_timestamp(value: TimestampInput) -> _dt.datetime:
    """Return ``value`` as a timezone-aware :class:`datetime`.

    Accepts an aware ``datetime``, an ISO-8601 string carrying an offset (or
    ``Z``), or POSIX seconds interpreted as UTC. The original offset of
    ``datetime`` and string inputs is preserved because day and hour pillars
    are read from the local wall clock.
    """

    if isinstance(value, bool):
        raise InvalidTimestamp("Boolean values are not timestamps", value=value)
    if isinstance(value, _dt.datetime):
        if value.tzinfo is None or value.utcoffset() is None:
            raise InvalidTimestamp(
                "Naive datetime supplied; attach a timezone or UTC offset", value=value
            )
        return _representable(value, value)
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise InvalidTimestamp(f"Non-finite POSIX timestamp: {value!r}", value=value)
        try:
            return _dt.datetime.fromtimestamp(value, tz=_dt.UTC)
        except (OverflowError, OSError, ValueError) as exc:
            raise InvalidTimestamp(f"POSIX timestamp out of range: {value!r}", value=value) from exc
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidTimestamp("Empty timestamp string", value=value)
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = _dt.datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidTimestamp(f"Unparseable ISO-8601 timestamp: {value!r}", value=value) from exc
        if parsed.tzinfo is None:
            raise InvalidTimestamp(
                f"Timestamp {value!r} has no UTC offset; append 'Z' or '+HH:MM'", value=value
            )
        return _representable(parsed, value)
    raise InvalidTimestamp(
        f"Unsupported timestamp type: {type(value).__name__}", value=value
    )


def _representable(moment: _dt.datetime, value: object) -> _dt.datetime:
    # The UTC instant must exist as well as the local wall time.
    try:
        moment.astimezone(_dt.UTC)
    except OverflowError as exc:
        raise InvalidTimestamp(
            f"Timestamp out of range once converted to UTC: {value!r}", value=value
        ) from exc
    return moment


def ensure_utc(moment: _dt.datetime) -> _dt.datetime:
    """Return ``moment`` converted to UTC; naive values are rejected."""

    if moment.tzinfo is None or moment.utcoffset() is None:
        raise InvalidTimestamp("Naive datetime supplied", value=moment)
    return moment.astimezone(_dt.UTC)


def julian_day(moment: _dt.datetime) -> float:
    """Return the Julian day (UT) for an aware ``moment``."""

    delta = ensure_utc(moment) - J2000_EPOCH
    return J2000_JD + delta.total_seconds() / SECONDS_PER_DAY


def from_julian_day(jd: float) -> _dt.datetime:
    """Return the UTC ``datetime`` for a Julian day (UT)."""

    return J2000_EPOCH + _dt.timedelta(days=jd - J2000_JD)


def fixed_offset(hours: float) -> _dt.timezone:
    """Return a fixed-offset timezone ``hours`` east of UTC."""

    seconds = round(hours * 3600)
    if seconds == 0:
        return _dt.UTC
    return _dt.timezone(_dt.timedelta(seconds=seconds))


def parse_offset(text: str) -> _dt.tzinfo:
    """Parse ``Z``, ``UTC``, ``+09:00`` or ``-0530`` into a fixed offset."""

    cleaned = text.strip()
    if cleaned.upper() in {"Z", "UTC"}:
        return _dt.UTC
    sign = 1
    if cleaned[:1] in {"+", "-"}:
        sign = -1 if cleaned[0] == "-" else 1
        cleaned = cleaned[1:]
    digits = cleaned.replace(":", "")
    if not digits.isdigit() or len(digits) not in {2, 4}:
        raise InvalidTimestamp(f"Unparseable UTC offset: {text!r}", value=text)
    try:
        hours = int(digits[:2])
        minutes = int(digits[2:] or "0")
    except ValueError as exc:
        raise InvalidTimestamp(f"Unparseable UTC offset: {text!r}", value=text) from exc
    if hours > 23 or minutes > 59:
        raise InvalidTimestamp(f"UTC offset out of range: {text!r}", value=text)
    return _dt.timezone(sign * _dt.timedelta(hours=hours, minutes=minutes))


def local_mean_time(moment: _dt.datetime, longitude: float) -> _dt.datetime:
    """Return ``moment`` expressed in local mean time for ``longitude``.

    Each degree east shifts the clock by four minutes; the result carries a
    fixed offset so it stays comparable with the input instant.
    """

    if not math.isfinite(longitude) or not -180.0 <= longitude <= 180.0:
        raise ValueError(f"Longitude must lie within [-180, 180]: {longitude!r}")
    offset = _dt.timezone(_dt.timedelta(seconds=round(longitude * 240.0)))
    return moment.astimezone(offset)


def civil_date(moment: _dt.datetime, tz: _dt.tzinfo | None = None) -> _dt.date:
    """Return the civil date of ``moment`` in ``tz`` (its own offset by default)."""

    if tz is not None:
        moment = moment.astimezone(tz)
    return moment.date()
