"""Primary Typer application for the SajuEngine CLI."""

from __future__ import annotations

import json
from datetime import date, datetime, tzinfo
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import typer
from pydantic import ValidationError

from sajuengine.boot import configure_logging
from sajuengine.chinese import (
    CalculationOptions,
    PillarCalculator,
    SajuProfileBuilder,
    get_lunar_converter,
)
from sajuengine.config import get_settings
from sajuengine.core.time import parse_offset
from sajuengine.errors import InvalidTimestamp, SajuError
from sajuengine.ephemeris import get_solar_term_calculator

app = typer.Typer(help="SajuEngine command line interface.", no_args_is_help=True)


class MonthConvention(str, Enum):
    solarTerm = "solarTerm"
    lunarMonth = "lunarMonth"


@app.callback()
def _root(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (defaults to LOG_LEVEL or the settings file)."
    ),
) -> None:
    configure_logging(level=log_level, fallback=get_settings().logging.level)


def _resolve_zone(tz_name: str) -> tzinfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        pass
    try:
        return parse_offset(tz_name)
    except InvalidTimestamp as exc:
        raise typer.BadParameter(f"Unknown timezone or offset: {tz_name}") from exc


def _resolve_datetime(moment: str, tz_name: Optional[str]) -> datetime | str:
    """Attach ``--tz`` to naive input; aware input is passed through unchanged."""

    if not tz_name:
        return moment
    text = moment.strip()
    try:
        dt = datetime.fromisoformat(text[:-1] + "+00:00" if text.endswith("Z") else text)
    except ValueError as exc:
        raise typer.BadParameter("Use ISO-8601 formatted datetimes (YYYY-MM-DDTHH:MM)") from exc
    zone = _resolve_zone(tz_name)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=zone)
    return dt


def _parse_date(value: str, label: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter(f"{label} must be an ISO date (YYYY-MM-DD)") from exc


def _fail(exc: SajuError) -> typer.Exit:
    typer.secho(f"{type(exc).__name__}: {exc}", fg=typer.colors.RED, err=True)
    return typer.Exit(1)


def _echo_json(payload: object) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


@app.command("profile")
def cli_profile(
    timestamp: str = typer.Argument(
        ..., metavar="TIMESTAMP", help="ISO-8601 datetime with offset, or naive with --tz."
    ),
    tz_name: Optional[str] = typer.Option(
        None,
        "--tz",
        help="IANA timezone or UTC offset for a naive TIMESTAMP; aware input keeps its offset.",
    ),
    convention: MonthConvention = typer.Option(
        MonthConvention.solarTerm, "--convention", help="Month pillar convention."
    ),
    longitude: Optional[float] = typer.Option(
        None, "--longitude", help="Longitude in degrees east for local mean time."
    ),
    late_zi: bool = typer.Option(
        False, "--late-zi-next-day", help="Count 23:00-24:00 toward the next day pillar."
    ),
    tolerance: float = typer.Option(
        0.0, "--boundary-tolerance", help="Reject moments this many seconds from a Jie term."
    ),
    include_lunar: bool = typer.Option(
        True, "--lunar/--no-lunar", help="Resolve the lunisolar date alongside the pillars."
    ),
    json_output: bool = typer.Option(False, "--json", help="Emit the full profile as JSON."),
) -> None:
    """Compute the Four Pillars profile for TIMESTAMP."""

    try:
        options = CalculationOptions(
            month_pillar_convention=convention.value,
            longitude=longitude,
            late_zi_next_day=late_zi,
            boundary_tolerance_seconds=tolerance,
        )
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    try:
        builder = SajuProfileBuilder(include_lunar_date=include_lunar)
        profile = builder.build(_resolve_datetime(timestamp, tz_name), options)
    except SajuError as exc:
        raise _fail(exc) from exc

    if json_output:
        _echo_json(profile.to_dict())
        return

    rel = profile.relations
    for name, pillar in profile.four_pillars.items():
        hidden = "".join(stem.hanzi for stem in pillar.hidden_stems)
        spirit = rel.twelve_spirits[name]
        typer.echo(
            f"{name.title():<5}: {pillar.label()}  {rel.ten_gods[name].hanzi}/"
            f"{rel.branch_ten_gods[name].hanzi}  [{hidden}]  {rel.twelve_stages[name]}"
            + (f"  {spirit.value}" if spirit is not None else "")
        )
    typer.echo(
        f"Day master: {rel.day_master.hanzi} ({rel.main_element.value}, {rel.yin_yang.value})"
        f"  secondary: {rel.secondary_element.value}"
    )
    if profile.solar_term is not None:
        typer.echo(f"Solar term: {profile.solar_term.name} ({profile.solar_term.english})")
    if profile.lunar_date is not None:
        typer.echo(f"Lunar date: {profile.lunar_date.label()}")


@app.command("terms")
def cli_terms(
    year: int = typer.Argument(..., help="Year whose 立春 opens the table."),
    tz_name: Optional[str] = typer.Option(None, "--tz", help="Display moments in this zone."),
    json_output: bool = typer.Option(False, "--json", help="Emit the table as JSON."),
) -> None:
    """List the 24 solar terms from 立春 of YEAR to 大寒 of YEAR + 1."""

    try:
        table = get_solar_term_calculator().solar_terms_for_year(year)
    except SajuError as exc:
        raise _fail(exc) from exc

    if json_output:
        _echo_json(table.to_dict())
        return
    zone = _resolve_zone(tz_name) if tz_name else None
    for term in table:
        moment = term.moment.astimezone(zone) if zone else term.moment
        kind = "節" if term.is_jie else "氣"
        typer.echo(f"{term.ordinal:>2} {kind} {term.name}  {moment.isoformat()}  {term.english}")


@app.command("lunar")
def cli_lunar(
    day: str = typer.Argument(..., metavar="DATE", help="Gregorian date (YYYY-MM-DD)."),
    json_output: bool = typer.Option(False, "--json", help="Emit the lunar date as JSON."),
) -> None:
    """Convert a Gregorian DATE to the Chinese lunisolar calendar."""

    target = _parse_date(day, "DATE")
    try:
        result = get_lunar_converter().to_lunar(target)
    except SajuError as exc:
        raise _fail(exc) from exc
    if json_output:
        _echo_json(result.to_dict())
    else:
        typer.echo(result.label())


@app.command("calendar")
def cli_calendar(
    start: str = typer.Argument(..., help="First date (YYYY-MM-DD)."),
    end: str = typer.Argument(..., help="Last date, inclusive (YYYY-MM-DD)."),
    tz_name: str = typer.Option("UTC", "--tz", help="Zone whose civil days are listed."),
    json_output: bool = typer.Option(False, "--json", help="Emit the rows as JSON."),
) -> None:
    """Print year, month and day pillars for each civil day in START..END."""

    first = _parse_date(start, "START")
    last = _parse_date(end, "END")
    if last < first:
        raise typer.BadParameter("END must not precede START")
    try:
        days = PillarCalculator().daily_calendar(first, last, _resolve_zone(tz_name))
    except SajuError as exc:
        raise _fail(exc) from exc

    if json_output:
        _echo_json([row.to_dict() for row in days])
        return
    for row in days:
        terms = " ".join(term.name for term in row.solar_terms)
        typer.echo(
            f"{row.date.isoformat()}  {row.year.label()} {row.month.label()} {row.day.label()}"
            + (f"  {terms}" if terms else "")
        )


__all__ = ["app"]
