"""Shared fixtures for the SajuEngine test-suite."""

from __future__ import annotations

import datetime as dt
import math

import pytest

from sajuengine.chinese import lunar as lunar_module
from sajuengine.config.settings import Settings, default_settings, set_settings
from sajuengine.ephemeris import solar_terms as solar_terms_module
from sajuengine.ephemeris.solar_terms import SolarTermCalculator, SolarTermTable


def mean_sun_longitude(jd_ut: float) -> float:
    """Low-precision solar longitude (mean longitude plus equation of centre)."""

    days = jd_ut - 2451545.0
    mean_longitude = 280.460 + 0.9856474 * days
    anomaly = math.radians(357.528 + 0.9856003 * days)
    longitude = mean_longitude + 1.915 * math.sin(anomaly) + 0.020 * math.sin(2 * anomaly)
    return longitude % 360.0


class StaticSolarTermCalculator(SolarTermCalculator):
    """Serve pinned tables for selected years and the analytic model elsewhere."""

    def __init__(self, tables: dict[int, SolarTermTable], settings: Settings | None = None) -> None:
        super().__init__(settings or default_settings(), longitude_fn=mean_sun_longitude)
        self._tables = dict(tables)

    def _compute_table(self, year: int) -> SolarTermTable:
        if year in self._tables:
            return self._tables[year]
        return super()._compute_table(year)


def shifted_table(table: SolarTermTable, li_chun: dt.datetime) -> SolarTermTable:
    """Return ``table`` moved so that its 立春 falls exactly on ``li_chun``."""

    delta = li_chun - table.li_chun.moment
    return SolarTermTable.from_moments(table.year, [term.moment + delta for term in table])


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path, monkeypatch):
    monkeypatch.setenv("SAJUENGINE_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.setattr(solar_terms_module, "_DEFAULT", None)
    monkeypatch.setattr(lunar_module, "_DEFAULT", None)
    set_settings(None)
    yield
    set_settings(None)


@pytest.fixture
def settings() -> Settings:
    return default_settings()


@pytest.fixture
def analytic_terms(settings) -> SolarTermCalculator:
    return SolarTermCalculator(settings, longitude_fn=mean_sun_longitude)


@pytest.fixture
def li_chun_2023_terms(settings) -> StaticSolarTermCalculator:
    """Analytic tables with 立春 2023 pinned to 2023-02-04T10:42:00Z."""

    base = SolarTermCalculator(settings, longitude_fn=mean_sun_longitude)
    pinned = shifted_table(
        base.solar_terms_for_year(2023),
        dt.datetime(2023, 2, 4, 10, 42, tzinfo=dt.UTC),
    )
    return StaticSolarTermCalculator({2023: pinned}, settings)


@pytest.fixture
def default_calculator(monkeypatch, analytic_terms) -> SolarTermCalculator:
    """Install the analytic calculator as the process-wide default."""

    monkeypatch.setattr(solar_terms_module, "_DEFAULT", analytic_terms)
    return analytic_terms


@pytest.fixture
def swiss_terms(settings) -> SolarTermCalculator:
    pytest.importorskip("swisseph")
    return SolarTermCalculator(settings)
