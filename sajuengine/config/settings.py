"""Configuration models and helpers for SajuEngine settings."""

from __future__ import annotations

import logging
import os
import threading
from copy import deepcopy
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

LOG = logging.getLogger(__name__)

CURRENT_SETTINGS_SCHEMA_VERSION = 1

# -------------------- Settings Schema --------------------


class EphemerisCfg(BaseModel):
    """Ephemeris source configuration."""

    path: Optional[str] = None
    prefer_moshier: bool = False


class SupportedRangeCfg(BaseModel):
    """Gregorian years the ephemeris is trusted to serve."""

    min_year: int = 1800
    max_year: int = 2200

    @model_validator(mode="after")
    def _check_order(self) -> "SupportedRangeCfg":
        if self.min_year > self.max_year:
            raise ValueError("min_year must not exceed max_year")
        return self

    def contains(self, year: int) -> bool:
        return self.min_year <= year <= self.max_year


class SolarTermCfg(BaseModel):
    """Root-finding parameters for solar-term crossings."""

    tolerance_seconds: float = 1.0
    max_iter: int = Field(64, ge=8, le=512)
    cache_size: int = Field(256, ge=1)

    @field_validator("tolerance_seconds", mode="before")
    @classmethod
    def _cap_tolerance(cls, value: float) -> float:
        numeric = float(value)
        return max(0.001, min(60.0, numeric))


class LunarCfg(BaseModel):
    """Civil reference for new-moon dates (China Standard Time by default)."""

    utc_offset_hours: float = 8.0
    cache_size: int = Field(64, ge=1)

    @field_validator("utc_offset_hours", mode="before")
    @classmethod
    def _cap_offset(cls, value: float) -> float:
        numeric = float(value)
        return max(-12.0, min(14.0, numeric))


class CalculationCfg(BaseModel):
    """Defaults applied when callers do not pass explicit calculation options."""

    month_pillar_convention: Literal["solarTerm", "lunarMonth"] = "solarTerm"
    boundary_tolerance_seconds: float = Field(0.0, ge=0.0)
    late_zi_next_day: bool = False


class LoggingCfg(BaseModel):
    level: str = "INFO"


class Settings(BaseModel):
    """Top-level settings model persisted on disk."""

    schema_version: int = Field(
        default=CURRENT_SETTINGS_SCHEMA_VERSION,
        ge=1,
        description="Version marker for persisted configuration payloads.",
    )
    ephemeris: EphemerisCfg = Field(default_factory=EphemerisCfg)
    supported_range: SupportedRangeCfg = Field(default_factory=SupportedRangeCfg)
    solar_terms: SolarTermCfg = Field(default_factory=SolarTermCfg)
    lunar: LunarCfg = Field(default_factory=LunarCfg)
    calculation: CalculationCfg = Field(default_factory=CalculationCfg)
    logging: LoggingCfg = Field(default_factory=LoggingCfg)


# -------------------- I/O Helpers --------------------

CONFIG_FILENAME = "config.yaml"


def get_config_home() -> Path:
    """Return the directory where settings should be stored."""

    return Path(os.environ.get("SAJUENGINE_HOME", str(Path.home() / ".sajuengine")))


def config_path() -> Path:
    """Return the full path to the configuration file."""

    return get_config_home() / CONFIG_FILENAME


def default_settings() -> Settings:
    """Instantiate a Settings object populated with defaults."""

    return Settings()


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    """Persist the given settings to disk as YAML."""

    target_path = Path(path) if path else config_path()
    target_path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump()
    with target_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=True)
    return target_path


def _upgrade_settings_payload(data: dict[str, object]) -> dict[str, object]:
    upgraded = deepcopy(data)
    try:
        version = int(upgraded.get("schema_version", 1))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        version = 1
    upgraded["schema_version"] = max(version, CURRENT_SETTINGS_SCHEMA_VERSION)
    return upgraded


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from disk, creating defaults if missing."""

    source_path = Path(path) if path else config_path()
    if not source_path.exists():
        settings = default_settings()
        save_settings(settings, source_path)
        LOG.info("Wrote default settings to %s", source_path)
        return settings
    with source_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raw = {}
    return Settings(**_upgrade_settings_payload(raw))


_ACTIVE: Settings | None = None
_ACTIVE_LOCK = threading.Lock()


def get_settings() -> Settings:
    """Return the process-wide settings.

    The on-disk file is read when present; otherwise defaults are used and
    nothing is written.
    """

    global _ACTIVE
    with _ACTIVE_LOCK:
        if _ACTIVE is None:
            path = config_path()
            _ACTIVE = load_settings(path) if path.exists() else default_settings()
        return _ACTIVE


def set_settings(settings: Settings | None) -> None:
    """Replace the process-wide settings (``None`` reloads on next access)."""

    global _ACTIVE
    with _ACTIVE_LOCK:
        _ACTIVE = settings


__all__ = [
    "CalculationCfg",
    "EphemerisCfg",
    "LoggingCfg",
    "LunarCfg",
    "Settings",
    "SolarTermCfg",
    "SupportedRangeCfg",
    "config_path",
    "default_settings",
    "get_config_home",
    "get_settings",
    "load_settings",
    "save_settings",
    "set_settings",
]
