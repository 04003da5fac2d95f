"""Configuration helpers exposed at :mod:`sajuengine.config`."""

from __future__ import annotations

from .settings import (
    CalculationCfg,
    EphemerisCfg,
    LoggingCfg,
    LunarCfg,
    Settings,
    SolarTermCfg,
    SupportedRangeCfg,
    config_path,
    default_settings,
    get_config_home,
    get_settings,
    load_settings,
    save_settings,
    set_settings,
)

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
