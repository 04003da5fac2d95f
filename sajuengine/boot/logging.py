"""Logging helpers for SajuEngine entry points."""

from __future__ import annotations

import logging
import os
from typing import Any

__all__ = ["configure_logging"]

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _coerce_level(value: str | int | None, default: int = logging.INFO) -> int:
    """Return a logging level derived from ``value``.

    Accepts standard level names (case insensitive) or a numeric level.
    Anything else resolves to ``default``.
    """

    if value is None:
        return default

    if isinstance(value, int):
        return value

    candidate = value.strip()
    if not candidate:
        return default

    if candidate.isdigit():
        return int(candidate)

    resolved = logging.getLevelName(candidate.upper())
    if isinstance(resolved, int):
        return resolved

    return default


def configure_logging(
    *, level: str | int | None = None, fallback: str | int | None = None, **kwargs: Any
) -> int:
    """Configure ``logging`` for the CLI and embedding applications.

    ``level`` wins over the ``LOG_LEVEL`` environment variable, which wins
    over ``fallback`` (typically the level from the settings file). Extra
    ``kwargs`` are forwarded to :func:`logging.basicConfig`.

    Returns the effective level applied to the root logger.
    """

    requested = level if level is not None else os.environ.get("LOG_LEVEL")
    effective_level = _coerce_level(requested, _coerce_level(fallback))

    logging.basicConfig(
        level=effective_level,
        format=kwargs.pop("format", _DEFAULT_FORMAT),
        datefmt=kwargs.pop("datefmt", _DEFAULT_DATEFMT),
        force=kwargs.pop("force", True),
        **kwargs,
    )

    return effective_level
