"""Lazy access to the Swiss Ephemeris bindings.

``pyswisseph`` is imported on first use so that importing :mod:`sajuengine`
never requires the compiled extension. The data path is applied once per
process; without a configured path the built-in Moshier theory is used.
"""

from __future__ import annotations

import importlib
import logging
import os
import threading
from typing import Any

__all__ = ["swe", "configure_ephemeris", "calc_flags"]

LOG = logging.getLogger(__name__)

_swe_mod: Any | None = None
_ephe_path: str | None = None
_configured = False
_lock = threading.Lock()


def _load_swe() -> Any:
    global _swe_mod
    if _swe_mod is None:
        try:
            _swe_mod = importlib.import_module("swisseph")
        except Exception as exc:  # pragma: no cover - import errors depend on env
            raise RuntimeError(
                "Swiss Ephemeris not available. Install pyswisseph (package: 'pyswisseph') "
                "and optionally set SE_EPHE_PATH to your ephemeris data directory."
            ) from exc
    return _swe_mod


class _SweProxy:
    """Proxy object exposing Swiss Ephemeris attributes lazily."""

    def __call__(self) -> Any:
        return _load_swe()

    def __getattr__(self, item: str) -> Any:
        return getattr(_load_swe(), item)


swe = _SweProxy()


def configure_ephemeris(path: str | None = None, *, prefer_moshier: bool = False) -> str | None:
    """Select the ephemeris data directory used for subsequent calculations.

    ``path`` falls back to ``SE_EPHE_PATH``. Returns the active path, or
    ``None`` when the Moshier theory is in use.
    """

    global _ephe_path, _configured
    resolved = None if prefer_moshier else (path or os.environ.get("SE_EPHE_PATH") or None)
    with _lock:
        if resolved:
            swe().set_ephe_path(resolved)
            LOG.info("Swiss Ephemeris data path set to %s", resolved)
        else:
            LOG.debug("Using Moshier analytical ephemeris")
        _ephe_path = resolved
        _configured = True
    return resolved


def calc_flags() -> int:
    """Return the ``calc_ut`` flags for the configured ephemeris source."""

    if not _configured:
        configure_ephemeris()
    module = swe()
    return module.FLG_SWIEPH if _ephe_path else module.FLG_MOSEPH

