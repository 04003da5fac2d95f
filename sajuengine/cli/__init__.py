"""SajuEngine command line interface package."""

from __future__ import annotations

from typing import Sequence

from .app import app


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return its exit code."""

    try:
        app(args=list(argv) if argv is not None else None, prog_name="sajuengine")
    except SystemExit as exc:
        code = exc.code
        return code if isinstance(code, int) else (0 if code is None else 1)
    return 0


__all__ = ["app", "main"]
