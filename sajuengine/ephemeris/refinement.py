"""Root-finding helpers for locating ecliptic longitude crossings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Tuple

__all__ = [
    "SECONDS_PER_DAY",
    "RefineResult",
    "angle_delta",
    "bracket_root",
    "expand_bracket",
    "refine_root",
]

SECONDS_PER_DAY: float = 86_400.0


@dataclass(frozen=True, slots=True)
class RefineResult:
    """Result metadata returned by :func:`refine_root`.

    Attributes
    ----------
    t_exact_jd:
        Julian Day (UT) of the refined root.
    iterations:
        Number of iterations executed.
    achieved_tol_sec:
        Width of the final bracket expressed in seconds.
    status:
        ``"ok"`` when the tolerance was met, ``"max_iter"`` when the iteration
        cap stopped the search first.
    """

    t_exact_jd: float
    iterations: int
    achieved_tol_sec: float
    status: str

    @property
    def converged(self) -> bool:
        return self.status == "ok"


def angle_delta(longitude: float, target: float) -> float:
    """Signed difference ``longitude - target`` folded into ``[-180, 180)``."""

    return ((longitude - target + 180.0) % 360.0) - 180.0


def bracket_root(
    f: Callable[[float], float], t0_jd: float, t1_jd: float
) -> Tuple[float, float]:
    """Return a bracket ``(t_lo, t_hi)`` ensuring opposite signs.

    Raises
    ------
    ValueError
        If ``f`` evaluated at both endpoints yields the same sign and neither
        endpoint is already a root.
    """

    f0 = f(t0_jd)
    if f0 == 0.0:
        return (t0_jd, t0_jd)
    f1 = f(t1_jd)
    if f1 == 0.0:
        return (t1_jd, t1_jd)
    if f0 * f1 > 0.0:
        raise ValueError("bad_bracket: function has same sign at bracket ends")
    return (t0_jd, t1_jd)


def expand_bracket(
    f: Callable[[float], float],
    center_jd: float,
    half_widths: Tuple[float, ...],
) -> Tuple[float, float]:
    """Try successively wider windows around ``center_jd`` until one brackets a root."""

    last_error: ValueError | None = None
    for width in half_widths:
        try:
            return bracket_root(f, center_jd - width, center_jd + width)
        except ValueError as exc:
            last_error = exc
    raise ValueError(
        f"no sign change within ±{max(half_widths):g} days of JD {center_jd:.5f}"
    ) from last_error


def refine_root(
    f: Callable[[float], float],
    t_lo_jd: float,
    t_hi_jd: float,
    *,
    tol_seconds: float = 1.0,
    max_iter: int = 64,
) -> RefineResult:
    """Refine a root of ``f`` within ``[t_lo_jd, t_hi_jd]``.

    A secant step is taken whenever it stays inside the bracket, bisection
    otherwise, so the root is never lost. ``tol_seconds`` is in seconds while
    the bounds and the returned value are Julian Days. A bracket without a
    sign change raises :class:`ValueError`.
    """

    t_lo, t_hi = bracket_root(f, t_lo_jd, t_hi_jd)
    if t_lo == t_hi:
        return RefineResult(t_exact_jd=t_lo, iterations=0, achieved_tol_sec=0.0, status="ok")

    tol_days = max(tol_seconds, 0.0) / SECONDS_PER_DAY
    f_lo = f(t_lo)
    f_hi = f(t_hi)

    iterations = 0
    for iterations in range(1, max_iter + 1):
        denom = f_hi - f_lo
        if denom != 0.0:
            t_mid = t_hi - f_hi * (t_hi - t_lo) / denom
        else:
            t_mid = 0.5 * (t_lo + t_hi)
        # Secant steps that hug one end stall convergence; bisect instead.
        width = t_hi - t_lo
        if not (t_lo + 0.01 * width <= t_mid <= t_hi - 0.01 * width):
            t_mid = 0.5 * (t_lo + t_hi)
        f_mid = f(t_mid)

        if f_mid == 0.0:
            return RefineResult(
                t_exact_jd=t_mid, iterations=iterations, achieved_tol_sec=0.0, status="ok"
            )
        if f_lo * f_mid < 0.0:
            t_hi, f_hi = t_mid, f_mid
        else:
            t_lo, f_lo = t_mid, f_mid

        if abs(t_hi - t_lo) <= tol_days:
            return RefineResult(
                t_exact_jd=0.5 * (t_lo + t_hi),
                iterations=iterations,
                achieved_tol_sec=abs(t_hi - t_lo) * SECONDS_PER_DAY,
                status="ok",
            )

    return RefineResult(
        t_exact_jd=0.5 * (t_lo + t_hi),
        iterations=iterations,
        achieved_tol_sec=abs(t_hi - t_lo) * SECONDS_PER_DAY,
        status="max_iter",
    )
