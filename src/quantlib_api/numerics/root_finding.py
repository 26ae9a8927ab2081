from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from quantlib_api.exceptions import (
    ConfigurationError,
    ConvergenceError,
    InvalidBracketError,
)
from quantlib_api.typing import ScalarFn

logger = logging.getLogger(__name__)

_EPS = 2.220446049250313e-16

# ---------------------------
# Results
# ---------------------------


@dataclass(frozen=True, slots=True)
class RootResult:
    root: float
    converged: bool
    iterations: int
    method: str
    f_at_root: float
    bracket: tuple[float, float] | None = None


class RootMethod(str, Enum):
    BRENT = "brent"
    BISECTION = "bisection"
    NEWTON = "newton"
    BRACKETED_NEWTON = "bracketed_newton"


def _evaluate(Fn: ScalarFn, x: float) -> float:
    fx = float(Fn(x))
    if not math.isfinite(fx):
        raise ConvergenceError(f"Function evaluated to a non-finite value at x={x!r}")
    return fx


def _numerical_derivative(Fn: ScalarFn, x: float) -> float:
    eps = 1e-5 * max(1.0, abs(x))
    return (_evaluate(Fn, x + eps) - _evaluate(Fn, x - eps)) / (2.0 * eps)


def _x_tol(tol_rel: float, x: float) -> float:
    return tol_rel * max(1.0, abs(x))


def _check_bracket(
    Fn: ScalarFn, lo: float, hi: float, tol_abs: float, method: str
) -> tuple[float, float, float, float, RootResult | None]:
    """Order the bracket, evaluate its ends and short-circuit on an endpoint root."""
    a, b = (lo, hi) if lo <= hi else (hi, lo)
    if not (math.isfinite(a) and math.isfinite(b)):
        raise InvalidBracketError("Bracket ends must be finite.")

    fa = _evaluate(Fn, a)
    if abs(fa) < tol_abs:
        return a, b, fa, fa, RootResult(a, True, 0, method, fa, (a, b))

    fb = _evaluate(Fn, b)
    if abs(fb) < tol_abs:
        return a, b, fa, fb, RootResult(b, True, 0, method, fb, (a, b))

    if fa * fb > 0:
        raise InvalidBracketError(
            f"Root not bracketed: Fn({a:.12g})={fa:.6g} and Fn({b:.12g})={fb:.6g} "
            "must have opposite signs."
        )
    return a, b, fa, fb, None


# ---------------------------
# Bracketing methods
# ---------------------------


def bisection_method(
    Fn: ScalarFn,
    lo: float,
    hi: float,
    *,
    tol_abs: float = 1e-10,
    tol_rel: float = 1e-12,
    max_iter: int = 10_000,
    **ignored_kwargs: Any,
) -> RootResult:
    a, b, fa, fb, early = _check_bracket(Fn, lo, hi, tol_abs, "bisection")
    if early is not None:
        return early

    for it in range(1, max_iter + 1):
        mid = a + (b - a) / 2.0
        fmid = _evaluate(Fn, mid)

        if abs(fmid) < tol_abs:
            return RootResult(mid, True, it, "bisection", fmid, (a, b))

        # Maintain the bracket
        if fa * fmid < 0:
            b, fb = mid, fmid
        else:
            a, fa = mid, fmid

        if (b - a) <= _x_tol(tol_rel, mid):
            root = a + (b - a) / 2.0
            return RootResult(root, True, it, "bisection", _evaluate(Fn, root), (a, b))

    raise ConvergenceError(f"Bisection did not converge within max_iter={max_iter}.")


def brent_method(
    Fn: ScalarFn,
    lo: float,
    hi: float,
    *,
    tol_abs: float = 1e-10,
    tol_rel: float = 1e-12,
    max_iter: int = 100,
    **ignored_kwargs: Any,
) -> RootResult:
    """Brent's method: inverse quadratic interpolation / secant with bisection fallback.

    Convergence is guaranteed inside ``[lo, hi]`` given a sign change, and the
    returned root never leaves the original bracket.

    Raises
    ------
    InvalidBracketError
        If ``Fn(lo)`` and ``Fn(hi)`` have the same sign.
    ConvergenceError
        If neither ``|Fn(x)| < tol_abs`` nor a bracket narrower than
        ``tol_rel * max(1, |x|)`` is reached within ``max_iter`` iterations.
    """
    a, b, fa, fb, early = _check_bracket(Fn, lo, hi, tol_abs, "brent")
    if early is not None:
        return early

    c, fc = b, fb
    d = e = b - a

    for it in range(1, max_iter + 1):
        if (fb > 0.0 and fc > 0.0) or (fb < 0.0 and fc < 0.0):
            c, fc = a, fa
            d = e = b - a

        # b is always the best estimate
        if abs(fc) < abs(fb):
            a, b, c = b, c, b
            fa, fb, fc = fb, fc, fb

        tol1 = 2.0 * _EPS * abs(b) + 0.5 * _x_tol(tol_rel, b)
        xm = 0.5 * (c - b)

        if abs(fb) < tol_abs or abs(xm) <= tol1:
            bracket = (min(b, c), max(b, c))
            logger.debug("brent converged to %.15g in %d iterations", b, it)
            return RootResult(b, True, it, "brent", fb, bracket)

        if abs(e) >= tol1 and abs(fa) > abs(fb):
            s = fb / fa
            if a == c:
                # secant
                p = 2.0 * xm * s
                q = 1.0 - s
            else:
                # inverse quadratic interpolation
                q = fa / fc
                r = fb / fc
                p = s * (2.0 * xm * q * (q - r) - (b - a) * (r - 1.0))
                q = (q - 1.0) * (r - 1.0) * (s - 1.0)
            if p > 0.0:
                q = -q
            p = abs(p)
            min1 = 3.0 * xm * q - abs(tol1 * q)
            min2 = abs(e * q)
            if 2.0 * p < min(min1, min2):
                e = d
                d = p / q
            else:
                d = xm
                e = d
        else:
            d = xm
            e = d

        a, fa = b, fb
        if abs(d) > tol1:
            b += d
        else:
            b += math.copysign(tol1, xm)
        fb = _evaluate(Fn, b)

    raise ConvergenceError(f"Brent did not converge within max_iter={max_iter}.")


# ---------------------------
# Newton family
# ---------------------------


def safeguarded_newton(
    Fn: ScalarFn,
    x0: float,
    *,
    dFn: ScalarFn | None = None,
    bracket: tuple[float, float] | None = None,
    tol_abs: float = 1e-10,
    tol_rel: float = 1e-12,
    max_iter: int = 100,
    **ignored_kwargs: Any,
) -> RootResult:
    """Newton-Raphson with bisection and damping safeguards.

    The last known sign-change bracket is tracked (seeded from ``bracket`` when
    given, otherwise discovered from iterates). A Newton step that leaves that
    bracket, or that fails to reduce ``|Fn|``, is replaced by bisection of the
    bracket. Before any bracket is known, such a step is halved until the
    residual drops.

    If ``dFn`` is None a central finite difference is used.
    """
    method = "bracketed_newton" if bracket is not None else "newton"

    a: float | None = None
    b: float | None = None
    fa = 0.0
    if bracket is not None:
        a, b = sorted(bracket)
        fa = _evaluate(Fn, a)

    x = float(x0)
    if a is not None and b is not None and not (a < x < b):
        x = 0.5 * (a + b)
    fx = _evaluate(Fn, x)

    for it in range(1, max_iter + 1):
        if abs(fx) < tol_abs:
            return RootResult(x, True, it - 1, method, fx, _pair(a, b))

        # Shrink the known bracket around x
        if a is not None and b is not None:
            if fa * fx < 0:
                b = x
            else:
                a, fa = x, fx
            if (b - a) <= _x_tol(tol_rel, x):
                root = 0.5 * (a + b)
                return RootResult(root, True, it, method, _evaluate(Fn, root), (a, b))

        dfx = dFn(x) if dFn is not None else _numerical_derivative(Fn, x)
        newton_ok = math.isfinite(dfx) and abs(dfx) >= 1e-14

        if a is not None and b is not None:
            x_new = x - fx / dfx if newton_ok else 0.5 * (a + b)
            if not (a < x_new < b):
                x_new = 0.5 * (a + b)
            f_new = _evaluate(Fn, x_new)
            if abs(f_new) >= abs(fx) and x_new != 0.5 * (a + b):
                # Newton step did not reduce the residual: bisect instead
                if fa * f_new < 0:
                    b = x_new
                else:
                    a, fa = x_new, f_new
                x_new = 0.5 * (a + b)
                f_new = _evaluate(Fn, x_new)
        else:
            if not newton_ok:
                raise ConvergenceError(
                    f"Newton failed: derivative vanished at x={x:.12g}."
                )
            step = -fx / dfx
            x_new = x + step
            f_new = _evaluate_or_inf(Fn, x_new)
            halvings = 0
            while not math.isfinite(f_new) or (
                abs(f_new) >= abs(fx) and f_new * fx > 0
            ):
                halvings += 1
                if halvings > 60:
                    raise ConvergenceError(
                        f"Newton failed: no residual reduction from x={x:.12g}."
                    )
                step *= 0.5
                x_new = x + step
                f_new = _evaluate_or_inf(Fn, x_new)
            if f_new * fx < 0:
                # A sign change gives a bracket for the remaining iterations
                a, b = (x, x_new) if x < x_new else (x_new, x)
                fa = fx if a == x else f_new
                method = "bracketed_newton"

        if abs(x_new - x) <= _x_tol(tol_rel, x_new):
            return RootResult(x_new, True, it, method, f_new, _pair(a, b))

        x, fx = x_new, f_new

    raise ConvergenceError(f"Newton did not converge within max_iter={max_iter}.")


def bracketed_newton(
    Fn: ScalarFn,
    lo: float,
    hi: float,
    *,
    x0: float | None = None,
    dFn: ScalarFn | None = None,
    tol_abs: float = 1e-10,
    tol_rel: float = 1e-12,
    max_iter: int = 100,
    **ignored_kwargs: Any,
) -> RootResult:
    a, b, _, _, early = _check_bracket(Fn, lo, hi, tol_abs, "bracketed_newton")
    if early is not None:
        return early
    start = x0 if (x0 is not None and a < x0 < b) else 0.5 * (a + b)
    return safeguarded_newton(
        Fn,
        start,
        dFn=dFn,
        bracket=(a, b),
        tol_abs=tol_abs,
        tol_rel=tol_rel,
        max_iter=max_iter,
    )


def _evaluate_or_inf(Fn: ScalarFn, x: float) -> float:
    fx = float(Fn(x))
    return fx if math.isfinite(fx) else math.inf


def _pair(a: float | None, b: float | None) -> tuple[float, float] | None:
    if a is None or b is None:
        return None
    return (a, b)


# ---------------------------
# Bracket search
# ---------------------------


def ensure_bracket(
    Fn: ScalarFn,
    lo: float,
    hi: float,
    *,
    hi_max: float = 10.0,
    grow: float = 2.0,
    max_steps: int = 60,
) -> tuple[float, float]:
    """
    Expand `hi` geometrically until Fn(lo) and Fn(hi) have opposite signs (or hi hits hi_max).

    Returns (lo, hi) such that Fn(lo) == 0 or Fn(hi) == 0 or Fn(lo)*Fn(hi) < 0.
    """
    if hi <= lo:
        raise InvalidBracketError("Require lo < hi.")
    if grow <= 1.0:
        raise InvalidBracketError("Require grow > 1.0.")
    hi_max = max(hi_max, hi)

    f_lo = _evaluate(Fn, lo)
    f_hi = _evaluate(Fn, hi)
    if f_lo == 0.0 or f_hi == 0.0 or f_lo * f_hi < 0:
        return lo, hi

    steps = 0
    while hi < hi_max and steps < max_steps:
        hi = min(hi * grow if hi > 0 else hi + grow, hi_max)
        f_hi = _evaluate(Fn, hi)
        steps += 1
        if f_hi == 0.0 or f_lo * f_hi < 0:
            return lo, hi

    sign = "positive" if f_lo > 0 else "negative"
    raise InvalidBracketError(
        f"No bracket found: Fn(lo) and Fn(hi) stayed {sign} while expanding hi "
        f"up to {hi:.6g}."
    )


# ---------------------------
# Dispatch
# ---------------------------

_ROOT_METHODS: dict[RootMethod, Callable[..., RootResult]] = {
    RootMethod.BRENT: brent_method,
    RootMethod.BISECTION: bisection_method,
    RootMethod.BRACKETED_NEWTON: bracketed_newton,
}


def get_root_method(method: RootMethod | str) -> Callable[..., RootResult]:
    """Return the bracketing solver registered under ``method``."""
    key = RootMethod(method)
    if key == RootMethod.NEWTON:
        raise ConfigurationError(
            "Newton takes a single guess; call safeguarded_newton directly."
        )
    return _ROOT_METHODS[key]


def find_root(
    Fn: ScalarFn,
    bracket_or_guess: tuple[float, float] | float,
    *,
    tol_abs: float = 1e-10,
    tol_rel: float = 1e-12,
    max_iter: int = 100,
    dFn: ScalarFn | None = None,
    method: RootMethod | str | None = None,
) -> RootResult:
    """Solve ``Fn(x) = 0``.

    Parameters
    ----------
    Fn : Callable[[float], float]
        Scalar function; typically a closure over curve or model context.
    bracket_or_guess : tuple[float, float] or float
        A ``(lo, hi)`` bracket with a sign change selects Brent's method (or
        ``method`` if given). A single float selects safeguarded Newton.
    tol_abs : float
        Stop once ``|Fn(x)| < tol_abs``.
    tol_rel : float
        Stop once the bracket (or Newton step) is narrower than
        ``tol_rel * max(1, |x|)``.
    max_iter : int
        Iteration budget.
    dFn : Callable[[float], float] or None
        Analytic derivative for Newton modes; numerical otherwise.
    method : RootMethod or None
        Override the bracketed solver. ``newton`` with a bracket runs
        bracketed Newton, so iterates never leave ``(lo, hi)``.

    Raises
    ------
    InvalidBracketError
        The bracket has no sign change.
    ConvergenceError
        Budget exhausted, derivative vanished, or a non-finite evaluation.
    """
    if max_iter <= 0:
        raise ConfigurationError("max_iter must be > 0")

    if isinstance(bracket_or_guess, tuple):
        lo, hi = (float(v) for v in bracket_or_guess)
        if method is None:
            chosen = RootMethod.BRACKETED_NEWTON if dFn is not None else RootMethod.BRENT
        else:
            chosen = RootMethod(method)
        if chosen == RootMethod.NEWTON:
            # Newton on a bracket is kept inside it
            chosen = RootMethod.BRACKETED_NEWTON
        return get_root_method(chosen)(
            Fn, lo, hi, dFn=dFn, tol_abs=tol_abs, tol_rel=tol_rel, max_iter=max_iter
        )

    if method is not None and RootMethod(method) != RootMethod.NEWTON:
        raise ConfigurationError(
            f"{RootMethod(method).value} requires a (lo, hi) bracket"
        )
    return safeguarded_newton(
        Fn,
        float(bracket_or_guess),
        dFn=dFn,
        tol_abs=tol_abs,
        tol_rel=tol_rel,
        max_iter=max_iter,
    )
