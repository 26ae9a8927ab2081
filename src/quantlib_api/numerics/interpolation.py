from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from quantlib_api.exceptions import ConfigurationError, OutOfRangeError
from quantlib_api.numerics.tridiag import SymmetricTridiag, solve_tridiag
from quantlib_api.typing import ArrayLike


class InterpolationMethod(str, Enum):
    """Interpolation schemes understood by :class:`Interpolator`.

    Attributes
    ----------
    LINEAR : str
        Piecewise linear in y.
    LOG_LINEAR : str
        Piecewise linear in ``log(y)``, then exponentiated. Used for discount
        factors (piecewise flat forward rates). Requires ``y > 0``.
    CUBIC_SPLINE : str
        Natural cubic spline (second derivative zero at both ends).
    MONOTONE_CUBIC : str
        Fritsch-Carlson monotone piecewise cubic Hermite.
    """

    LINEAR = "linear"
    LOG_LINEAR = "log_linear"
    CUBIC_SPLINE = "cubic_spline"
    MONOTONE_CUBIC = "monotone_cubic"


class Extrapolation(str, Enum):
    FLAT = "flat"  # hold the end value
    STRICT = "strict"  # raise OutOfRangeError


_MIN_POINTS: dict[InterpolationMethod, int] = {
    InterpolationMethod.LINEAR: 2,
    InterpolationMethod.LOG_LINEAR: 2,
    InterpolationMethod.CUBIC_SPLINE: 3,
    InterpolationMethod.MONOTONE_CUBIC: 2,
}


def _natural_spline_second_derivatives(
    x: NDArray[np.float64], y: NDArray[np.float64]
) -> NDArray[np.float64]:
    n = x.size
    h = np.diff(x)
    m = np.zeros(n, dtype=np.float64)

    slopes = np.diff(y) / h
    rhs = 6.0 * np.diff(slopes)  # shape (n-2,)
    system = SymmetricTridiag(diag=2.0 * (h[:-1] + h[1:]), off=h[1:-1])
    m[1:-1] = solve_tridiag(system, rhs)
    return m


def _fritsch_carlson_slopes(
    x: NDArray[np.float64], y: NDArray[np.float64]
) -> NDArray[np.float64]:
    h = np.diff(x)
    delta = np.diff(y) / h  # shape (n-1,)

    d = np.empty_like(y)
    d[0] = delta[0]
    d[-1] = delta[-1]
    if y.size > 2:
        # three-point non-uniform first derivative
        h0, h1 = h[:-1], h[1:]
        d[1:-1] = (h1 * delta[:-1] + h0 * delta[1:]) / (h0 + h1)

    # Step 1: delta==0 => set both adjacent derivatives to 0
    mask_zero = delta == 0.0
    d[:-1][mask_zero] = 0.0
    d[1:][mask_zero] = 0.0

    # Sign consistency: sgn(d_i) = sgn(d_{i+1}) = sgn(delta_i)
    d[:-1] = np.where(d[:-1] * delta > 0.0, d[:-1], 0.0)
    d[1:] = np.where(d[1:] * delta > 0.0, d[1:], 0.0)

    # Step 2: scale (alpha, beta) back into the square max(alpha, beta) <= 3
    for i in range(delta.size):
        if delta[i] == 0.0:
            continue
        alpha = d[i] / delta[i]
        beta = d[i + 1] / delta[i]
        m = max(abs(alpha), abs(beta))
        if m > 3.0:
            tau = 3.0 / m
            d[i] *= tau
            d[i + 1] *= tau
    return d


@dataclass(frozen=True, slots=True, eq=False)
class Interpolator:
    """1-D interpolant over strictly increasing samples.

    Coefficients (log-values, spline second derivatives, Hermite slopes) are
    computed once on construction and reused by every query, so an instance is
    the unit to cache inside a curve.

    Parameters
    ----------
    x, y : array-like
        Sample abscissae (strictly increasing) and ordinates.
    method : InterpolationMethod
        Interpolation scheme.
    extrapolation : Extrapolation, default FLAT
        Behaviour outside ``[x[0], x[-1]]``.

    Raises
    ------
    ConfigurationError
        On malformed samples (see :meth:`__post_init__`).
    """

    x: NDArray[np.float64]
    y: NDArray[np.float64]
    method: InterpolationMethod = InterpolationMethod.LINEAR
    extrapolation: Extrapolation = Extrapolation.FLAT
    _coef: NDArray[np.float64] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        method = InterpolationMethod(self.method)
        x = np.array(self.x, dtype=np.float64)
        y = np.array(self.y, dtype=np.float64)

        if x.ndim != 1 or x.shape != y.shape:
            raise ConfigurationError("x and y must be 1-D arrays of the same length")
        if x.size < _MIN_POINTS[method]:
            raise ConfigurationError(
                f"{method.value} interpolation needs at least {_MIN_POINTS[method]} "
                f"points, got {x.size}"
            )
        if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
            raise ConfigurationError("x and y must be finite")
        if np.any(np.diff(x) <= 0.0):
            raise ConfigurationError("x must be strictly increasing")

        if method == InterpolationMethod.LOG_LINEAR:
            if np.any(y <= 0.0):
                raise ConfigurationError("log_linear interpolation needs y > 0")
            coef = np.log(y)
        elif method == InterpolationMethod.CUBIC_SPLINE:
            coef = _natural_spline_second_derivatives(x, y)
        elif method == InterpolationMethod.MONOTONE_CUBIC:
            coef = _fritsch_carlson_slopes(x, y)
        else:
            coef = y

        x.setflags(write=False)
        y.setflags(write=False)
        coef.setflags(write=False)
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)
        object.__setattr__(self, "method", method)
        object.__setattr__(self, "extrapolation", Extrapolation(self.extrapolation))
        object.__setattr__(self, "_coef", coef)

    @property
    def x_min(self) -> float:
        return float(self.x[0])

    @property
    def x_max(self) -> float:
        return float(self.x[-1])

    def __call__(self, xq: ArrayLike) -> ArrayLike:
        xq_in = np.asarray(xq, dtype=np.float64)
        xq_1d = np.atleast_1d(xq_in)

        if np.any(np.isnan(xq_1d)):
            raise ConfigurationError("query x must not be NaN")

        x, y = self.x, self.y
        left = xq_1d < x[0]
        right = xq_1d > x[-1]
        if self.extrapolation == Extrapolation.STRICT and np.any(left | right):
            bad = xq_1d[left | right]
            raise OutOfRangeError(
                f"x={bad[0]:.12g} outside sample range [{x[0]:.12g}, {x[-1]:.12g}]"
            )

        out = np.empty_like(xq_1d, dtype=np.float64)
        at_or_right = xq_1d >= x[-1]
        out[left] = y[0]
        out[at_or_right] = y[-1]

        mid = ~(left | at_or_right)
        if np.any(mid):
            out[mid] = self._evaluate_inside(xq_1d[mid])

        # restore original shape / scalar-ness
        if xq_in.ndim == 0:
            return float(out[0])
        return out.reshape(xq_in.shape)

    def _evaluate_inside(self, xm: NDArray[np.float64]) -> NDArray[np.float64]:
        x, y, c = self.x, self.y, self._coef

        idx = np.searchsorted(x, xm, side="right") - 1
        idx = np.clip(idx, 0, x.size - 2)

        x0 = x[idx]
        x1 = x[idx + 1]
        h = x1 - x0
        t = (xm - x0) / h

        if self.method == InterpolationMethod.LINEAR:
            return y[idx] + t * (y[idx + 1] - y[idx])

        if self.method == InterpolationMethod.LOG_LINEAR:
            # exact at the nodes, exp(log(y)) may differ in the last ulp
            out = np.exp(c[idx] + t * (c[idx + 1] - c[idx]))
            return np.where(t == 0.0, y[idx], out)

        if self.method == InterpolationMethod.CUBIC_SPLINE:
            a = 1.0 - t
            return (
                a * y[idx]
                + t * y[idx + 1]
                + ((a**3 - a) * c[idx] + (t**3 - t) * c[idx + 1]) * (h * h) / 6.0
            )

        # monotone cubic Hermite
        h00 = 2 * t**3 - 3 * t**2 + 1
        h10 = t**3 - 2 * t**2 + t
        h01 = -2 * t**3 + 3 * t**2
        h11 = t**3 - t**2
        return h00 * y[idx] + h10 * h * c[idx] + h01 * y[idx + 1] + h11 * h * c[idx + 1]


def interpolate(
    points: Iterable[tuple[float, float]],
    method: InterpolationMethod | str,
    x: float,
    *,
    extrapolation: Extrapolation | str = Extrapolation.FLAT,
) -> float:
    """Interpolate a single value from ``(x, y)`` pairs.

    Raises
    ------
    ConfigurationError
        If the points are not strictly increasing in x or are too few for the method.
    OutOfRangeError
        If ``x`` is outside the sample range and ``extrapolation`` is STRICT.
    """
    pairs = [(float(px), float(py)) for px, py in points]
    if not pairs:
        raise ConfigurationError("no points to interpolate")
    xs, ys = zip(*pairs, strict=True)
    interp = Interpolator(
        x=np.asarray(xs),
        y=np.asarray(ys),
        method=InterpolationMethod(method),
        extrapolation=Extrapolation(extrapolation),
    )
    return float(interp(float(x)))
