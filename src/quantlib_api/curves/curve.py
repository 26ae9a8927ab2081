from __future__ import annotations

import json
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from quantlib_api.exceptions import (
    ConfigurationError,
    InvalidParameterError,
    OutOfRangeError,
)
from quantlib_api.numerics.interpolation import (
    Extrapolation,
    InterpolationMethod,
    Interpolator,
)

CURVE_FORMAT = "quantlib_api.curve"
CURVE_VERSION = 1


@dataclass(frozen=True, slots=True, eq=False)
class Curve:
    """Immutable discount curve over continuously compounded zero rates.

    The curve is defined by pivots ``(maturity, discount factor)`` with
    strictly increasing maturities in years; ``df(0) == 1`` is implied and not
    stored. Between 0 and the first pivot the zero rate is flat at the first
    pivot's rate.

    What gets interpolated depends on ``method``:

    - ``LOG_LINEAR``: log discount factors (piecewise flat forwards).
    - ``LINEAR``, ``CUBIC_SPLINE``, ``MONOTONE_CUBIC``: zero rates.

    A cubic spline curve with fewer than three interpolation nodes evaluates
    linearly, which is what a natural spline through two nodes is.

    Beyond the last pivot the last zero rate is held flat, or
    :class:`OutOfRangeError` is raised under ``Extrapolation.STRICT``.

    Discount factors that increase with maturity are recorded in
    :attr:`arbitrage_flags`; they are never corrected.

    Parameters
    ----------
    maturities : array-like
        Pivot maturities in years, strictly increasing, all > 0.
    discount_factors : array-like
        Pivot discount factors, strictly positive.
    method : InterpolationMethod, default LOG_LINEAR
    extrapolation : Extrapolation, default FLAT
    valuation_date : date or None
        Date the maturities are measured from.
    name : str
        Free-form label.
    """

    maturities: NDArray[np.float64]
    discount_factors: NDArray[np.float64]
    method: InterpolationMethod = InterpolationMethod.LOG_LINEAR
    extrapolation: Extrapolation = Extrapolation.FLAT
    valuation_date: date | None = None
    name: str = ""
    _interp: Interpolator = field(init=False, repr=False)
    _flags: tuple[float, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        t = np.array(self.maturities, dtype=np.float64)
        df = np.array(self.discount_factors, dtype=np.float64)
        method = InterpolationMethod(self.method)

        if t.ndim != 1 or t.shape != df.shape:
            raise ConfigurationError("maturities and discount_factors must be 1-D and equal length")
        if t.size == 0:
            raise ConfigurationError("a curve needs at least one pivot")
        if not (np.all(np.isfinite(t)) and np.all(np.isfinite(df))):
            raise ConfigurationError("pivots must be finite")
        if t[0] <= 0.0 or np.any(np.diff(t) <= 0.0):
            raise ConfigurationError("pivot maturities must be > 0 and strictly increasing")
        if np.any(df <= 0.0):
            raise ConfigurationError("discount factors must be strictly positive")

        t.setflags(write=False)
        df.setflags(write=False)
        object.__setattr__(self, "maturities", t)
        object.__setattr__(self, "discount_factors", df)
        object.__setattr__(self, "method", method)
        object.__setattr__(self, "extrapolation", Extrapolation(self.extrapolation))
        object.__setattr__(self, "_interp", self._build_interpolator(t, df, method))

        prev = np.concatenate(([1.0], df[:-1]))
        object.__setattr__(self, "_flags", tuple(float(x) for x in t[df > prev]))

    @staticmethod
    def _build_interpolator(
        t: NDArray[np.float64], df: NDArray[np.float64], method: InterpolationMethod
    ) -> Interpolator:
        x = np.concatenate(([0.0], t))
        if method == InterpolationMethod.LOG_LINEAR:
            return Interpolator(x, np.concatenate(([1.0], df)), method)

        z = -np.log(df) / t
        y = np.concatenate(([z[0]], z))
        if method == InterpolationMethod.CUBIC_SPLINE and x.size < 3:
            method = InterpolationMethod.LINEAR
        return Interpolator(x, y, method)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_discount_factors(
        cls,
        maturities: Sequence[float],
        discount_factors: Sequence[float],
        method: InterpolationMethod = InterpolationMethod.LOG_LINEAR,
        **kwargs: Any,
    ) -> Curve:
        return cls(
            maturities=np.asarray(maturities, dtype=np.float64),
            discount_factors=np.asarray(discount_factors, dtype=np.float64),
            method=method,
            **kwargs,
        )

    @classmethod
    def from_zero_rates(
        cls,
        maturities: Sequence[float],
        zero_rates: Sequence[float],
        method: InterpolationMethod = InterpolationMethod.LOG_LINEAR,
        **kwargs: Any,
    ) -> Curve:
        t = np.asarray(maturities, dtype=np.float64)
        z = np.asarray(zero_rates, dtype=np.float64)
        if t.shape != z.shape:
            raise ConfigurationError("maturities and zero_rates must have equal length")
        return cls(maturities=t, discount_factors=np.exp(-z * t), method=method, **kwargs)

    def with_pivot(self, maturity: float, discount_factor: float) -> Curve:
        """Return a new curve with one extra pivot beyond the last maturity."""
        return Curve(
            maturities=np.append(self.maturities, maturity),
            discount_factors=np.append(self.discount_factors, discount_factor),
            method=self.method,
            extrapolation=self.extrapolation,
            valuation_date=self.valuation_date,
            name=self.name,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def max_maturity(self) -> float:
        return float(self.maturities[-1])

    @property
    def pivots(self) -> tuple[tuple[float, float], ...]:
        return tuple(
            (float(t), float(d))
            for t, d in zip(self.maturities, self.discount_factors, strict=True)
        )

    @property
    def arbitrage_flags(self) -> tuple[float, ...]:
        """Pivot maturities whose discount factor exceeds the previous one."""
        return self._flags

    def discount_factor(self, t: float) -> float:
        t = float(t)
        if not math.isfinite(t) or t < 0.0:
            raise InvalidParameterError(f"maturity must be >= 0, got {t!r}")
        if t == 0.0:
            return 1.0
        t0 = float(self.maturities[0])
        df0 = float(self.discount_factors[0])
        if t <= t0:
            # flat zero rate on (0, t0] for every method
            return df0 if t == t0 else math.exp(math.log(df0) * t / t0)
        if t > self.max_maturity:
            if self.extrapolation == Extrapolation.STRICT:
                raise OutOfRangeError(
                    f"t={t:.12g} beyond last pivot {self.max_maturity:.12g}"
                )
            z_last = -math.log(float(self.discount_factors[-1])) / self.max_maturity
            return math.exp(-z_last * t)
        if self.method == InterpolationMethod.LOG_LINEAR:
            return float(self._interp(t))
        return math.exp(-float(self._interp(t)) * t)

    def __call__(self, t: float) -> float:
        return self.discount_factor(t)

    def df(self, t: float) -> float:
        return self.discount_factor(t)

    def zero_rate(self, t: float) -> float:
        """Continuously compounded zero rate; at t=0 the short end limit."""
        t = float(t)
        if t == 0.0:
            return -math.log(float(self.discount_factors[0])) / float(self.maturities[0])
        return -math.log(self.discount_factor(t)) / t

    def forward_rate(self, t1: float, t2: float) -> float:
        """Continuously compounded forward rate over ``[t1, t2]``."""
        if t2 <= t1:
            raise InvalidParameterError("forward_rate needs t2 > t1")
        return math.log(self.discount_factor(t1) / self.discount_factor(t2)) / (t2 - t1)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": CURVE_FORMAT,
            "version": CURVE_VERSION,
            "name": self.name,
            "valuation_date": (
                None if self.valuation_date is None else self.valuation_date.isoformat()
            ),
            "maturity_unit": "years",
            "compounding": "continuous",
            "interpolation": self.method.value,
            "extrapolation": self.extrapolation.value,
            "pivots": [list(p) for p in self.pivots],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Curve:
        if data.get("format") != CURVE_FORMAT:
            raise ConfigurationError(f"not a curve record: {data.get('format')!r}")
        if data.get("version") != CURVE_VERSION:
            raise ConfigurationError(f"unsupported curve version {data.get('version')!r}")
        if data.get("maturity_unit", "years") != "years":
            raise ConfigurationError("curve maturities must be in years")

        pivots = data["pivots"]
        raw_date = data.get("valuation_date")
        return cls(
            maturities=np.asarray([p[0] for p in pivots], dtype=np.float64),
            discount_factors=np.asarray([p[1] for p in pivots], dtype=np.float64),
            method=InterpolationMethod(data["interpolation"]),
            extrapolation=Extrapolation(data.get("extrapolation", "flat")),
            valuation_date=None if raw_date is None else date.fromisoformat(raw_date),
            name=data.get("name", ""),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> Curve:
        return cls.from_dict(json.loads(text))

    def to_frame(self) -> pd.DataFrame:
        """Pivot table with maturity, discount factor and zero rate columns."""
        t = self.maturities
        return pd.DataFrame(
            {
                "maturity": t,
                "discount_factor": self.discount_factors,
                "zero_rate": -np.log(self.discount_factors) / t,
            }
        )


def flat_curve(
    rate: float,
    *,
    valuation_date: date | None = None,
    max_maturity: float = 100.0,
    method: InterpolationMethod = InterpolationMethod.LOG_LINEAR,
) -> Curve:
    """Curve with a constant continuously compounded zero rate."""
    return Curve.from_zero_rates(
        [max_maturity],
        [float(rate)],
        method=method,
        valuation_date=valuation_date,
        name=f"flat {rate:.6g}",
    )
