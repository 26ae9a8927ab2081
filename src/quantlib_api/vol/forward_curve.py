from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from ..curves.curve import Curve
from ..exceptions import ConfigurationError
from ..market.parity import parity_forward
from ..numerics.interpolation import InterpolationMethod, Interpolator
from ..types import OptionType
from .quotes import OptionQuote, group_by_maturity

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, eq=False)
class ForwardCurve:
    """Forward prices of an underlying by maturity.

    Interpolates with a natural cubic spline through three or more maturities,
    linearly through two, and is constant for one. Held flat outside the
    quoted maturities.
    """

    maturities: NDArray[np.float64]
    forwards: NDArray[np.float64]
    _interp: Interpolator | None = field(init=False, repr=False)

    def __post_init__(self) -> None:
        t = np.asarray(self.maturities, dtype=np.float64)
        f = np.asarray(self.forwards, dtype=np.float64)
        if t.ndim != 1 or t.shape != f.shape or t.size == 0:
            raise ConfigurationError(
                "maturities and forwards must be non-empty 1D arrays of equal length"
            )
        if not (np.all(np.isfinite(f)) and np.all(f > 0.0)):
            raise ConfigurationError("forward prices must be positive and finite")
        object.__setattr__(self, "maturities", t)
        object.__setattr__(self, "forwards", f)

        interp = None
        if t.size >= 2:
            method = (
                InterpolationMethod.CUBIC_SPLINE
                if t.size >= 3
                else InterpolationMethod.LINEAR
            )
            interp = Interpolator(t, f, method=method)
        object.__setattr__(self, "_interp", interp)

    def forward(self, t: float) -> float:
        if self._interp is None:
            return float(self.forwards[0])
        return float(self._interp(float(t)))

    def __call__(self, t: float) -> float:
        return self.forward(t)


def _average_parity_forward(
    quotes: list[OptionQuote], df: float
) -> float | None:
    calls = {q.strike: q.price for q in quotes if q.option_type == OptionType.CALL}
    puts = {q.strike: q.price for q in quotes if q.option_type == OptionType.PUT}
    forwards = [parity_forward(calls[K], puts[K], K, df) for K in calls if K in puts]
    if not forwards:
        return None
    return float(np.mean(forwards))


def implied_forward_curve(
    option_quotes: Iterable[OptionQuote], curve: Curve
) -> ForwardCurve:
    """Forward curve implied by put-call parity.

    For each maturity, every strike quoted with both a call and a put yields a
    forward ``K + (C - P) / df(T)``; the forwards are averaged per maturity.
    Maturities without a call/put pair are skipped.

    Raises
    ------
    ConfigurationError
        If no maturity has a call/put pair.
    """
    maturities: list[float] = []
    forwards: list[float] = []
    for T, quotes in group_by_maturity(option_quotes).items():
        F = _average_parity_forward(quotes, curve.discount_factor(T))
        if F is None:
            logger.warning("No call/put pair at maturity %g; skipped", T)
            continue
        logger.debug("Parity forward at T=%g: %.10g", T, F)
        maturities.append(T)
        forwards.append(F)

    if not maturities:
        raise ConfigurationError("no maturity has both a call and a put quote")
    return ForwardCurve(np.array(maturities), np.array(forwards))
