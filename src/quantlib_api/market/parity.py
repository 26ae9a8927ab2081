from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quantlib_api.curves.curve import Curve
    from quantlib_api.types import OptionSpec


def put_call_parity_residual(
    call: float,
    put: float,
    spec: OptionSpec,
    curve: Curve,
    dividend_yield: float = 0.0,
) -> float:
    """``C - P - (S e^{-qT} - K df(T))``; zero for a parity-consistent pair."""
    T = spec.maturity
    prepaid_forward = spec.spot * math.exp(-dividend_yield * T)
    return call - put - (prepaid_forward - spec.strike * curve.discount_factor(T))


def parity_forward(call: float, put: float, strike: float, df: float) -> float:
    """Forward implied by a call/put pair: ``K + (C - P) / df``."""
    return strike + (call - put) / df
