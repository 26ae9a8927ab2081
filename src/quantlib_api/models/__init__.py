"""Model formulas on flat inputs (rates, yields, volatilities).

Curve-aware entrypoints live in :mod:`quantlib_api.pricers`.
"""

from .binomial_crr import BinomialModel, LatticeValuation, backward_induction
from .black76 import black76_greeks, black76_price
from .bs import bsm_greeks, call_greeks, call_price, put_greeks, put_price

__all__ = [
    "BinomialModel",
    "LatticeValuation",
    "backward_induction",
    "black76_greeks",
    "black76_price",
    "bsm_greeks",
    "call_greeks",
    "call_price",
    "put_greeks",
    "put_price",
]
