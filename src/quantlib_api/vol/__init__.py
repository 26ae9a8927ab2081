"""Implied volatility and option-quote tooling."""

from .forward_curve import ForwardCurve, implied_forward_curve
from .implied_vol import (
    ImpliedVolResult,
    implied_volatility,
    implied_volatility_result,
    price_bounds,
)
from .quote_filter import filter_arbitrage
from .quotes import OptionQuote
from .surface import ImpliedVolPoint, implied_vol_points, points_to_frame

__all__ = [
    "ImpliedVolResult",
    "implied_volatility",
    "implied_volatility_result",
    "price_bounds",
    "OptionQuote",
    "ForwardCurve",
    "implied_forward_curve",
    "filter_arbitrage",
    "ImpliedVolPoint",
    "implied_vol_points",
    "points_to_frame",
]
