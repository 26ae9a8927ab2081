"""Discount curves and their bootstrapping from market quotes."""

from .bootstrap import build_curve
from .curve import Curve, flat_curve
from .instruments import (
    deposit_rate,
    fixed_leg_schedule,
    future_price,
    implied_quote,
    swap_par_rate,
)

__all__ = [
    "Curve",
    "flat_curve",
    "build_curve",
    "implied_quote",
    "deposit_rate",
    "future_price",
    "swap_par_rate",
    "fixed_leg_schedule",
]
