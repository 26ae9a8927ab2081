"""Curve-aware pricing entrypoints."""

from .api import price_option
from .bond import BondPrice, price_bond
from .inputs import PricingInputs, resolve_inputs

__all__ = [
    "price_option",
    "PricingInputs",
    "resolve_inputs",
    "BondPrice",
    "price_bond",
]
