# src/quantlib_api/numerics/__init__.py
"""
Numerical building blocks (advanced API).

Top-level package `quantlib_api` exposes the everyday pricing API.
This subpackage exposes the reusable root finders and interpolators.
"""

from .interpolation import Extrapolation, InterpolationMethod, Interpolator, interpolate
from .root_finding import (
    RootMethod,
    RootResult,
    bisection_method,
    bracketed_newton,
    brent_method,
    ensure_bracket,
    find_root,
    get_root_method,
    safeguarded_newton,
)

__all__ = [
    # Root finding
    "RootMethod",
    "RootResult",
    "find_root",
    "brent_method",
    "bisection_method",
    "bracketed_newton",
    "safeguarded_newton",
    "ensure_bracket",
    "get_root_method",
    # Interpolation
    "InterpolationMethod",
    "Extrapolation",
    "Interpolator",
    "interpolate",
]
