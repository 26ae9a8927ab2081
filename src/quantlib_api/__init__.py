"""
quantlib_api

Curve bootstrapping, option pricing and implied volatility.

The everyday entrypoints are exposed at the top level, so you can write, for
example:

    from quantlib_api import build_curve, price_option, implied_volatility
"""

from .config import (
    CurveBuildConfig,
    ImpliedVolConfig,
    LatticeConfig,
    MonteCarloConfig,
    NumericsConfig,
)
from .curves import Curve, build_curve, flat_curve
from .exceptions import (
    ArbitrageViolationError,
    ConfigurationError,
    ConvergenceError,
    CurveBuildError,
    DuplicateMaturityError,
    InvalidBracketError,
    InvalidParameterError,
    OutOfRangeError,
    QuantLibError,
    RootFindingError,
    UnsupportedExerciseStyleError,
)
from .market import put_call_parity_residual, year_fraction
from .numerics import Extrapolation, InterpolationMethod, RootResult, find_root, interpolate
from .pricers import price_bond, price_option
from .types import (
    ExerciseStyle,
    Greeks,
    InstrumentType,
    ModelParameters,
    OptionSpec,
    OptionType,
    PricingModel,
    PricingResult,
    Quote,
)
from .vol import implied_volatility, implied_volatility_result

__all__ = [
    # Types
    "Quote",
    "InstrumentType",
    "OptionSpec",
    "OptionType",
    "ExerciseStyle",
    "ModelParameters",
    "PricingModel",
    "PricingResult",
    "Greeks",
    "Curve",
    "InterpolationMethod",
    "Extrapolation",
    "RootResult",
    # Config
    "NumericsConfig",
    "CurveBuildConfig",
    "LatticeConfig",
    "MonteCarloConfig",
    "ImpliedVolConfig",
    # Entrypoints
    "build_curve",
    "flat_curve",
    "price_option",
    "price_bond",
    "implied_volatility",
    "implied_volatility_result",
    "interpolate",
    "find_root",
    "put_call_parity_residual",
    "year_fraction",
    # Errors
    "QuantLibError",
    "ConfigurationError",
    "OutOfRangeError",
    "RootFindingError",
    "InvalidBracketError",
    "ConvergenceError",
    "InvalidParameterError",
    "CurveBuildError",
    "DuplicateMaturityError",
    "UnsupportedExerciseStyleError",
    "ArbitrageViolationError",
]
