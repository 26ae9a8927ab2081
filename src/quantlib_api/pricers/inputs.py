from __future__ import annotations

import math
from dataclasses import dataclass

from quantlib_api.curves.curve import Curve
from quantlib_api.exceptions import InvalidParameterError, UnsupportedExerciseStyleError
from quantlib_api.types import ExerciseStyle, ModelParameters, OptionSpec


def avg_rate_from_df(df: float, tau: float) -> float:
    """Flat continuously-compounded rate reproducing ``df`` over ``tau``."""
    return -math.log(df) / tau


@dataclass(frozen=True, slots=True)
class PricingInputs:
    """Validated, curve-resolved inputs for a single pricing call.

    Attributes
    ----------
    spec : OptionSpec
        Option contract.
    sigma : float
        Volatility (annualized), > 0.
    q : float
        Continuous dividend yield.
    df : float
        Curve discount factor at ``spec.maturity``.

    Notes
    -----
    ``r`` is the flat rate equivalent to ``df`` so that formulas written in
    terms of ``exp(-r*T)`` discount exactly as the curve does.
    """

    spec: OptionSpec
    sigma: float
    q: float
    df: float

    @property
    def S(self) -> float:
        return self.spec.spot

    @property
    def K(self) -> float:
        return self.spec.strike

    @property
    def T(self) -> float:
        return self.spec.maturity

    @property
    def tau(self) -> float:
        return self.spec.maturity

    @property
    def r(self) -> float:
        return avg_rate_from_df(self.df, self.tau)


def resolve_inputs(
    spec: OptionSpec, params: ModelParameters, curve: Curve | None = None
) -> PricingInputs:
    """Validate model inputs and read the discount factor off the curve.

    Raises
    ------
    InvalidParameterError
        Non-positive or non-finite volatility or maturity, non-finite dividend
        yield, or no curve supplied.
    """
    sigma = float(params.volatility)
    if not (math.isfinite(sigma) and sigma > 0.0):
        raise InvalidParameterError(f"volatility must be positive, got {sigma!r}")
    if not (math.isfinite(spec.maturity) and spec.maturity > 0.0):
        raise InvalidParameterError(
            f"time to maturity must be positive, got {spec.maturity!r}"
        )
    if not math.isfinite(params.dividend_yield):
        raise InvalidParameterError("dividend_yield must be finite")

    use_curve = curve if curve is not None else params.curve
    if use_curve is None:
        raise InvalidParameterError("a discount curve is required for pricing")

    return PricingInputs(
        spec=spec,
        sigma=sigma,
        q=float(params.dividend_yield),
        df=use_curve.discount_factor(spec.maturity),
    )


def require_european(spec: OptionSpec, model_name: str) -> None:
    if spec.exercise != ExerciseStyle.EUROPEAN:
        raise UnsupportedExerciseStyleError(
            f"{model_name} prices European exercise only; "
            f"use the lattice model for {spec.exercise.value} options"
        )
