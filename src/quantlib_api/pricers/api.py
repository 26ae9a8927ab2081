from __future__ import annotations

import logging

from ..config import LatticeConfig, MonteCarloConfig
from ..curves.curve import Curve
from ..types import ModelParameters, OptionSpec, PricingModel, PricingResult
from .black_scholes import black76_result, bs_result
from .inputs import resolve_inputs
from .mc import mc_result
from .tree import binom_result

logger = logging.getLogger(__name__)


def price_option(
    spec: OptionSpec,
    params: ModelParameters,
    curve: Curve | None = None,
    model: PricingModel = PricingModel.CLOSED_FORM,
    *,
    lattice: LatticeConfig = LatticeConfig(),
    mc: MonteCarloConfig = MonteCarloConfig(),
) -> PricingResult:
    """Price a vanilla option and its Greeks.

    Parameters
    ----------
    spec : OptionSpec
        Contract to price.
    params : ModelParameters
        Volatility, dividend yield and (optionally) the discount curve.
    curve : Curve or None, default None
        Discount curve; falls back to ``params.curve``.
    model : PricingModel, default CLOSED_FORM
        Pricing model. Closed form, Black-76 and Monte Carlo price European
        exercise only; the lattice prices both styles.
    lattice : LatticeConfig
        Tree depth for ``PricingModel.LATTICE``.
    mc : MonteCarloConfig
        Path count, seed and antithetic switch for ``PricingModel.MONTE_CARLO``.

    Returns
    -------
    PricingResult

    Raises
    ------
    InvalidParameterError
        Non-positive volatility or maturity, or no curve available.
    UnsupportedExerciseStyleError
        American exercise with a European-only model.
    """
    p = resolve_inputs(spec, params, curve)
    model = PricingModel(model)

    if model == PricingModel.CLOSED_FORM:
        result = bs_result(p)
    elif model == PricingModel.BLACK76:
        result = black76_result(p)
    elif model == PricingModel.LATTICE:
        result = binom_result(p, lattice)
    else:
        result = mc_result(p, mc)

    logger.debug(
        "%s %s K=%g T=%g -> %.10g",
        model.value,
        spec.option_type.value,
        spec.strike,
        spec.maturity,
        result.price,
    )
    return result
