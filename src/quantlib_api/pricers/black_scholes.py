from __future__ import annotations

from ..models import bs as bs_model
from ..models import black76 as black76_model
from ..types import Greeks, OptionType, PricingModel, PricingResult
from .inputs import PricingInputs, require_european


# -------------------------
# BSM wrappers (scalar)
# -------------------------
def bs_greeks(p: PricingInputs) -> dict[str, float]:
    return bs_model.bsm_greeks(
        is_call=p.spec.option_type == OptionType.CALL,
        spot=p.S,
        strike=p.K,
        r=p.r,
        q=p.q,
        sigma=p.sigma,
        tau=p.tau,
    )


def bs_result(p: PricingInputs) -> PricingResult:
    """Closed-form Black-Scholes-Merton price with analytic Greeks."""
    require_european(p.spec, "closed-form model")
    g = bs_greeks(p)
    return PricingResult(
        price=g["price"],
        model=PricingModel.CLOSED_FORM,
        greeks=Greeks(
            delta=g["delta"],
            gamma=g["gamma"],
            vega=g["vega"],
            theta=g["theta"],
            rho=g["rho"],
        ),
    )


# -------------------------
# Black-76 (spec.spot is the forward)
# -------------------------
def black76_greeks(p: PricingInputs) -> dict[str, float]:
    return black76_model.black76_greeks(
        is_call=p.spec.option_type == OptionType.CALL,
        forward=p.S,
        strike=p.K,
        df=p.df,
        sigma=p.sigma,
        tau=p.tau,
    )


def black76_result(p: PricingInputs) -> PricingResult:
    require_european(p.spec, "Black-76 model")
    g = black76_greeks(p)
    return PricingResult(
        price=g["price"],
        model=PricingModel.BLACK76,
        greeks=Greeks(
            delta=g["delta"],
            gamma=g["gamma"],
            vega=g["vega"],
            theta=g["theta"],
            rho=g["rho"],
        ),
    )
