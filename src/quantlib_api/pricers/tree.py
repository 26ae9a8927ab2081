from __future__ import annotations

from typing import Literal

from ..config import LatticeConfig
from ..exceptions import UnsupportedExerciseStyleError
from ..models.binomial_crr import (
    BinomialModel,
    LatticeValuation,
    backward_induction,
    price_european_closed_form,
)
from ..types import ExerciseStyle, Greeks, PricingModel, PricingResult
from ..vanilla import make_vanilla_payoff
from .inputs import PricingInputs


def _model_from_inputs(p: PricingInputs, n_steps: int) -> BinomialModel:
    return BinomialModel.from_crr(
        S0=p.S,
        r=p.r,
        q=p.q,
        sigma=p.sigma,
        T=p.tau,
        n_steps=int(n_steps),
    )


def binom_valuation(
    p: PricingInputs,
    n_steps: int,
    *,
    american: bool = False,
) -> LatticeValuation:
    """Backward induction on a CRR tree built from ``p``."""
    model = _model_from_inputs(p, n_steps)
    payoff = make_vanilla_payoff(p.spec.option_type, K=p.K)
    return backward_induction(model, payoff, american=american)


def binom_price(
    p: PricingInputs,
    n_steps: int,
    *,
    american: bool = False,
    method: Literal["tree", "closed_form"] = "tree",
) -> float:
    """
    Binomial (CRR) price using ``p.spec.option_type``.

    method:
      - "tree": backward induction (European or American)
      - "closed_form": European-only binomial sum (no early exercise)
    """
    if method == "closed_form":
        if american:
            raise UnsupportedExerciseStyleError(
                "the binomial sum has no early exercise; use method='tree'"
            )
        model = _model_from_inputs(p, n_steps)
        payoff = make_vanilla_payoff(p.spec.option_type, K=p.K)
        return price_european_closed_form(model, payoff)
    return binom_valuation(p, n_steps, american=american).price


def binom_result(p: PricingInputs, config: LatticeConfig) -> PricingResult:
    """Lattice price with delta, gamma and theta read off the tree.

    Vega and rho are not produced by the lattice and are left as None.
    """
    val = binom_valuation(
        p, config.n_steps, american=p.spec.exercise == ExerciseStyle.AMERICAN
    )
    return PricingResult(
        price=val.price,
        model=PricingModel.LATTICE,
        greeks=Greeks(delta=val.delta, gamma=val.gamma, theta=val.theta),
    )
