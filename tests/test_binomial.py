import math

import pytest

from quantlib_api import (
    ExerciseStyle,
    LatticeConfig,
    OptionType,
    PricingModel,
    price_option,
)
from quantlib_api.exceptions import (
    ConfigurationError,
    InvalidParameterError,
    UnsupportedExerciseStyleError,
)
from quantlib_api.models.binomial_crr import (
    BinomialModel,
    backward_induction,
    price_european_closed_form,
)
from quantlib_api.pricers import resolve_inputs
from quantlib_api.pricers.tree import binom_price
from quantlib_api.vanilla import make_vanilla_payoff


def lattice_price(spec, params, n_steps):
    return price_option(
        spec, params, model=PricingModel.LATTICE, lattice=LatticeConfig(n_steps=n_steps)
    )


def test_binomial_converges_toward_bs_as_steps_increase(make_option):
    spec, params = make_option(S=100.0, K=105.0, r=0.04, sigma=0.22, T=1.0)
    bs = price_option(spec, params).price

    errs = [abs(lattice_price(spec, params, n).price - bs) for n in [25, 50, 100, 200, 400]]

    # not strictly monotone, but high-N should be better than low-N
    assert errs[-1] <= errs[0]
    assert errs[-1] <= 2e-2


def test_binomial_put_call_parity_approximately(make_option):
    call, params = make_option(S=100.0, K=100.0, r=0.05, sigma=0.2, T=1.0)
    put, _ = make_option(S=100.0, K=100.0, r=0.05, sigma=0.2, T=1.0, kind=OptionType.PUT)

    C = lattice_price(call, params, 400).price
    P = lattice_price(put, params, 400).price
    assert abs((C - P) - (100.0 - 100.0 * math.exp(-0.05))) <= 1e-9


def test_american_put_carries_early_exercise_premium(make_option):
    kw = dict(S=100.0, K=110.0, r=0.06, sigma=0.25, T=1.0, kind=OptionType.PUT)
    euro, params = make_option(**kw)
    amer, _ = make_option(**kw, exercise=ExerciseStyle.AMERICAN)

    p_euro = lattice_price(euro, params, 300).price
    p_amer = lattice_price(amer, params, 300).price
    assert p_amer > p_euro + 1e-3
    assert p_amer >= 10.0  # never below immediate exercise


def test_american_call_without_dividends_equals_european(make_option):
    kw = dict(S=100.0, K=95.0, r=0.03, sigma=0.3, T=0.5)
    euro, params = make_option(**kw)
    amer, _ = make_option(**kw, exercise=ExerciseStyle.AMERICAN)
    assert lattice_price(amer, params, 200).price == pytest.approx(
        lattice_price(euro, params, 200).price, abs=1e-10
    )


def test_lattice_greeks_close_to_closed_form(make_option):
    spec, params = make_option(S=100.0, K=100.0, r=0.05, sigma=0.2, T=1.0)
    bs = price_option(spec, params).greeks
    tree = lattice_price(spec, params, 500).greeks

    assert tree.delta == pytest.approx(bs.delta, abs=2e-3)
    assert tree.gamma == pytest.approx(bs.gamma, abs=1e-3)
    assert tree.theta == pytest.approx(bs.theta, abs=5e-2)
    assert tree.vega is None
    assert tree.rho is None


def test_tree_matches_binomial_sum_for_european():
    model = BinomialModel.from_crr(S0=100.0, r=0.03, q=0.01, sigma=0.2, T=1.0, n_steps=101)
    payoff = make_vanilla_payoff(OptionType.CALL, K=100.0)
    tree = backward_induction(model, payoff).price
    assert tree == pytest.approx(price_european_closed_form(model, payoff), rel=1e-12)


@pytest.mark.parametrize("n_steps", [1, 2, 3])
def test_tiny_trees(n_steps):
    model = BinomialModel.from_crr(S0=100.0, r=0.05, q=0.0, sigma=0.2, T=1.0, n_steps=n_steps)
    val = backward_induction(model, make_vanilla_payoff(OptionType.PUT, K=100.0))
    assert val.price > 0.0
    assert (val.delta is None) == (n_steps < 2)


def test_one_step_tree_by_hand():
    model = BinomialModel(S0=100.0, u=1.2, d=0.8, r=0.0, q=0.0, dt=1.0, n_steps=1)
    val = backward_induction(model, make_vanilla_payoff(OptionType.CALL, K=100.0))
    # p* = 0.5, payoffs (0, 20)
    assert val.price == pytest.approx(10.0)


def test_risk_neutral_probability_out_of_range_raises(make_option):
    # sigma*sqrt(dt) far below r*dt
    spec, params = make_option(S=100.0, K=100.0, r=0.5, sigma=0.01, T=1.0)
    with pytest.raises(InvalidParameterError):
        lattice_price(spec, params, 4)


def test_lattice_config_validation():
    with pytest.raises(ConfigurationError):
        LatticeConfig(n_steps=0)


def test_lattice_is_deterministic(make_option):
    spec, params = make_option(S=100.0, K=90.0, r=0.01, sigma=0.4, T=2.0, kind=OptionType.PUT)
    assert lattice_price(spec, params, 150) == lattice_price(spec, params, 150)


def test_binomial_sum_matches_tree_and_refuses_early_exercise(make_option):
    spec, params = make_option(S=100.0, K=95.0, r=0.03, sigma=0.25, T=0.5)
    p = resolve_inputs(spec, params)
    assert binom_price(p, 80, method="closed_form") == pytest.approx(
        binom_price(p, 80), rel=1e-12
    )
    with pytest.raises(UnsupportedExerciseStyleError):
        binom_price(p, 80, american=True, method="closed_form")
