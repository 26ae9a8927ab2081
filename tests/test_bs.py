import math

import numpy as np
import pytest

from quantlib_api import (
    ExerciseStyle,
    ModelParameters,
    OptionSpec,
    OptionType,
    PricingModel,
    price_option,
    put_call_parity_residual,
)
from quantlib_api.exceptions import InvalidParameterError, UnsupportedExerciseStyleError
from quantlib_api.models.bs import call_greeks, call_price, put_greeks, put_price


def test_concrete_atm_call(make_option):
    spec, params = make_option(S=100.0, K=100.0, r=0.05, sigma=0.2, T=1.0)
    res = price_option(spec, params)
    assert res.model == PricingModel.CLOSED_FORM
    assert res.price == pytest.approx(10.45, abs=0.01)
    assert res.price == pytest.approx(10.450583572185565, abs=1e-9)


@pytest.mark.parametrize(
    "S, K, r, q, sigma, T",
    [
        (100.0, 105.0, 0.03, 0.0, 0.25, 1.2),
        (120.0, 100.0, 0.04, 0.02, 0.3, 0.75),
        (80.0, 100.0, -0.01, 0.01, 0.35, 1.4),
    ],
)
def test_put_call_parity(make_option, S, K, r, q, sigma, T):
    call_spec, params = make_option(S=S, K=K, r=r, q=q, sigma=sigma, T=T)
    put_spec, _ = make_option(S=S, K=K, r=r, q=q, sigma=sigma, T=T, kind=OptionType.PUT)

    C = price_option(call_spec, params).price
    P = price_option(put_spec, params).price

    df = params.curve.discount_factor(T)
    assert (C - P) == pytest.approx(S * math.exp(-q * T) - K * df, abs=1e-10)
    assert put_call_parity_residual(C, P, call_spec, params.curve, q) == pytest.approx(
        0.0, abs=1e-10
    )


def test_call_bounds(make_option):
    spec, params = make_option(S=120.0, K=100.0, r=0.04, sigma=0.3, T=0.75)
    C = price_option(spec, params).price
    df = math.exp(-0.04 * 0.75)
    assert max(120.0 - 100.0 * df, 0.0) - 1e-12 <= C <= 120.0 + 1e-12


def test_call_monotone_decreasing_in_strike():
    strikes = np.array([60, 80, 100, 120, 140], dtype=float)
    prices = np.array(
        [call_price(spot=100.0, strike=K, r=0.05, q=0.0, sigma=0.2, tau=1.0) for K in strikes]
    )
    assert np.all(np.diff(prices) <= 1e-10)


def test_put_monotone_increasing_in_strike():
    strikes = np.array([60, 80, 100, 120, 140], dtype=float)
    prices = np.array(
        [put_price(spot=100.0, strike=K, r=0.05, q=0.0, sigma=0.2, tau=1.0) for K in strikes]
    )
    assert np.all(np.diff(prices) >= -1e-10)


@pytest.mark.parametrize("kind", [OptionType.CALL, OptionType.PUT])
def test_greeks_match_finite_differences(kind):
    greeks = call_greeks if kind == OptionType.CALL else put_greeks
    base = dict(spot=100.0, strike=95.0, r=0.03, q=0.01, sigma=0.25, tau=0.8)
    g = greeks(**base)

    def px(**bump):
        return greeks(**{**base, **bump})["price"]

    h = 1e-4
    delta = (px(spot=100.0 + h) - px(spot=100.0 - h)) / (2 * h)
    gamma = (px(spot=100.0 + h) - 2 * g["price"] + px(spot=100.0 - h)) / h**2
    vega = (px(sigma=0.25 + h) - px(sigma=0.25 - h)) / (2 * h)
    rho = (px(r=0.03 + h) - px(r=0.03 - h)) / (2 * h)
    # theta is dV/dt = -dV/dtau
    theta = -(px(tau=0.8 + h) - px(tau=0.8 - h)) / (2 * h)

    assert g["delta"] == pytest.approx(delta, rel=1e-6)
    assert g["gamma"] == pytest.approx(gamma, rel=1e-3)
    assert g["vega"] == pytest.approx(vega, rel=1e-6)
    assert g["rho"] == pytest.approx(rho, rel=1e-6)
    assert g["theta"] == pytest.approx(theta, rel=1e-5)


def test_result_carries_all_greeks(make_option):
    spec, params = make_option(S=100.0, K=100.0, r=0.05, sigma=0.2, T=1.0)
    g = price_option(spec, params).greeks
    assert g is not None
    assert g.delta == pytest.approx(0.6368306511756191, rel=1e-9)
    assert None not in g.to_dict().values()


def test_closed_form_is_deterministic(make_option):
    spec, params = make_option(S=100.0, K=110.0, r=0.02, sigma=0.3, T=2.0)
    assert price_option(spec, params) == price_option(spec, params)


@pytest.mark.parametrize("sigma", [0.0, -0.2, math.nan, math.inf])
def test_bad_volatility_raises(make_option, sigma):
    spec, params = make_option(S=100.0, K=100.0, r=0.05, sigma=sigma, T=1.0)
    with pytest.raises(InvalidParameterError):
        price_option(spec, params)


@pytest.mark.parametrize("T", [0.0, -1.0])
def test_non_positive_maturity_raises(make_option, T):
    spec, params = make_option(S=100.0, K=100.0, r=0.05, sigma=0.2, T=T)
    with pytest.raises(InvalidParameterError):
        price_option(spec, params)


@pytest.mark.parametrize("field, value", [("spot", 0.0), ("strike", -5.0)])
def test_non_positive_spot_or_strike_raises(field, value):
    kwargs = dict(spot=100.0, strike=100.0, maturity=1.0, option_type=OptionType.CALL)
    kwargs[field] = value
    with pytest.raises(InvalidParameterError):
        OptionSpec(**kwargs)


def test_missing_curve_raises():
    spec = OptionSpec(100.0, 100.0, 1.0, OptionType.CALL)
    with pytest.raises(InvalidParameterError):
        price_option(spec, ModelParameters(volatility=0.2))


def test_explicit_curve_overrides_params_curve(make_option, make_curve):
    spec, params = make_option(S=100.0, K=100.0, r=0.0, sigma=0.2, T=1.0)
    a = price_option(spec, params, make_curve(0.05)).price
    assert a == pytest.approx(10.450583572185565, abs=1e-9)


def test_american_rejected_by_closed_form(make_option):
    spec, params = make_option(
        S=100.0, K=100.0, r=0.05, sigma=0.2, T=1.0, exercise=ExerciseStyle.AMERICAN
    )
    with pytest.raises(UnsupportedExerciseStyleError):
        price_option(spec, params)
