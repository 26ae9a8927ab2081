import math

import numpy as np
import pytest

from quantlib_api import OptionType, flat_curve
from quantlib_api.exceptions import ConfigurationError
from quantlib_api.models.bs import call_price, put_price
from quantlib_api.vol import ForwardCurve, OptionQuote, implied_forward_curve


def bs_quotes(S, r, q, sigma, maturities, strikes, kinds=(OptionType.CALL, OptionType.PUT)):
    out = []
    for T in maturities:
        for K in strikes:
            for kind in kinds:
                fn = call_price if kind == OptionType.CALL else put_price
                price = fn(spot=S, strike=K, r=r, q=q, sigma=sigma, tau=T)
                out.append(OptionQuote(kind, K, T, price))
    return out


def test_parity_forward_matches_cost_of_carry():
    S, r, q = 100.0, 0.04, 0.015
    quotes = bs_quotes(S, r, q, 0.25, [0.25, 0.5, 1.0, 2.0], [90.0, 100.0, 110.0])
    fc = implied_forward_curve(quotes, flat_curve(r))

    np.testing.assert_allclose(fc.maturities, [0.25, 0.5, 1.0, 2.0])
    for T in [0.25, 0.5, 1.0, 2.0]:
        assert fc(T) == pytest.approx(S * math.exp((r - q) * T), rel=1e-10)


def test_three_maturities_use_a_spline():
    # two-month and one-quarter expiries on a 1% curve
    days = 365.0
    quotes = [
        OptionQuote("call", 4.0, 14 / days, 0.73),
        OptionQuote("put", 4.0, 14 / days, 0.05),
        OptionQuote("call", 4.0, 42 / days, 0.64),
        OptionQuote("put", 4.0, 42 / days, 0.08),
        OptionQuote("call", 4.0, 77 / days, 0.53),
        OptionQuote("put", 4.0, 77 / days, 0.40),
    ]
    fc = implied_forward_curve(quotes, flat_curve(0.01))
    assert fc(0.1) == pytest.approx(4.598, abs=1e-3)


def test_two_maturities_interpolate_linearly():
    fc = ForwardCurve(np.array([1.0, 2.0]), np.array([100.0, 104.0]))
    assert fc(1.5) == pytest.approx(102.0)
    assert fc(5.0) == 104.0  # flat beyond the last maturity


def test_single_maturity_is_constant():
    fc = ForwardCurve(np.array([1.0]), np.array([101.0]))
    assert fc(0.2) == 101.0
    assert fc(3.0) == 101.0


def test_unpaired_strikes_and_maturities_are_skipped():
    quotes = [
        OptionQuote(OptionType.CALL, 100.0, 0.5, 6.0),
        OptionQuote(OptionType.PUT, 100.0, 0.5, 4.0),
        OptionQuote(OptionType.CALL, 110.0, 0.5, 2.0),  # no put partner
        OptionQuote(OptionType.CALL, 100.0, 1.0, 9.0),  # maturity without a pair
    ]
    fc = implied_forward_curve(quotes, flat_curve(0.0))
    np.testing.assert_allclose(fc.maturities, [0.5])
    assert fc(0.5) == pytest.approx(102.0)


def test_no_pairs_raises():
    quotes = [OptionQuote(OptionType.CALL, 100.0, 0.5, 6.0)]
    with pytest.raises(ConfigurationError):
        implied_forward_curve(quotes, flat_curve(0.0))


@pytest.mark.parametrize(
    "kwargs",
    [dict(strike=0.0), dict(maturity=-1.0), dict(price=-0.5)],
)
def test_invalid_option_quote_raises(kwargs):
    base = dict(option_type=OptionType.CALL, strike=100.0, maturity=1.0, price=5.0)
    with pytest.raises(ConfigurationError):
        OptionQuote(**{**base, **kwargs})
