import json

import pytest

from quantlib_api import Greeks, PricingModel, PricingResult, price_option
from quantlib_api.config import MonteCarloConfig
from quantlib_api.exceptions import ConfigurationError


def test_closed_form_result_survives_json(make_option):
    spec, params = make_option(S=100.0, K=95.0, r=0.03, sigma=0.25, T=0.5)
    res = price_option(spec, params)

    back = PricingResult.from_dict(json.loads(json.dumps(res.to_dict())))
    assert back == res


def test_monte_carlo_result_keeps_standard_error(make_option):
    spec, params = make_option(S=100.0, K=100.0, r=0.03, sigma=0.25, T=0.5)
    res = price_option(
        spec, params, model="monte_carlo", mc=MonteCarloConfig(n_paths=2_000, seed=7)
    )
    data = res.to_dict()
    assert data["model"] == "monte_carlo"
    assert data["greeks"] is None
    assert PricingResult.from_dict(data).std_error == res.std_error


def test_partial_greeks_round_trip():
    res = PricingResult(
        price=4.2,
        model=PricingModel.LATTICE,
        greeks=Greeks(delta=0.5, gamma=0.01, theta=-3.0),
    )
    back = PricingResult.from_dict(res.to_dict())
    assert back.greeks.vega is None
    assert back.greeks.rho is None
    assert back == res


def test_unknown_format_rejected():
    data = PricingResult(price=1.0, model=PricingModel.CLOSED_FORM).to_dict()
    data["format"] = "something_else"
    with pytest.raises(ConfigurationError):
        PricingResult.from_dict(data)


def test_unknown_version_rejected():
    data = PricingResult(price=1.0, model=PricingModel.CLOSED_FORM).to_dict()
    data["version"] = 99
    with pytest.raises(ConfigurationError):
        PricingResult.from_dict(data)
