from __future__ import annotations

import math

from scipy.stats import norm

from quantlib_api.exceptions import InvalidParameterError


def validate_scalar_inputs(
    *, spot: float, strike: float, sigma: float, tau: float
) -> None:
    """Reject inputs for which the lognormal formulas are undefined."""
    for name, value in (
        ("spot", spot),
        ("strike", strike),
        ("volatility", sigma),
        ("time to maturity", tau),
    ):
        if not (math.isfinite(value) and value > 0.0):
            raise InvalidParameterError(f"{name} must be positive, got {value!r}")


def d1_d2_from_spot(
    *, spot: float, strike: float, r: float, q: float, sigma: float, tau: float
) -> tuple[float, float]:
    validate_scalar_inputs(spot=spot, strike=strike, sigma=sigma, tau=tau)
    vol_sqrt_t = sigma * math.sqrt(tau)
    d1 = (math.log(spot / strike) + (r - q + 0.5 * sigma * sigma) * tau) / vol_sqrt_t
    return float(d1), float(d1 - vol_sqrt_t)


def bsm_greeks(
    *,
    is_call: bool,
    spot: float,
    strike: float,
    r: float,
    q: float,
    sigma: float,
    tau: float,
) -> dict[str, float]:
    """
    Black-Scholes-Merton price and analytic Greeks with dividend yield ``q``.

    Written with the sign ``w = +1`` for calls and ``-1`` for puts:
    ``V = w (S e^{-q tau} N(w d1) - K e^{-r tau} N(w d2))``.

    theta is ∂V/∂t per year of calendar time with expiry fixed; vega and rho
    are per unit change in sigma and r.
    """
    d1, d2 = d1_d2_from_spot(spot=spot, strike=strike, r=r, q=q, sigma=sigma, tau=tau)
    w = 1.0 if is_call else -1.0
    sqrt_tau = math.sqrt(tau)
    fwd_leg = spot * math.exp(-q * tau) * float(norm.cdf(w * d1))
    strike_leg = strike * math.exp(-r * tau) * float(norm.cdf(w * d2))
    # e^{-q tau} phi(d1), shared by gamma, vega and theta
    dq_phi = math.exp(-q * tau) * float(norm.pdf(d1))

    return {
        "price": w * (fwd_leg - strike_leg),
        "delta": w * fwd_leg / spot,
        "gamma": dq_phi / (spot * sigma * sqrt_tau),
        "vega": spot * dq_phi * sqrt_tau,
        "theta": -spot * dq_phi * sigma / (2.0 * sqrt_tau)
        - w * r * strike_leg
        + w * q * fwd_leg,
        "rho": w * tau * strike_leg,
    }


def call_greeks(**kwargs: float) -> dict[str, float]:
    return bsm_greeks(is_call=True, **kwargs)


def put_greeks(**kwargs: float) -> dict[str, float]:
    return bsm_greeks(is_call=False, **kwargs)


def call_price(**kwargs: float) -> float:
    """European call; keyword arguments as for :func:`bsm_greeks`."""
    return bsm_greeks(is_call=True, **kwargs)["price"]


def put_price(**kwargs: float) -> float:
    """European put; keyword arguments as for :func:`bsm_greeks`."""
    return bsm_greeks(is_call=False, **kwargs)["price"]
