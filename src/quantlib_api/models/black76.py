from __future__ import annotations

import math

from scipy.stats import norm

from quantlib_api.exceptions import InvalidParameterError
from quantlib_api.models.bs import validate_scalar_inputs


def d1_d2_from_forward(
    *, forward: float, strike: float, sigma: float, tau: float
) -> tuple[float, float]:
    validate_scalar_inputs(spot=forward, strike=strike, sigma=sigma, tau=tau)
    vol_sqrt_t = sigma * math.sqrt(tau)
    d1 = (math.log(forward / strike) + 0.5 * sigma * sigma * tau) / vol_sqrt_t
    return float(d1), float(d1 - vol_sqrt_t)


def black76_greeks(
    *,
    is_call: bool,
    forward: float,
    strike: float,
    df: float,
    sigma: float,
    tau: float,
) -> dict[str, float]:
    """
    Discounted Black-76 price and Greeks for an option on a forward or future.

    ``df`` is the discount factor to expiry and ``r = -ln(df)/tau`` the
    equivalent flat rate. Delta and gamma are with respect to the forward.
    theta is ∂Price/∂t per year holding the forward fixed; rho is ∂Price/∂r.
    """
    if not (math.isfinite(df) and df > 0.0):
        raise InvalidParameterError(f"discount factor must be > 0, got {df!r}")
    d1, d2 = d1_d2_from_forward(forward=forward, strike=strike, sigma=sigma, tau=tau)
    sqrt_tau = math.sqrt(tau)
    r = -math.log(df) / tau
    phi_d1 = float(norm.pdf(d1))

    if is_call:
        price = df * (forward * float(norm.cdf(d1)) - strike * float(norm.cdf(d2)))
        delta = df * float(norm.cdf(d1))
    else:
        price = df * (strike * float(norm.cdf(-d2)) - forward * float(norm.cdf(-d1)))
        delta = -df * float(norm.cdf(-d1))

    return {
        "price": price,
        "delta": delta,
        "gamma": df * phi_d1 / (forward * sigma * sqrt_tau),
        "vega": df * forward * phi_d1 * sqrt_tau,
        "theta": r * price - df * forward * phi_d1 * sigma / (2.0 * sqrt_tau),
        "rho": -tau * price,
    }


def black76_price(
    *,
    is_call: bool,
    forward: float,
    strike: float,
    df: float,
    sigma: float,
    tau: float,
) -> float:
    return black76_greeks(
        is_call=is_call, forward=forward, strike=strike, df=df, sigma=sigma, tau=tau
    )["price"]
