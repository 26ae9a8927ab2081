from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from math import exp, log, pi, sqrt

from ..config import ImpliedVolConfig, LatticeConfig
from ..curves.curve import Curve
from ..exceptions import ArbitrageViolationError, InvalidParameterError
from ..numerics.root_finding import RootResult, brent_method, bracketed_newton
from ..pricers.black_scholes import bs_greeks
from ..pricers.inputs import PricingInputs
from ..pricers.tree import binom_price
from ..types import ExerciseStyle, OptionSpec, OptionType

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImpliedVolResult:
    """Implied volatility together with solver diagnostics.

    Parameters
    ----------
    vol : float
        Implied volatility at the root.
    root_result : RootResult
        Diagnostics of the root finder (iterations, residual, final bracket).
    mkt_price : float
        Observed option price that was inverted.
    bounds : tuple[float, float]
        No-arbitrage bounds ``(lb, ub)`` the price was checked against.
    tau : float
        Time to expiry used in the inversion.
    """

    vol: float
    root_result: RootResult
    mkt_price: float
    bounds: tuple[float, float]
    tau: float


def price_bounds(
    spec: OptionSpec, df: float, dividend_yield: float = 0.0
) -> tuple[float, float]:
    """No-arbitrage bounds ``(lb, ub)`` on the option premium.

    With ``Fp = S e^{-qT}`` the prepaid forward:

    - European call: ``max(Fp - K df, 0) <= C <= Fp``
    - European put : ``max(K df - Fp, 0) <= P <= K df``
    - American call: ``max(S - K, Fp - K df, 0) <= C <= S``
    - American put : ``max(K - S, 0) <= P <= K``
    """
    S, K, T = spec.spot, spec.strike, spec.maturity
    fp = S * exp(-dividend_yield * T)
    K_df = K * df
    american = spec.exercise == ExerciseStyle.AMERICAN

    if spec.option_type == OptionType.CALL:
        if american:
            return max(S - K, fp - K_df, 0.0), S
        return max(fp - K_df, 0.0), fp
    if american:
        return max(K - S, 0.0), K
    return max(K_df - fp, 0.0), K_df


def _validate_bounds(
    price: float, spec: OptionSpec, df: float, dividend_yield: float, *, eps: float
) -> tuple[float, float]:
    lb, ub = price_bounds(spec, df, dividend_yield)
    if not (math.isfinite(price) and lb - eps <= price <= ub + eps):
        raise ArbitrageViolationError(
            f"Option price out of bounds: price={price:.12g}, "
            f"bounds=[{lb:.12g}, {ub:.12g}], S={spec.spot:.12g}, "
            f"K={spec.strike:.12g}, df={df:.12g}, q={dividend_yield:.12g}, "
            f"T={spec.maturity:.12g}",
            price=price,
            bounds=(lb, ub),
        )
    return lb, ub


def _iv_seed_from_time_value(
    mkt_price: float,
    spec: OptionSpec,
    df: float,
    dividend_yield: float,
    *,
    sigma_lo: float,
    sigma_hi: float,
) -> float:
    """Heuristic starting volatility from the option's time value.

    Blends an ATM time-value approximation (good for small log-moneyness) with
    a moneyness-based seed for far-from-ATM strikes, then clamps into
    ``[sigma_lo, sigma_hi]``. A price that is essentially pure intrinsic
    returns ``sigma_lo``.
    """
    tau = spec.maturity
    F = spec.spot * exp(-dividend_yield * tau) / df
    u = mkt_price / df  # undiscounted premium
    K = spec.strike
    k = log(F / K)

    if spec.option_type == OptionType.CALL:
        intr = max(F - K, 0.0)
    else:
        intr = max(K - F, 0.0)
    tv = max(u - intr, 0.0)

    if tv <= 1e-16 * max(1.0, F):
        return float(sigma_lo)

    sigma_atm = sqrt(2.0 * pi / tau) * (tv / F)
    sigma_mk = sqrt(2.0 * abs(k) / tau)

    # near ATM mostly sigma_atm, far away mostly sigma_mk
    w = exp(-abs(k) / 0.10)
    sigma0 = w * sigma_atm + (1.0 - w) * sigma_mk
    return float(min(sigma_hi, max(sigma_lo, sigma0)))


def _lattice_sigma_floor(p: PricingInputs, n_steps: int, sigma_lo: float) -> float:
    # CRR needs sigma*sqrt(dt) > |r - q|*dt for p* to stay in [0, 1]
    dt = p.tau / n_steps
    return max(sigma_lo, 1.01 * abs(p.r - p.q) * sqrt(dt) + 1e-12)


def implied_volatility_result(
    spec: OptionSpec,
    curve: Curve,
    observed_price: float,
    initial_guess: float | None = None,
    *,
    dividend_yield: float = 0.0,
    config: ImpliedVolConfig = ImpliedVolConfig(),
    lattice: LatticeConfig = LatticeConfig(),
) -> ImpliedVolResult:
    """Invert a model price for volatility and return diagnostics.

    Solves ``model_price(sigma) - observed_price = 0`` on
    ``[config.sigma_lo, config.sigma_hi]``.

    European options use the closed-form model with a bracketed Newton
    iteration (analytic vega as derivative, bisection fallback). American
    options reprice a CRR lattice of ``lattice.n_steps`` steps inside Brent's
    method; each evaluation costs O(n_steps^2), so expect a few dozen tree
    builds per inversion.

    Parameters
    ----------
    spec : OptionSpec
        Option contract.
    curve : Curve
        Risk-free discount curve.
    observed_price : float
        Market premium.
    initial_guess : float or None, default None
        Starting volatility for the European Newton iteration; a heuristic
        seed from time value when None. Ignored for American exercise, where
        Brent works from the bracket ``[floor, config.sigma_hi]`` alone.
    dividend_yield : float, default 0.0
        Continuous dividend yield.
    config : ImpliedVolConfig
        Search interval, bounds tolerance and solver tolerances.
    lattice : LatticeConfig
        Tree depth for American exercise.

    Returns
    -------
    ImpliedVolResult

    Raises
    ------
    ArbitrageViolationError
        If ``observed_price`` lies outside the no-arbitrage bounds.
    InvalidParameterError
        If the maturity is not positive.
    InvalidBracketError, ConvergenceError
        If the root finder fails.
    """
    if not (math.isfinite(spec.maturity) and spec.maturity > 0.0):
        raise InvalidParameterError(
            f"time to maturity must be positive, got {spec.maturity!r}"
        )
    df = curve.discount_factor(spec.maturity)
    lb, ub = _validate_bounds(
        observed_price, spec, df, dividend_yield, eps=config.bounds_eps
    )
    num = config.numerics

    if initial_guess is None:
        initial_guess = _iv_seed_from_time_value(
            observed_price,
            spec,
            df,
            dividend_yield,
            sigma_lo=config.sigma_lo,
            sigma_hi=config.sigma_hi,
        )

    p0 = PricingInputs(spec=spec, sigma=float(initial_guess), q=dividend_yield, df=df)

    if spec.exercise == ExerciseStyle.AMERICAN:

        def Fn(sigma: float) -> float:
            px = replace(p0, sigma=float(sigma))
            return binom_price(px, lattice.n_steps, american=True) - observed_price

        lo = _lattice_sigma_floor(p0, lattice.n_steps, config.sigma_lo)
        rr = brent_method(
            Fn,
            lo,
            config.sigma_hi,
            tol_abs=num.tol_abs,
            tol_rel=num.tol_rel,
            max_iter=num.max_iter,
        )
    else:

        def Fn(sigma: float) -> float:
            px = replace(p0, sigma=float(sigma))
            return bs_greeks(px)["price"] - observed_price

        def dFn(sigma: float) -> float:
            px = replace(p0, sigma=float(sigma))
            return bs_greeks(px)["vega"]

        rr = bracketed_newton(
            Fn,
            config.sigma_lo,
            config.sigma_hi,
            x0=p0.sigma,
            dFn=dFn,
            tol_abs=num.tol_abs,
            tol_rel=num.tol_rel,
            max_iter=num.max_iter,
        )

    logger.debug(
        "implied vol %s K=%g T=%g price=%.10g -> %.10g (%s, %d iterations)",
        spec.option_type.value,
        spec.strike,
        spec.maturity,
        observed_price,
        rr.root,
        rr.method,
        rr.iterations,
    )
    return ImpliedVolResult(
        vol=float(rr.root),
        root_result=rr,
        mkt_price=float(observed_price),
        bounds=(float(lb), float(ub)),
        tau=float(spec.maturity),
    )


def implied_volatility(
    spec: OptionSpec,
    curve: Curve,
    observed_price: float,
    initial_guess: float | None = None,
    *,
    dividend_yield: float = 0.0,
    config: ImpliedVolConfig = ImpliedVolConfig(),
    lattice: LatticeConfig = LatticeConfig(),
) -> float:
    """Implied volatility only; see :func:`implied_volatility_result`."""
    return implied_volatility_result(
        spec,
        curve,
        observed_price,
        initial_guess,
        dividend_yield=dividend_yield,
        config=config,
        lattice=lattice,
    ).vol
