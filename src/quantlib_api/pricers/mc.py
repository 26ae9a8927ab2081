from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from ..config import MonteCarloConfig
from ..exceptions import InvalidParameterError
from ..types import PricingModel, PricingResult
from ..typing import FloatArray, Payoff
from ..vanilla import make_vanilla_payoff
from .inputs import PricingInputs, require_european

logger = logging.getLogger(__name__)


def sim_gbm_terminal(
    n_paths: int,
    T: float,
    mu: float = 0.0,
    sigma: float = 1.0,
    S0: float = 1.0,
    rng: np.random.Generator | None = None,
    *,
    antithetic: bool = False,
) -> FloatArray:
    """
    Terminal levels ``S_T = S0 exp((mu - sigma^2/2) T + sigma sqrt(T) Z)``.

    With ``antithetic=True`` only ``n_paths // 2`` normals are drawn; the
    first half of the output uses ``Z`` and the second half ``-Z``.
    """
    if rng is None:
        rng = np.random.default_rng()

    if antithetic:
        Z = rng.standard_normal(n_paths // 2)
        Z = np.concatenate([Z, -Z])
    else:
        Z = rng.standard_normal(n_paths)
    return S0 * np.exp((mu - 0.5 * sigma**2) * T + sigma * np.sqrt(T) * Z)


@dataclass(frozen=True, slots=True)
class McGBMModel:
    """
    Terminal-value Monte Carlo under risk-neutral GBM with drift ``r - q``.

    ``n_paths`` must be even with antithetic sampling; the estimator then
    averages each mirrored pair before taking the sample variance.
    """

    S0: float
    r: float
    q: float
    sigma: float
    tau: float
    n_paths: int
    antithetic: bool = False
    rng: np.random.Generator = field(default_factory=np.random.default_rng, repr=False)

    def __post_init__(self) -> None:
        for name in ("S0", "sigma", "tau"):
            if not getattr(self, name) > 0.0:
                raise InvalidParameterError(f"{name} must be positive")
        if self.n_paths <= 0:
            raise InvalidParameterError("n_paths must be positive")
        if self.antithetic and self.n_paths % 2:
            raise InvalidParameterError("antithetic sampling needs an even n_paths")

    def simulate_terminal(self) -> FloatArray:
        return sim_gbm_terminal(
            self.n_paths,
            self.tau,
            mu=self.r - self.q,
            sigma=self.sigma,
            S0=self.S0,
            rng=self.rng,
            antithetic=self.antithetic,
        )

    def price_european(self, payoff: Payoff) -> tuple[float, float]:
        """Discounted sample mean of ``payoff(S_T)`` and its standard error."""
        X = payoff(self.simulate_terminal())
        if self.antithetic:
            half = self.n_paths // 2
            X = 0.5 * (X[:half] + X[half:])

        disc = float(np.exp(-self.r * self.tau))
        stderr = float(X.std(ddof=1) / np.sqrt(X.size)) if X.size > 1 else 0.0
        return disc * float(X.mean()), disc * stderr


def mc_price(
    p: PricingInputs,
    *,
    n_paths: int,
    antithetic: bool = False,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
) -> tuple[float, float]:
    """
    Price a European vanilla option by Monte Carlo under GBM.

    Parameters
    ----------
    p : PricingInputs
        Resolved pricing inputs.
    n_paths : int
        Number of simulated terminal prices.
    antithetic : bool, default False
        Pair every normal draw with its negative.
    seed : int or None, default None
        Seed for a fresh ``numpy.random.default_rng``; ignored when ``rng``
        is given.
    rng : np.random.Generator or None, default None
        Explicit generator, takes precedence over ``seed``.

    Returns
    -------
    (price, stderr) : tuple[float, float]
    """
    if rng is None:
        rng = np.random.default_rng(seed)
    model = McGBMModel(
        S0=p.S,
        r=p.r,
        q=p.q,
        sigma=p.sigma,
        tau=p.tau,
        n_paths=int(n_paths),
        antithetic=bool(antithetic),
        rng=rng,
    )
    payoff = make_vanilla_payoff(p.spec.option_type, K=p.K)
    return model.price_european(payoff)


def mc_result(p: PricingInputs, config: MonteCarloConfig) -> PricingResult:
    require_european(p.spec, "Monte Carlo model")
    price, stderr = mc_price(
        p, n_paths=config.n_paths, antithetic=config.antithetic, seed=config.seed
    )
    logger.debug(
        "Monte Carlo price %.8g +/- %.2g (n_paths=%d, seed=%d)",
        price,
        stderr,
        config.n_paths,
        config.seed,
    )
    return PricingResult(price=price, model=PricingModel.MONTE_CARLO, std_error=stderr)
