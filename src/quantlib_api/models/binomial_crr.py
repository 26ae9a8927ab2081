from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from math import exp, isfinite, sqrt

import numpy as np
from numpy.typing import NDArray
from scipy.stats import binom

from quantlib_api.exceptions import InvalidParameterError


@dataclass(frozen=True, slots=True)
class BinomialModel:
    S0: float  # initial stock price
    u: float  # up factor
    d: float  # down factor
    r: float  # risk-free rate (cc, per unit time)
    q: float  # dividend yield (cc)
    dt: float  # time step
    n_steps: int

    def __post_init__(self) -> None:
        if self.n_steps <= 0:
            raise InvalidParameterError("n_steps must be positive")
        if not (0.0 < self.d < self.u):
            raise InvalidParameterError("Need 0 < d < u")
        if self.dt <= 0.0:
            raise InvalidParameterError("dt must be positive")

        # ensure risk-neutral prob is meaningful
        p = self.p_star
        if not (0.0 <= p <= 1.0):
            raise InvalidParameterError(
                f"Risk-neutral probability out of bounds: p*={p:.6g}. "
                "Try increasing n_steps or check r/q/sigma."
            )

    @classmethod
    def from_crr(
        cls, *, S0: float, r: float, q: float, sigma: float, T: float, n_steps: int
    ) -> BinomialModel:
        if n_steps <= 0:
            raise InvalidParameterError("n_steps must be positive")
        if not (isfinite(T) and T > 0.0):
            raise InvalidParameterError("time to maturity must be positive")
        if not (isfinite(sigma) and sigma > 0.0):
            raise InvalidParameterError("volatility must be positive")

        dt = T / n_steps
        u = exp(sigma * sqrt(dt))
        d = exp(-sigma * sqrt(dt))
        return cls(S0=S0, u=u, d=d, r=r, q=q, dt=dt, n_steps=n_steps)

    @property
    def T(self) -> float:
        return self.dt * self.n_steps

    @property
    def p_star(self) -> float:
        # Under continuous dividend yield q: E[S_{t+dt}/S_t] = exp((r-q)dt)
        growth = exp((self.r - self.q) * self.dt)
        return (growth - self.d) / (self.u - self.d)

    @property
    def disc_step(self) -> float:
        return exp(-self.r * self.dt)

    def stock_prices(self, step: int) -> NDArray[np.float64]:
        """Node prices at ``step``, ordered by number of up moves."""
        j = np.arange(step + 1, dtype=np.float64)
        return self.S0 * self.u**j * self.d ** (step - j)


@dataclass(frozen=True, slots=True)
class LatticeValuation:
    price: float
    delta: float | None
    gamma: float | None
    theta: float | None


def backward_induction(
    model: BinomialModel,
    payoff: Callable[[NDArray[np.float64]], NDArray[np.float64]],
    *,
    american: bool = False,
) -> LatticeValuation:
    """
    Backward induction on a recombining binomial tree.

    With ``american=True`` each node takes the larger of continuation and
    immediate exercise value. Delta, gamma and theta are read off the first two
    levels of the tree (None when the tree has fewer than two steps).
    """
    p = model.p_star
    disc = model.disc_step

    values = payoff(model.stock_prices(model.n_steps))
    levels: dict[int, NDArray[np.float64]] = {}
    if model.n_steps <= 2:
        levels[model.n_steps] = values

    for step in range(model.n_steps - 1, -1, -1):
        values = disc * (p * values[1:] + (1.0 - p) * values[:-1])
        if american:
            values = np.maximum(values, payoff(model.stock_prices(step)))
        if step <= 2:
            levels[step] = values

    price = float(levels[0][0])
    if model.n_steps < 2:
        return LatticeValuation(price=price, delta=None, gamma=None, theta=None)

    S1 = model.stock_prices(1)
    S2 = model.stock_prices(2)
    V1 = levels[1]
    V2 = levels[2]

    delta = (V1[1] - V1[0]) / (S1[1] - S1[0])
    delta_up = (V2[2] - V2[1]) / (S2[2] - S2[1])
    delta_down = (V2[1] - V2[0]) / (S2[1] - S2[0])
    gamma = (delta_up - delta_down) / (0.5 * (S2[2] - S2[0]))
    # CRR recombines to S0 at the middle node of step 2
    theta = (V2[1] - price) / (2.0 * model.dt)

    return LatticeValuation(
        price=price, delta=float(delta), gamma=float(gamma), theta=float(theta)
    )


def price_european_closed_form(
    model: BinomialModel,
    payoff: Callable[[NDArray[np.float64]], NDArray[np.float64]],
) -> float:
    """
    European pricing via the binomial distribution (closed-form sum).
    """
    N = model.n_steps
    j = np.arange(N + 1)
    weights = binom.pmf(j, N, model.p_star)
    return float(exp(-model.r * model.T) * np.dot(weights, payoff(model.stock_prices(N))))
