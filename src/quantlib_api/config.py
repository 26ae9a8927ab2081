from __future__ import annotations

import math
from dataclasses import dataclass, field

from quantlib_api.exceptions import ConfigurationError
from quantlib_api.numerics.interpolation import Extrapolation


@dataclass(frozen=True, slots=True)
class NumericsConfig:
    """Tolerances and budget shared by every root-finding call."""

    tol_abs: float = 1e-10
    tol_rel: float = 1e-12
    max_iter: int = 100

    def __post_init__(self) -> None:
        if self.tol_abs <= 0 or self.tol_rel <= 0:
            raise ConfigurationError("tol_abs and tol_rel must be > 0")
        if self.max_iter <= 0:
            raise ConfigurationError("max_iter must be > 0")


@dataclass(frozen=True, slots=True)
class CurveBuildConfig:
    """Bootstrapping tolerances.

    ``rate_lo``/``rate_hi`` bracket the continuously compounded zero rate solved
    at each pivot.
    """

    numerics: NumericsConfig = field(
        default_factory=lambda: NumericsConfig(tol_abs=1e-14, tol_rel=1e-15)
    )
    rate_lo: float = -0.5
    rate_hi: float = 1.0
    extrapolation: Extrapolation = Extrapolation.FLAT

    def __post_init__(self) -> None:
        if not (math.isfinite(self.rate_lo) and math.isfinite(self.rate_hi)):
            raise ConfigurationError("rate bracket must be finite")
        if self.rate_lo >= self.rate_hi:
            raise ConfigurationError("rate_lo must be < rate_hi")


@dataclass(frozen=True, slots=True)
class LatticeConfig:
    n_steps: int = 500

    def __post_init__(self) -> None:
        if self.n_steps <= 0:
            raise ConfigurationError("n_steps must be > 0")


@dataclass(frozen=True, slots=True)
class MonteCarloConfig:
    n_paths: int = 100_000
    seed: int = 0
    antithetic: bool = True

    def __post_init__(self) -> None:
        if self.n_paths <= 0:
            raise ConfigurationError("n_paths must be > 0")
        if self.antithetic and self.n_paths % 2 != 0:
            raise ConfigurationError("antithetic=True requires an even n_paths")


@dataclass(frozen=True, slots=True)
class ImpliedVolConfig:
    sigma_lo: float = 1e-8
    sigma_hi: float = 5.0
    bounds_eps: float = 1e-12
    numerics: NumericsConfig = field(
        default_factory=lambda: NumericsConfig(tol_abs=1e-10, tol_rel=1e-10)
    )

    def __post_init__(self) -> None:
        if self.sigma_lo <= 0 or self.sigma_hi <= 0:
            raise ConfigurationError("sigma bounds must be > 0")
        if self.sigma_lo >= self.sigma_hi:
            raise ConfigurationError("sigma_lo must be < sigma_hi")
        if self.bounds_eps < 0:
            raise ConfigurationError("bounds_eps must be >= 0")
