from __future__ import annotations

from functools import partial

import numpy as np

from quantlib_api.types import OptionType
from quantlib_api.typing import Payoff


def call_payoff(ST: np.ndarray, *, K: float) -> np.ndarray:
    return np.maximum(ST - K, 0.0)


def put_payoff(ST: np.ndarray, *, K: float) -> np.ndarray:
    return np.maximum(K - ST, 0.0)


def make_vanilla_payoff(kind: OptionType, *, K: float) -> Payoff:
    """Vectorized payoff ``ST -> payoff(ST)`` for a call or put struck at ``K``."""
    if kind == OptionType.CALL:
        return partial(call_payoff, K=float(K))
    if kind == OptionType.PUT:
        return partial(put_payoff, K=float(K))
    raise ValueError(f"Unsupported option kind: {kind}")
