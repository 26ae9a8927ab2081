"""Pytest helpers for the quantlib_api library."""

from __future__ import annotations

from datetime import date

import numpy as np
import pytest

from quantlib_api import (
    Curve,
    InstrumentType,
    ModelParameters,
    OptionSpec,
    OptionType,
    Quote,
    flat_curve,
)


@pytest.fixture
def base_params() -> dict:
    """A small set of canonical parameters used across tests."""
    return {
        "S": 100.0,
        "K": 100.0,
        "r": 0.05,
        "sigma": 0.2,
        "T": 1.0,
    }


@pytest.fixture
def valuation_date() -> date:
    return date(2024, 1, 2)


@pytest.fixture
def make_curve():
    """Factory for flat continuously compounded curves."""

    def _make(r: float) -> Curve:
        return flat_curve(r)

    return _make


@pytest.fixture
def make_option():
    """Factory returning ``(spec, params)`` for a vanilla option on a flat curve."""

    def _make(
        *,
        S: float,
        K: float,
        r: float,
        sigma: float,
        T: float,
        q: float = 0.0,
        kind: OptionType = OptionType.CALL,
        **spec_kwargs,
    ) -> tuple[OptionSpec, ModelParameters]:
        spec = OptionSpec(spot=S, strike=K, maturity=T, option_type=kind, **spec_kwargs)
        params = ModelParameters(volatility=sigma, curve=flat_curve(r), dividend_yield=q)
        return spec, params

    return _make


@pytest.fixture
def market_quotes() -> list[Quote]:
    """Deposits, a future and swaps out to 10 years, deliberately unsorted."""
    return [
        Quote("SWAP_5Y", 5.0, 0.0330, InstrumentType.SWAP),
        Quote("DEP_3M", 0.25, 0.0300, InstrumentType.DEPOSIT),
        Quote("FUT_SEP", 0.75, 96.85, InstrumentType.FUTURE, start=0.5),
        Quote("DEP_6M", 0.5, 0.0310, InstrumentType.DEPOSIT),
        Quote("SWAP_2Y", 2.0, 0.0320, InstrumentType.SWAP, payment_frequency=2),
        Quote("SWAP_10Y", 10.0, 0.0350, InstrumentType.SWAP),
    ]


@pytest.fixture
def rng():
    """Seeded RNG factory."""

    def _rng(seed: int) -> np.random.Generator:
        return np.random.default_rng(seed)

    return _rng
