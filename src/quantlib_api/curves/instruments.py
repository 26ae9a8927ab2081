from __future__ import annotations

from collections.abc import Callable

from quantlib_api.curves.curve import Curve
from quantlib_api.exceptions import ConfigurationError
from quantlib_api.types import InstrumentType, Quote

_SCHEDULE_EPS = 1e-9


def fixed_leg_schedule(maturity: float, frequency: int) -> list[float]:
    """Payment times rolled backward from ``maturity`` in steps of ``1/frequency``.

    A short stub, if any, sits at the front.
    """
    step = 1.0 / frequency
    times: list[float] = []
    t = maturity
    while t > _SCHEDULE_EPS:
        times.append(t)
        t = maturity - len(times) * step
    return times[::-1]


def deposit_rate(curve: Curve, quote: Quote) -> float:
    """Simple deposit rate implied by the curve: ``df(T) = 1 / (1 + r T)``."""
    T = quote.maturity
    return (1.0 / curve.discount_factor(T) - 1.0) / T


def future_price(curve: Curve, quote: Quote) -> float:
    """Futures price ``100 * (1 - f)`` with ``f`` the simple forward over [start, T].

    Convexity adjustment is ignored.
    """
    s, T = quote.accrual_start, quote.maturity
    fwd = (curve.discount_factor(s) / curve.discount_factor(T) - 1.0) / (T - s)
    return 100.0 * (1.0 - fwd)


def swap_par_rate(curve: Curve, quote: Quote) -> float:
    """Par fixed rate: ``r * sum(a_i df(t_i)) = 1 - df(T)``."""
    times = fixed_leg_schedule(quote.maturity, quote.payment_frequency)
    annuity = 0.0
    prev = 0.0
    for t in times:
        annuity += (t - prev) * curve.discount_factor(t)
        prev = t
    return (1.0 - curve.discount_factor(quote.maturity)) / annuity


_VALUATION: dict[InstrumentType, Callable[[Curve, Quote], float]] = {
    InstrumentType.DEPOSIT: deposit_rate,
    InstrumentType.FUTURE: future_price,
    InstrumentType.SWAP: swap_par_rate,
}


def implied_quote(curve: Curve, quote: Quote) -> float:
    """Value the quoted instrument on ``curve`` in the units it is quoted in."""
    try:
        valuation = _VALUATION[quote.instrument_type]
    except KeyError:
        raise ConfigurationError(
            f"{quote.instrument_id}: {quote.instrument_type.value} quotes cannot "
            "be bootstrapped into a discount curve"
        ) from None
    return valuation(curve, quote)
