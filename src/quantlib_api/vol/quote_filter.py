from __future__ import annotations

import logging
from collections.abc import Iterable

from ..types import OptionType
from .quotes import OptionQuote, group_by_maturity

logger = logging.getLogger(__name__)


def _vertical_violation(cur: OptionQuote, nxt: OptionQuote, tol: float) -> bool:
    # calls non-increasing in strike, puts non-decreasing
    if cur.option_type == OptionType.CALL:
        return nxt.price - cur.price > tol
    return cur.price - nxt.price > tol


def _calendar_violation(cur: OptionQuote, later: OptionQuote, tol: float) -> bool:
    # same strike, longer expiry must not be cheaper
    return cur.price - later.price > tol


def _butterfly_violation(
    q1: OptionQuote, q2: OptionQuote, q3: OptionQuote, tol: float
) -> bool:
    # price convex in strike: P(K2) <= w P(K1) + (1 - w) P(K3)
    w = (q3.strike - q2.strike) / (q3.strike - q1.strike)
    return q2.price - (w * q1.price + (1.0 - w) * q3.price) > tol


def _filter_grid(
    grid: dict[float, list[OptionQuote]], tol: float
) -> list[OptionQuote]:
    accepted: list[OptionQuote] = []
    maturities = list(grid)
    for i, T in enumerate(maturities):
        row = grid[T]
        later = (
            {q.strike: q for q in grid[maturities[i + 1]]}
            if i + 1 < len(maturities)
            else {}
        )
        for j, cur in enumerate(row):
            if j + 1 < len(row) and _vertical_violation(cur, row[j + 1], tol):
                logger.warning("Dropped %s: vertical spread arbitrage", cur.label)
                continue
            nxt = later.get(cur.strike)
            if nxt is not None and _calendar_violation(cur, nxt, tol):
                logger.warning("Dropped %s: calendar spread arbitrage", cur.label)
                continue
            if j + 2 < len(row) and _butterfly_violation(
                cur, row[j + 1], row[j + 2], tol
            ):
                logger.warning("Dropped %s: butterfly spread arbitrage", cur.label)
                continue
            accepted.append(cur)
    return accepted


def filter_arbitrage(
    option_quotes: Iterable[OptionQuote], *, tol: float = 0.0
) -> list[OptionQuote]:
    """Drop quotes that open a static spread arbitrage.

    Calls and puts are checked separately on a (maturity, strike) grid. A quote
    is dropped when, against its neighbours in the grid,

    - vertical: the next strike's price moves the wrong way (calls must not
      rise with strike, puts must not fall);
    - calendar: the same strike at the next maturity is cheaper;
    - butterfly: its next strike's price lies above the chord through it and
      the strike after, i.e. prices are not convex in strike.

    Returns the surviving quotes, calls first, each group ordered by maturity
    then strike.
    """
    quotes = list(option_quotes)
    accepted: list[OptionQuote] = []
    for kind in (OptionType.CALL, OptionType.PUT):
        grid = group_by_maturity(q for q in quotes if q.option_type == kind)
        accepted.extend(_filter_grid(grid, tol))
    logger.debug("Arbitrage filter kept %d of %d quotes", len(accepted), len(quotes))
    return accepted
