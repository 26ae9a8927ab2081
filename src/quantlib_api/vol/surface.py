from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import pandas as pd

from ..config import ImpliedVolConfig, LatticeConfig
from ..curves.curve import Curve
from ..exceptions import ArbitrageViolationError, InvalidParameterError, RootFindingError
from ..types import OptionSpec
from .implied_vol import implied_volatility
from .quotes import OptionQuote

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImpliedVolPoint:
    """One node of an implied volatility surface.

    ``log_moneyness`` is ``ln(K / S)`` against spot.
    """

    maturity: float
    log_moneyness: float
    implied_vol: float


def implied_vol_points(
    option_quotes: Iterable[OptionQuote],
    spot: float,
    curve: Curve,
    *,
    dividend_yield: float = 0.0,
    config: ImpliedVolConfig = ImpliedVolConfig(),
    lattice: LatticeConfig = LatticeConfig(),
) -> list[ImpliedVolPoint]:
    """Invert each quote for volatility and place it in (T, ln(K/S)).

    Quotes whose price violates no-arbitrage bounds, or whose inversion fails,
    are logged at WARNING and skipped. Run :func:`filter_arbitrage` first to
    clean a raw grid.
    """
    if not (math.isfinite(spot) and spot > 0.0):
        raise InvalidParameterError(f"spot must be positive, got {spot!r}")

    points: list[ImpliedVolPoint] = []
    for q in option_quotes:
        spec = OptionSpec(
            spot=spot,
            strike=q.strike,
            maturity=q.maturity,
            option_type=q.option_type,
            exercise=q.exercise,
        )
        try:
            vol = implied_volatility(
                spec,
                curve,
                q.price,
                dividend_yield=dividend_yield,
                config=config,
                lattice=lattice,
            )
        except (ArbitrageViolationError, RootFindingError) as exc:
            logger.warning("Skipped %s: %s", q.label, exc)
            continue
        points.append(
            ImpliedVolPoint(
                maturity=q.maturity,
                log_moneyness=math.log(q.strike / spot),
                implied_vol=vol,
            )
        )
    return points


def points_to_frame(points: Sequence[ImpliedVolPoint]) -> pd.DataFrame:
    """Tabular view sorted by maturity then log-moneyness."""
    df = pd.DataFrame(
        {
            "maturity": [p.maturity for p in points],
            "log_moneyness": [p.log_moneyness for p in points],
            "implied_vol": [p.implied_vol for p in points],
        }
    )
    return df.sort_values(["maturity", "log_moneyness"], ignore_index=True)
