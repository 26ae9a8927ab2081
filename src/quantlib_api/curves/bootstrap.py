from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from datetime import date

import numpy as np

from quantlib_api.config import CurveBuildConfig
from quantlib_api.curves.curve import Curve
from quantlib_api.curves.instruments import implied_quote
from quantlib_api.exceptions import (
    ConfigurationError,
    CurveBuildError,
    DuplicateMaturityError,
    RootFindingError,
)
from quantlib_api.numerics.interpolation import InterpolationMethod
from quantlib_api.numerics.root_finding import brent_method
from quantlib_api.types import InstrumentType, Quote

logger = logging.getLogger(__name__)

_SAME_MATURITY = 1e-12


def _ordered_quotes(quotes: Iterable[Quote]) -> list[Quote]:
    ordered = sorted(quotes, key=lambda q: q.maturity)
    if not ordered:
        raise ConfigurationError("cannot build a curve from an empty quote list")

    for q in ordered:
        if q.instrument_type == InstrumentType.OPTION:
            raise ConfigurationError(
                f"{q.instrument_id}: option quotes cannot be bootstrapped into a "
                "discount curve"
            )

    for prev, cur in zip(ordered, ordered[1:], strict=False):
        if cur.maturity - prev.maturity <= _SAME_MATURITY:
            raise DuplicateMaturityError(
                f"quotes {prev.instrument_id!r} ({prev.instrument_type.value}) and "
                f"{cur.instrument_id!r} ({cur.instrument_type.value}) share maturity "
                f"{cur.maturity:.12g}",
                maturity=cur.maturity,
                instrument_id=cur.instrument_id,
            )
    return ordered


def build_curve(
    valuation_date: date | None,
    quotes: Iterable[Quote],
    interpolation_method: InterpolationMethod | str = InterpolationMethod.LOG_LINEAR,
    tolerances: CurveBuildConfig | None = None,
    *,
    name: str = "",
) -> Curve:
    """Bootstrap a discount curve from deposit, future and swap quotes.

    Quotes are processed in increasing maturity. At each maturity the
    continuously compounded zero rate is solved with Brent's method so that the
    instrument, valued on the curve built so far plus the trial pivot,
    reproduces its quote. Intermediate discount factors (swap coupons,
    futures accrual starts) come from the curve's interpolation.

    Linear and log-linear curves are local, so every quote reprices exactly on
    the finished curve. Spline methods are not: a later pivot reshapes earlier
    segments and earlier swaps then reprice only approximately.

    Parameters
    ----------
    valuation_date : date or None
        Date maturities are measured from; stored on the curve.
    quotes : Iterable[Quote]
        Market quotes in any order. Option quotes are rejected.
    interpolation_method : InterpolationMethod, default LOG_LINEAR
        Interpolation used both during bootstrapping and by the result.
    tolerances : CurveBuildConfig or None
        Solver tolerances, zero-rate bracket and extrapolation policy.
    name : str
        Label stored on the curve.

    Returns
    -------
    Curve
        The complete curve. Partial curves are never returned.

    Raises
    ------
    ConfigurationError
        Empty input or an option quote.
    DuplicateMaturityError
        Two quotes share a maturity.
    CurveBuildError
        A pivot could not be solved; ``maturity`` and ``instrument_id`` name it.
    """
    cfg = tolerances if tolerances is not None else CurveBuildConfig()
    method = InterpolationMethod(interpolation_method)
    ordered = _ordered_quotes(quotes)
    num = cfg.numerics

    maturities: list[float] = []
    dfs: list[float] = []

    for quote in ordered:
        T = quote.maturity

        def objective(z: float, quote: Quote = quote, T: float = T) -> float:
            trial = Curve(
                maturities=np.array([*maturities, T]),
                discount_factors=np.array([*dfs, math.exp(-z * T)]),
                method=method,
                valuation_date=valuation_date,
            )
            return implied_quote(trial, quote) - quote.value

        try:
            rr = brent_method(
                objective,
                cfg.rate_lo,
                cfg.rate_hi,
                tol_abs=num.tol_abs,
                tol_rel=num.tol_rel,
                max_iter=num.max_iter,
            )
        except RootFindingError as exc:
            raise CurveBuildError(
                f"bootstrap failed at maturity {T:.6g} "
                f"({quote.instrument_id}, {quote.instrument_type.value}): {exc}",
                maturity=T,
                instrument_id=quote.instrument_id,
            ) from exc

        df = math.exp(-rr.root * T)
        maturities.append(T)
        dfs.append(df)
        logger.debug(
            "pivot %s T=%.6f quote=%.8g zero=%.10f df=%.12f iterations=%d",
            quote.instrument_id,
            T,
            quote.value,
            rr.root,
            df,
            rr.iterations,
        )

    curve = Curve(
        maturities=np.array(maturities),
        discount_factors=np.array(dfs),
        method=method,
        extrapolation=cfg.extrapolation,
        valuation_date=valuation_date,
        name=name,
    )
    if curve.arbitrage_flags:
        logger.warning(
            "curve %r has increasing discount factors at maturities %s",
            name,
            ", ".join(f"{t:.6g}" for t in curve.arbitrage_flags),
        )
    logger.info(
        "bootstrapped curve %r: %d pivots up to %.6g years (%s)",
        name,
        len(maturities),
        curve.max_maturity,
        method.value,
    )
    return curve
