from __future__ import annotations

import math
from dataclasses import dataclass

from ..curves.curve import Curve
from ..curves.instruments import fixed_leg_schedule
from ..exceptions import InvalidParameterError


@dataclass(frozen=True, slots=True)
class BondPrice:
    """Bond value per unit face.

    ``dirty = clean + accrued``; the dirty price is the discounted value of the
    remaining cash flows.
    """

    clean: float
    accrued: float
    dirty: float


def _yield_discount(y: float, t: float, frequency: int) -> float:
    # periodic compounding at the coupon frequency
    return (1.0 + y / frequency) ** (-frequency * t)


def price_bond(
    discounting: Curve | float,
    *,
    maturity: float,
    coupon_rate: float,
    frequency: int = 1,
    time_since_issue: float | None = None,
) -> BondPrice:
    """Price a fixed-coupon bullet bond.

    Parameters
    ----------
    discounting : Curve or float
        Discount curve, or a flat yield compounded ``frequency`` times a year.
    maturity : float
        Remaining life in years.
    coupon_rate : float
        Annual coupon as a decimal; each payment is ``coupon_rate / frequency``.
    frequency : int, default 1
        Coupon payments per year.
    time_since_issue : float or None, default None
        Years since issue. Caps accrual for a bond still in its first coupon
        period; ``None`` assumes a full prior period.

    Returns
    -------
    BondPrice

    Raises
    ------
    InvalidParameterError
        Non-positive maturity or frequency, negative coupon, or a yield at or
        below ``-frequency``.
    """
    if not (math.isfinite(maturity) and maturity > 0.0):
        raise InvalidParameterError(f"maturity must be positive, got {maturity!r}")
    if frequency < 1:
        raise InvalidParameterError("frequency must be >= 1")
    if not (math.isfinite(coupon_rate) and coupon_rate >= 0.0):
        raise InvalidParameterError("coupon_rate must be a non-negative number")

    if isinstance(discounting, Curve):
        df = discounting.discount_factor
    else:
        y = float(discounting)
        if not (math.isfinite(y) and y > -frequency):
            raise InvalidParameterError(f"invalid yield {y!r}")

        def df(t: float) -> float:
            return _yield_discount(y, t, frequency)

    schedule = fixed_leg_schedule(maturity, frequency)
    coupon = coupon_rate / frequency
    dirty = sum(coupon * df(t) for t in schedule) + df(maturity)

    period = 1.0 / frequency
    elapsed = period - schedule[0]
    if time_since_issue is not None:
        elapsed = min(elapsed, max(float(time_since_issue), 0.0))
    accrued = coupon * max(elapsed, 0.0) / period

    return BondPrice(clean=dirty - accrued, accrued=accrued, dirty=dirty)
