from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from quantlib_api.exceptions import ConfigurationError, InvalidParameterError
from quantlib_api.market.daycount import year_fraction

if TYPE_CHECKING:
    from quantlib_api.curves.curve import Curve

RESULT_FORMAT = "quantlib_api.pricing_result"
RESULT_VERSION = 1


class OptionType(str, Enum):
    """Option contract type.

    Attributes
    ----------
    CALL : str
        Call option ("call").
    PUT : str
        Put option ("put").
    """

    CALL = "call"
    PUT = "put"


class ExerciseStyle(str, Enum):
    EUROPEAN = "european"
    AMERICAN = "american"


class InstrumentType(str, Enum):
    """Market instrument behind a :class:`Quote`.

    Deposits and swaps quote a rate (decimal), futures quote a price
    (``100 - rate`` in percent), options quote a premium.
    """

    DEPOSIT = "deposit"
    SWAP = "swap"
    FUTURE = "future"
    OPTION = "option"


class PricingModel(str, Enum):
    CLOSED_FORM = "closed_form"  # Black-Scholes-Merton
    BLACK76 = "black76"  # options on forwards / futures
    LATTICE = "lattice"  # CRR binomial tree
    MONTE_CARLO = "monte_carlo"


@dataclass(frozen=True, slots=True)
class Quote:
    """A single market observation, immutable once ingested.

    Parameters
    ----------
    instrument_id : str
        Identifier of the quoted instrument.
    maturity : float
        Maturity in years from the valuation date.
    value : float
        Observed rate (deposit, swap; decimal) or price (future, option).
    instrument_type : InstrumentType
        Instrument kind; selects the bootstrapping formula.
    start : float or None, default None
        Accrual start in years (futures). Defaults to ``maturity - 0.25``.
    payment_frequency : int, default 1
        Fixed-leg payments per year (swaps).

    Raises
    ------
    ConfigurationError
        If maturity is not positive, value is not finite, the frequency is
        below 1, or ``start`` does not lie in ``[0, maturity)``.
    """

    instrument_id: str
    maturity: float
    value: float
    instrument_type: InstrumentType
    start: float | None = None
    payment_frequency: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "instrument_type", InstrumentType(self.instrument_type))
        if not (math.isfinite(self.maturity) and self.maturity > 0.0):
            raise ConfigurationError(
                f"{self.instrument_id}: maturity must be > 0, got {self.maturity!r}"
            )
        if not math.isfinite(self.value):
            raise ConfigurationError(f"{self.instrument_id}: value must be finite")
        if self.payment_frequency < 1:
            raise ConfigurationError(
                f"{self.instrument_id}: payment_frequency must be >= 1"
            )
        if self.start is not None and not (0.0 <= self.start < self.maturity):
            raise ConfigurationError(
                f"{self.instrument_id}: start must lie in [0, maturity)"
            )

    @property
    def accrual_start(self) -> float:
        if self.start is not None:
            return self.start
        return max(self.maturity - 0.25, 0.0)

    @classmethod
    def from_dates(
        cls,
        instrument_id: str,
        valuation_date: date | datetime,
        maturity_date: date | datetime,
        value: float,
        instrument_type: InstrumentType,
        **kwargs: Any,
    ) -> Quote:
        """Build a quote whose maturity is the ACT/365 year fraction between dates."""
        return cls(
            instrument_id=instrument_id,
            maturity=year_fraction(valuation_date, maturity_date),
            value=value,
            instrument_type=instrument_type,
            **kwargs,
        )


@dataclass(frozen=True, slots=True)
class OptionSpec:
    """Specification of a plain-vanilla option.

    Parameters
    ----------
    spot : float
        Current price of the underlying, :math:`S`. For Black-76 this is the
        forward (futures) price.
    strike : float
        Strike price, :math:`K`.
    maturity : float
        Time to expiry in years, :math:`T`.
    option_type : OptionType
        Call or put.
    exercise : ExerciseStyle, default EUROPEAN
        Exercise style.

    Raises
    ------
    InvalidParameterError
        If spot or strike is not a positive finite number.

    Notes
    -----
    Maturity is validated by the pricers so that a non-positive maturity fails
    with :class:`InvalidParameterError` at pricing time.
    """

    spot: float
    strike: float
    maturity: float
    option_type: OptionType
    exercise: ExerciseStyle = ExerciseStyle.EUROPEAN

    def __post_init__(self) -> None:
        object.__setattr__(self, "option_type", OptionType(self.option_type))
        object.__setattr__(self, "exercise", ExerciseStyle(self.exercise))
        if not (math.isfinite(self.spot) and self.spot > 0.0):
            raise InvalidParameterError(f"spot must be positive, got {self.spot!r}")
        if not (math.isfinite(self.strike) and self.strike > 0.0):
            raise InvalidParameterError(f"strike must be positive, got {self.strike!r}")

    @property
    def S(self) -> float:
        return self.spot

    @property
    def K(self) -> float:
        return self.strike

    @property
    def T(self) -> float:
        return self.maturity


@dataclass(frozen=True, slots=True)
class ModelParameters:
    """Model inputs passed by value to the pricers.

    Parameters
    ----------
    volatility : float
        Annualized volatility, :math:`\\sigma`.
    curve : Curve or None, default None
        Risk-free discount curve. May be overridden per pricing call.
    dividend_yield : float, default 0.0
        Continuously-compounded dividend yield, :math:`q`.
    """

    volatility: float
    curve: Curve | None = None
    dividend_yield: float = 0.0

    def with_volatility(self, volatility: float) -> ModelParameters:
        return replace(self, volatility=float(volatility))


@dataclass(frozen=True, slots=True)
class Greeks:
    """Price sensitivities; a model leaves unavailable entries as None.

    ``vega`` and ``rho`` are per unit (1.00 = 100%) change, ``theta`` is
    :math:`\\partial V/\\partial t` per year of calendar time.
    """

    delta: float | None = None
    gamma: float | None = None
    vega: float | None = None
    theta: float | None = None
    rho: float | None = None

    def to_dict(self) -> dict[str, float | None]:
        return {
            "delta": self.delta,
            "gamma": self.gamma,
            "vega": self.vega,
            "theta": self.theta,
            "rho": self.rho,
        }


@dataclass(frozen=True, slots=True)
class PricingResult:
    price: float
    model: PricingModel
    greeks: Greeks | None = None
    std_error: float | None = None  # Monte Carlo only

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": RESULT_FORMAT,
            "version": RESULT_VERSION,
            "model": self.model.value,
            "price": self.price,
            "greeks": None if self.greeks is None else self.greeks.to_dict(),
            "std_error": self.std_error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PricingResult:
        if data.get("format") != RESULT_FORMAT:
            raise ConfigurationError(f"not a pricing result record: {data.get('format')!r}")
        if data.get("version") != RESULT_VERSION:
            raise ConfigurationError(
                f"unsupported pricing result version {data.get('version')!r}"
            )
        greeks = data.get("greeks")
        return cls(
            price=float(data["price"]),
            model=PricingModel(data["model"]),
            greeks=None if greeks is None else Greeks(**greeks),
            std_error=data.get("std_error"),
        )
