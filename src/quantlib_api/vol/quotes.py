from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from quantlib_api.exceptions import ConfigurationError
from quantlib_api.types import ExerciseStyle, OptionType


@dataclass(frozen=True, slots=True)
class OptionQuote:
    """Observed option premium on a (maturity, strike) grid node.

    Parameters
    ----------
    option_type : OptionType
        Call or put.
    strike : float
        Strike price, > 0.
    maturity : float
        Time to expiry in years, > 0.
    price : float
        Observed premium, >= 0.
    exercise : ExerciseStyle, default EUROPEAN
        Exercise style.
    instrument_id : str, default ""
        Optional identifier carried into log messages.
    """

    option_type: OptionType
    strike: float
    maturity: float
    price: float
    exercise: ExerciseStyle = ExerciseStyle.EUROPEAN
    instrument_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "option_type", OptionType(self.option_type))
        object.__setattr__(self, "exercise", ExerciseStyle(self.exercise))
        if not (math.isfinite(self.strike) and self.strike > 0.0):
            raise ConfigurationError(f"strike must be positive, got {self.strike!r}")
        if not (math.isfinite(self.maturity) and self.maturity > 0.0):
            raise ConfigurationError(
                f"maturity must be positive, got {self.maturity!r}"
            )
        if not (math.isfinite(self.price) and self.price >= 0.0):
            raise ConfigurationError(f"price must be >= 0, got {self.price!r}")

    @property
    def label(self) -> str:
        if self.instrument_id:
            return self.instrument_id
        return f"{self.option_type.value} K={self.strike:g} T={self.maturity:g}"


def group_by_maturity(
    quotes: Iterable[OptionQuote],
) -> dict[float, list[OptionQuote]]:
    """Quotes keyed by maturity (ascending), each list sorted by strike."""
    grouped: dict[float, list[OptionQuote]] = defaultdict(list)
    for q in quotes:
        grouped[q.maturity].append(q)
    return {
        T: sorted(grouped[T], key=lambda q: q.strike) for T in sorted(grouped)
    }
