from __future__ import annotations


class QuantLibError(Exception):
    """Base class for every failure raised by :mod:`quantlib_api`."""


class ConfigurationError(QuantLibError, ValueError):
    """Raised for malformed static input.

    Examples are unsorted or duplicated sample abscissae, too few interpolation
    points, an unknown serialization format, or an invalid config value.
    """


class OutOfRangeError(QuantLibError, ValueError):
    """Raised when a query falls outside the sample range under strict extrapolation."""


class RootFindingError(QuantLibError):
    """Base class for root-finding failures."""


class InvalidBracketError(RootFindingError):
    """Raised when a bracketing method is called without a valid sign change."""


class ConvergenceError(RootFindingError):
    """Raised when a solver fails to reach tolerance within its iteration budget."""


class InvalidParameterError(QuantLibError, ValueError):
    """Raised for out-of-domain model inputs (non-positive vol, maturity, spot...)."""


class UnsupportedExerciseStyleError(QuantLibError, ValueError):
    """Raised when a pricing model cannot handle the requested exercise style."""


class CurveBuildError(QuantLibError):
    """Raised when bootstrapping fails. No partial curve is ever returned.

    Parameters
    ----------
    message : str
        Human-readable description.
    maturity : float or None
        Maturity (years) of the pivot that could not be solved.
    instrument_id : str or None
        Identifier of the offending quote.
    """

    def __init__(
        self,
        message: str,
        *,
        maturity: float | None = None,
        instrument_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.maturity = maturity
        self.instrument_id = instrument_id


class DuplicateMaturityError(CurveBuildError):
    """Raised when two quotes share the same maturity."""


class ArbitrageViolationError(QuantLibError, ValueError):
    """Raised when an observed option price violates no-arbitrage bounds.

    The bounds used for European options are:

    - Call: ``max(Fp - K*df, 0) <= C <= Fp``
    - Put : ``max(K*df - Fp, 0) <= P <= K*df``

    where ``df`` is the curve discount factor at expiry and
    ``Fp = S*exp(-q*T)`` is the prepaid forward. American bounds additionally
    include immediate exercise value.
    """

    def __init__(
        self,
        message: str,
        *,
        price: float | None = None,
        bounds: tuple[float, float] | None = None,
    ) -> None:
        super().__init__(message)
        self.price = price
        self.bounds = bounds
