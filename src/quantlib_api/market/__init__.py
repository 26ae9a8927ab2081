"""Market conventions: day counts and parity relations."""

from .daycount import DAYS_PER_YEAR, year_fraction
from .parity import parity_forward, put_call_parity_residual

__all__ = [
    "DAYS_PER_YEAR",
    "year_fraction",
    "parity_forward",
    "put_call_parity_residual",
]
