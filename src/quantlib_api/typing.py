from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

FloatArray: TypeAlias = NDArray[np.floating]
ArrayLike: TypeAlias = float | np.ndarray | np.floating
ScalarFn: TypeAlias = Callable[[float], float]  # objective for the root finders
Payoff: TypeAlias = Callable[[np.ndarray], np.ndarray]  # vectorised terminal payoff
