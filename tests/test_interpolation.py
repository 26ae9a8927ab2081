import math

import numpy as np
import pytest

from quantlib_api.exceptions import ConfigurationError, OutOfRangeError
from quantlib_api.numerics import (
    Extrapolation,
    InterpolationMethod,
    Interpolator,
    interpolate,
)

ALL_METHODS = list(InterpolationMethod)

POINTS = [(0.5, 0.98), (1.0, 0.95), (2.0, 0.90), (5.0, 0.78), (10.0, 0.60)]


@pytest.mark.parametrize("method", ALL_METHODS, ids=lambda m: m.value)
def test_exact_at_sample_points(method):
    for x, y in POINTS:
        assert interpolate(POINTS, method, x) == y


@pytest.mark.parametrize("method", ALL_METHODS, ids=lambda m: m.value)
def test_flat_extrapolation_holds_end_values(method):
    assert interpolate(POINTS, method, 0.1) == POINTS[0][1]
    assert interpolate(POINTS, method, 30.0) == POINTS[-1][1]


@pytest.mark.parametrize("method", ALL_METHODS, ids=lambda m: m.value)
def test_strict_extrapolation_raises(method):
    with pytest.raises(OutOfRangeError):
        interpolate(POINTS, method, 12.0, extrapolation=Extrapolation.STRICT)
    with pytest.raises(OutOfRangeError):
        interpolate(POINTS, method, 0.0, extrapolation="strict")


def test_linear_midpoint():
    assert interpolate([(0.0, 1.0), (2.0, 3.0)], "linear", 0.5) == pytest.approx(1.5)


def test_log_linear_is_geometric_between_nodes():
    pts = [(1.0, 0.9), (3.0, 0.7)]
    got = interpolate(pts, InterpolationMethod.LOG_LINEAR, 2.0)
    assert got == pytest.approx(math.sqrt(0.9 * 0.7), rel=1e-14)


def test_natural_spline_reproduces_a_line():
    x = np.linspace(0.0, 4.0, 6)
    interp = Interpolator(x, 2.0 * x + 1.0, InterpolationMethod.CUBIC_SPLINE)
    xq = np.array([0.3, 1.7, 3.9])
    np.testing.assert_allclose(interp(xq), 2.0 * xq + 1.0, rtol=0, atol=1e-12)


def test_natural_spline_matches_known_value():
    # natural spline through (0,0), (1,1), (2,0): m1 = -3, S(0.5) = 0.6875
    got = interpolate([(0.0, 0.0), (1.0, 1.0), (2.0, 0.0)], "cubic_spline", 0.5)
    assert got == pytest.approx(0.6875, abs=1e-14)


def test_monotone_cubic_preserves_monotonicity():
    x = np.array([0.0, 1.0, 2.0, 3.0, 4.0])
    y = np.array([0.0, 0.1, 0.15, 2.0, 2.05])
    interp = Interpolator(x, y, InterpolationMethod.MONOTONE_CUBIC)
    vals = interp(np.linspace(0.0, 4.0, 401))
    assert np.all(np.diff(vals) >= -1e-14)


def test_vector_query_keeps_shape_and_scalar_returns_float():
    interp = Interpolator(np.array([0.0, 1.0]), np.array([0.0, 2.0]))
    assert isinstance(interp(0.25), float)
    assert interp(np.array([[0.25, 0.5]])).shape == (1, 2)


@pytest.mark.parametrize(
    "points, method",
    [
        ([(1.0, 1.0)], InterpolationMethod.LINEAR),
        ([(0.0, 1.0), (1.0, 2.0)], InterpolationMethod.CUBIC_SPLINE),
        ([(0.0, 1.0), (0.0, 2.0)], InterpolationMethod.LINEAR),
        ([(1.0, 1.0), (0.0, 2.0)], InterpolationMethod.LINEAR),
        ([(0.0, 1.0), (1.0, -2.0)], InterpolationMethod.LOG_LINEAR),
        ([(0.0, 1.0), (1.0, math.nan)], InterpolationMethod.LINEAR),
        ([], InterpolationMethod.LINEAR),
    ],
    ids=["one-point", "spline-two-points", "duplicate-x", "unsorted", "log-neg", "nan", "empty"],
)
def test_malformed_points_raise_configuration_error(points, method):
    with pytest.raises(ConfigurationError):
        interpolate(points, method, 0.5)


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        interpolate([(1.0, 1.0)], "linear", 1.0)
