import numpy as np
import pytest

from quantlib_api.exceptions import ConfigurationError
from quantlib_api.numerics.tridiag import SymmetricTridiag, solve_tridiag


def spline_like_system(rng: np.random.Generator, n: int) -> SymmetricTridiag:
    """Moment matrix of a natural spline on random knot spacings."""
    h = rng.uniform(0.1, 2.0, size=n + 1)
    return SymmetricTridiag(diag=2.0 * (h[:-1] + h[1:]), off=h[1:-1])


@pytest.mark.parametrize("n", [1, 2, 5, 50])
def test_solution_matches_dense_solve(rng, n):
    g = rng(123 + n)
    A = spline_like_system(g, n)
    rhs = g.normal(size=n)

    x = solve_tridiag(A, rhs)
    np.testing.assert_allclose(A.to_dense() @ x, rhs, rtol=0, atol=1e-10)
    np.testing.assert_allclose(x, np.linalg.solve(A.to_dense(), rhs), rtol=1e-10)


def test_inputs_are_not_mutated(rng):
    g = rng(7)
    A = spline_like_system(g, 6)
    rhs = g.normal(size=6)
    before = (A.diag.copy(), A.off.copy(), rhs.copy())

    solve_tridiag(A, rhs)

    for orig, now in zip(before, (A.diag, A.off, rhs), strict=True):
        np.testing.assert_array_equal(orig, now)


def test_off_diagonal_shape_is_checked():
    with pytest.raises(ConfigurationError):
        SymmetricTridiag(diag=np.array([2.0, 2.0, 2.0]), off=np.array([1.0]))


def test_rhs_shape_is_checked():
    A = SymmetricTridiag(diag=np.array([2.0, 2.0]), off=np.array([1.0]))
    with pytest.raises(ConfigurationError):
        solve_tridiag(A, np.ones(3))


def test_zero_pivot_raises():
    A = SymmetricTridiag(diag=np.array([0.0, 1.0]), off=np.array([1.0]))
    with pytest.raises(np.linalg.LinAlgError):
        solve_tridiag(A, np.ones(2))
