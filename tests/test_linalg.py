"""Tests for the pivoted Gaussian elimination solver."""

import numpy as np
import pytest

from pymls.linalg import SingularMatrixError, gaussian_elimination


def _augment(M, b):
    return np.column_stack([np.asarray(M, dtype=float), np.asarray(b, dtype=float)])


class TestSolve:
    def test_hand_system(self):
        M = [[2.0, 1.0, -1.0], [-3.0, -1.0, 2.0], [-2.0, 1.0, 2.0]]
        b = [8.0, -11.0, -3.0]
        x = gaussian_elimination(_augment(M, b))
        np.testing.assert_allclose(x, [2.0, 3.0, -1.0], atol=1e-12)

    def test_zero_leading_entry_needs_swap(self):
        M = [[0.0, 2.0, 1.0], [1.0, 1.0, 0.0], [3.0, 0.0, 1.0]]
        b = [5.0, 3.0, 4.0]
        x = gaussian_elimination(_augment(M, b))
        np.testing.assert_allclose(np.dot(M, x), b, atol=1e-12)

    def test_one_by_one(self):
        np.testing.assert_allclose(gaussian_elimination([[4.0, 2.0]]), [0.5])

    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    @pytest.mark.parametrize("pivoting", ["first", "partial"])
    def test_random_spd(self, seed, pivoting):
        rng = np.random.default_rng(seed)
        V = rng.uniform(-1, 1, (12, 6))
        M = V.T @ V + 0.1 * np.eye(6)
        b = rng.uniform(-1, 1, 6)
        x = gaussian_elimination(_augment(M, b), pivoting=pivoting)
        np.testing.assert_allclose(x, np.linalg.solve(M, b), rtol=1e-10, atol=1e-12)

    def test_pivot_rules_agree(self):
        M = [[1e-3, 2.0], [3.0, 4.0]]
        b = [1.0, 2.0]
        x_first = gaussian_elimination(_augment(M, b), pivoting="first")
        x_partial = gaussian_elimination(_augment(M, b), pivoting="partial")
        np.testing.assert_allclose(x_first, x_partial, rtol=1e-10)

    def test_input_not_modified(self):
        A = _augment([[0.0, 1.0], [2.0, 3.0]], [1.0, 2.0])
        original = A.copy()
        gaussian_elimination(A)
        np.testing.assert_array_equal(A, original)


class TestSingular:
    def test_zero_column(self):
        A = _augment([[0.0, 1.0, 2.0], [0.0, 3.0, 1.0], [0.0, 1.0, 1.0]], [1, 2, 3])
        with pytest.raises(SingularMatrixError):
            gaussian_elimination(A)

    def test_zero_column_partial(self):
        A = _augment([[1.0, 0.0, 2.0], [3.0, 0.0, 1.0], [1.0, 0.0, 1.0]], [1, 2, 3])
        with pytest.raises(SingularMatrixError):
            gaussian_elimination(A, pivoting="partial")

    def test_zero_last_diagonal(self):
        A = _augment([[1.0, 1.0], [1.0, 1.0]], [2.0, 3.0])
        with pytest.raises(SingularMatrixError):
            gaussian_elimination(A)

    def test_zero_matrix(self):
        with pytest.raises(SingularMatrixError):
            gaussian_elimination(np.zeros((3, 4)))

    def test_is_linalg_error(self):
        with pytest.raises(np.linalg.LinAlgError):
            gaussian_elimination([[0.0, 1.0]])


class TestValidation:
    @pytest.mark.parametrize("shape", [(3, 3), (2, 4), (0, 1), (4,)])
    def test_bad_shape(self, shape):
        with pytest.raises(ValueError, match="augmented matrix"):
            gaussian_elimination(np.ones(shape))

    def test_bad_pivoting(self):
        with pytest.raises(ValueError, match="pivoting"):
            gaussian_elimination([[1.0, 1.0]], pivoting="full")

    def test_verbose(self, capsys):
        gaussian_elimination([[2.0, 1.0, 3.0], [1.0, 3.0, 5.0]], verbose=True)
        out = capsys.readouterr().out
        assert "Before elimination" in out
        assert "After elimination" in out
