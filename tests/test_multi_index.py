"""Tests for total-degree multi-index enumeration."""

import math

import numpy as np
import pytest

from pymls.multi_index import compute_index_set, index_set_size


class TestIndexSetSize:
    @pytest.mark.parametrize("dim", [1, 2, 3, 4])
    @pytest.mark.parametrize("degree", [0, 1, 2, 3, 5])
    def test_binomial_count(self, dim, degree):
        index_set = compute_index_set(degree, dim)
        assert index_set.shape == (math.comb(dim + degree, degree), dim)

    @pytest.mark.parametrize("dim", [1, 2, 3])
    @pytest.mark.parametrize("degree", [0, 2, 4])
    def test_entries_valid_and_unique(self, dim, degree):
        index_set = compute_index_set(degree, dim)
        assert np.all(index_set >= 0)
        assert np.all(index_set.sum(axis=1) <= degree)
        assert len({tuple(k) for k in index_set.tolist()}) == len(index_set)

    def test_size_helper(self):
        assert index_set_size(3, 2) == 10
        assert index_set_size(0, 4) == 1


class TestOrdering:
    def test_quadratic_2d_order(self):
        """Odometer order with the counters reversed into each tuple."""
        expected = [[0, 0], [0, 1], [0, 2], [1, 0], [1, 1], [2, 0]]
        assert compute_index_set(2, 2).tolist() == expected

    def test_1d_is_ascending(self):
        assert compute_index_set(3, 1).tolist() == [[0], [1], [2], [3]]

    def test_degree_zero(self):
        assert compute_index_set(0, 3).tolist() == [[0, 0, 0]]

    def test_first_entry_is_constant(self):
        assert compute_index_set(4, 3)[0].tolist() == [0, 0, 0]

    def test_stable_between_calls(self):
        np.testing.assert_array_equal(compute_index_set(3, 3), compute_index_set(3, 3))


class TestValidation:
    def test_zero_dimensions(self):
        with pytest.raises(ValueError, match="num_dimensions"):
            compute_index_set(2, 0)

    def test_negative_degree(self):
        with pytest.raises(ValueError, match="degree"):
            compute_index_set(-1, 2)

    def test_verbose_prints_entries(self, capsys):
        compute_index_set(1, 2, verbose=True)
        out = capsys.readouterr().out
        assert "alpha[0][0]= 0" in out
        assert "alpha[2][0]= 1" in out
