"""Shared test fixtures for PyMLS tests."""

import math

import numpy as np
import pytest

from pymls import MLSReconstruction


# ---------------------------------------------------------------------------
# Reference geometry: 5 non-uniform nodes per axis, spacing chosen so the
# Chebyshev arguments stay in [-1, 1]
# ---------------------------------------------------------------------------

REFERENCE_X = [0.0, 0.1, 0.5, 1.0, 1.3]
REFERENCE_H = [0.1, 0.4, 0.5, 0.5, 0.3]


def monomial(exponents):
    """Callable ``f(point, data)`` for prod_d x_d**e_d."""
    def f(x, _):
        return math.prod(x[d] ** e for d, e in enumerate(exponents))
    return f


def brute_force_gram(grid, index_set, degree, particles, node):
    """Per-particle, per-entry accumulation of one node's Gram matrix."""
    from pymls.chebyshev import chebyshev_polynomials

    nb = len(index_set)
    M = np.zeros((nb, nb))
    x_node = grid.node_coordinates(node)
    h_node = grid.node_spacing(node)
    for cell in range(grid.n_cells):
        if node not in grid.cell_nodes[cell]:
            continue
        edges = grid.cell_edges(cell)
        for p in particles[cell]:
            W = 1.0
            T = []
            for d in range(grid.num_dimensions):
                T.append(chebyshev_polynomials(degree, (x_node[d] - p[d]) / h_node[d]))
                W *= 1.0 - abs(x_node[d] - p[d]) / edges[d]
            for k in range(nb):
                for l in range(nb):
                    TkTl = 1.0
                    for d in range(grid.num_dimensions):
                        TkTl *= T[d][index_set[k, d]] * T[d][index_set[l, d]]
                    M[k, l] += W * TkTl
    return M


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module")
def mls_cubic_2d():
    """Built 2D, degree-3 reconstruction on the reference grid."""
    mls = MLSReconstruction(
        2, 3, [REFERENCE_X, REFERENCE_X], [REFERENCE_H, REFERENCE_H],
        particles_per_cell=40,
    )
    mls.build(verbose=False, seed=7)
    return mls


@pytest.fixture(scope="module")
def mls_linear_1d():
    """Built 1D, degree-1 reconstruction on nodes {0, 1, 2}, every cell seeded."""
    mls = MLSReconstruction(
        1, 1, [[0.0, 1.0, 2.0]], [[1.0, 1.0, 1.0]],
        particles_per_cell=8, exclude_boundary_cells=False,
    )
    mls.build(verbose=False, seed=0)
    return mls


@pytest.fixture
def mls_truncated_1d():
    """1D, degree-3 basis with one particle per cell: every node truncated."""
    mls = MLSReconstruction(
        1, 3, [[0.0, 1.0, 2.0]], [[1.0, 1.0, 1.0]],
        particles_per_cell=1, exclude_boundary_cells=False,
    )
    mls.build(verbose=False, seed=3)
    return mls
