"""Weighted moment (Gram) matrices of the local Chebyshev basis at grid nodes.

Every particle contributes to the ``2**d`` corner nodes of its cell with the
multilinear hat weight

.. math::

    W = \\prod_{a} \\left(1 - \\frac{|x_{node,a} - x_{p,a}|}{h_{cell,a}}\\right)

and the local basis ``T_k((x_node - x_p) / hv_node)``. Node ``i`` collects

.. math::

    M_i[k, l] = \\sum_p W \\, T_k \\, T_l

over all its particle incidences. The MLS correction coefficients solve
``M_i alpha = T(0)``, which makes the corrected kernel reproduce every
polynomial spanned by the basis at the node.
"""

from __future__ import annotations

import time
from typing import List

import numpy as np

from pymls.chebyshev import chebyshev_polynomials, tensor_basis
from pymls.grid import TensorGrid


def nodal_weights(node_coords: np.ndarray, particles: np.ndarray,
                  cell_edges: np.ndarray) -> np.ndarray:
    """Multilinear hat weight of a node at each particle of one cell.

    Not clamped: particles farther than one cell edge give negative factors.

    Returns
    -------
    ndarray of shape (P,)
    """
    return np.prod(1.0 - np.abs(node_coords - particles) / cell_edges, axis=1)


def local_basis(index_set: np.ndarray, degree: int, node_coords: np.ndarray,
                node_spacing: np.ndarray, particles: np.ndarray) -> np.ndarray:
    """Chebyshev basis centred at a node, evaluated at each particle.

    Returns
    -------
    ndarray of shape (P, nb)
    """
    xi = (node_coords - particles) / node_spacing
    return tensor_basis(index_set, degree, xi)


class MomentAssembly:
    """Per-node weighted Gram matrices and particle incidence counts.

    All matrices live in one array ``gram`` of shape ``(n_nodes, nb, nb)``;
    the system solved at a node uses its leading
    ``basis_count(node) x basis_count(node)`` block.

    Parameters
    ----------
    index_set : ndarray of shape (nb, d)
        Basis ordering.
    degree : int
        Maximum basis degree.
    gram : ndarray of shape (n_nodes, nb, nb)
        Untruncated Gram matrices.
    incidence : ndarray of shape (n_nodes,)
        Number of particle/node incidences per node.
    """

    def __init__(self, index_set: np.ndarray, degree: int,
                 gram: np.ndarray, incidence: np.ndarray):
        self.index_set = index_set
        self.degree = degree
        self.gram = gram
        self.incidence = incidence

        # Basis values at the node itself (local origin)
        T0 = chebyshev_polynomials(degree, 0.0)
        self.rhs = np.prod(T0[index_set], axis=1)

    @property
    def n_nodes(self) -> int:
        return self.gram.shape[0]

    def basis_count(self, node: int) -> int:
        """Number of basis terms the node can resolve: min(incidence, nb)."""
        return int(min(self.incidence[node], len(self.index_set)))

    def augmented_matrix(self, node: int) -> np.ndarray:
        """Truncated system ``[M | T(0)]`` of shape ``(m, m + 1)``.

        Raises
        ------
        ValueError
            If the node has no particle incidences.
        """
        m = self.basis_count(node)
        if m == 0:
            raise ValueError(f"Node {node} has no particle incidences")
        A = np.empty((m, m + 1))
        A[:, :m] = self.gram[node, :m, :m]
        A[:, m] = self.rhs[:m]
        return A


def assemble_moments(grid: TensorGrid, index_set: np.ndarray, degree: int,
                     particles: List[np.ndarray],
                     verbose: bool = False) -> MomentAssembly:
    """Accumulate the weighted Gram matrix of every node.

    Parameters
    ----------
    grid : TensorGrid
        Grid geometry and topology.
    index_set : ndarray of shape (nb, d)
        Basis multi-indices.
    degree : int
        Maximum basis degree.
    particles : list of ndarray
        Per-cell particle positions, each of shape ``(P, d)``.
    verbose : bool, optional
        If True, print a summary. Default is False.

    Returns
    -------
    MomentAssembly
    """
    if len(particles) != grid.n_cells:
        raise ValueError(
            f"Expected particles for {grid.n_cells} cells, got {len(particles)}"
        )

    start = time.time()
    nb = len(index_set)
    gram = np.zeros((grid.n_nodes, nb, nb))
    incidence = np.zeros(grid.n_nodes, dtype=np.intp)

    for cell in range(grid.n_cells):
        xp = particles[cell]
        if len(xp) == 0:
            continue
        edges = grid.cell_edges(cell)
        for node in grid.cell_nodes[cell]:
            x_node = grid.node_coordinates(node)
            W = nodal_weights(x_node, xp, edges)
            B = local_basis(index_set, degree, x_node, grid.node_spacing(node), xp)
            G = (B * W[:, np.newaxis]).T @ B
            gram[node] += 0.5 * (G + G.T)
            incidence[node] += len(xp)

    if verbose:
        touched = int(np.count_nonzero(incidence))
        total = sum(len(xp) for xp in particles)
        print(f"  Assembled {nb}x{nb} moments for {touched}/{grid.n_nodes} nodes "
              f"from {total:,} particles in {time.time() - start:.3f}s")

    return MomentAssembly(index_set, degree, gram, incidence)
