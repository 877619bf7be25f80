"""Tensor-product grid topology: node/cell numbering and particle seeding.

Nodes and cells are numbered row-major with axis 0 most significant, so the
flat id of multi-index ``(i_0, ..., i_{d-1})`` on an axis of size ``n`` is
``sum_d i_d * n**(d_count - 1 - d)``.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np


def get_multi_index(flat_id: int, num_dimensions: int, n: int) -> Tuple[int, ...]:
    """Decode a flat id into its per-axis index tuple.

    Parameters
    ----------
    flat_id : int
        Row-major id in ``[0, n**num_dimensions)``.
    num_dimensions : int
        Number of axes.
    n : int
        Number of entries per axis.

    Returns
    -------
    tuple of int
        Axis indices, axis 0 first.
    """
    if flat_id < 0 or flat_id >= n ** num_dimensions:
        raise ValueError(
            f"flat_id {flat_id} out of range [0, {n ** num_dimensions - 1}]"
        )
    return tuple(
        (flat_id % n ** (num_dimensions - d)) // n ** (num_dimensions - 1 - d)
        for d in range(num_dimensions)
    )


def flat_index(multi_index: Sequence[int], n: int) -> int:
    """Inverse of :func:`get_multi_index`."""
    num_dimensions = len(multi_index)
    flat_id = 0
    for d, i in enumerate(multi_index):
        if i < 0 or i >= n:
            raise ValueError(f"Index {i} on axis {d} out of range [0, {n - 1}]")
        flat_id += int(i) * n ** (num_dimensions - 1 - d)
    return flat_id


def cell_corners(cell_multi_index: Sequence[int], n_nodes_1d: int) -> np.ndarray:
    """Node ids of the ``2**d`` corners of a cell.

    Corner ``j`` is offset by bit ``d_count - 1 - d`` of ``j`` along axis
    ``d``; for a quad this gives ``(0,0), (0,1), (1,0), (1,1)``.

    Parameters
    ----------
    cell_multi_index : sequence of int
        Per-axis cell index, each in ``[0, n_nodes_1d - 2]``.
    n_nodes_1d : int
        Number of nodes per axis.

    Returns
    -------
    ndarray of shape (2**d,)
        Flat node ids.
    """
    num_dimensions = len(cell_multi_index)
    for d, i in enumerate(cell_multi_index):
        if i < 0 or i >= n_nodes_1d - 1:
            raise ValueError(
                f"Cell index {i} on axis {d} out of range [0, {n_nodes_1d - 2}]"
            )

    n_corners = 2 ** num_dimensions
    corners = np.empty(n_corners, dtype=np.intp)
    for j in range(n_corners):
        node = [
            cell_multi_index[d] + ((j >> (num_dimensions - 1 - d)) & 1)
            for d in range(num_dimensions)
        ]
        corners[j] = flat_index(node, n_nodes_1d)
    return corners


class TensorGrid:
    """Tensor-product lattice with per-axis (possibly non-uniform) coordinates.

    Parameters
    ----------
    num_dimensions : int
        Number of axes.
    coordinates : list of array_like
        Strictly increasing node coordinates for each axis. All axes must
        have the same number of nodes (>= 2).
    spacing : list of array_like
        Positive per-node length scale for each axis, same shape as
        *coordinates*. Used to normalize Chebyshev arguments.
    """

    def __init__(
        self,
        num_dimensions: int,
        coordinates: List[Sequence[float]],
        spacing: List[Sequence[float]],
    ):
        if num_dimensions < 1:
            raise ValueError(f"num_dimensions must be >= 1, got {num_dimensions}")
        if len(coordinates) != num_dimensions or len(spacing) != num_dimensions:
            raise ValueError(
                f"len(coordinates)={len(coordinates)} and len(spacing)={len(spacing)} "
                f"must both equal num_dimensions={num_dimensions}"
            )

        self.num_dimensions = num_dimensions
        self.coordinates: List[np.ndarray] = [np.asarray(c, dtype=float) for c in coordinates]
        self.spacing: List[np.ndarray] = [np.asarray(h, dtype=float) for h in spacing]

        n = len(self.coordinates[0])
        for d in range(num_dimensions):
            x, h = self.coordinates[d], self.spacing[d]
            if x.ndim != 1 or len(x) != n:
                raise ValueError(
                    f"All axes need the same number of nodes; axis 0 has {n}, "
                    f"axis {d} has shape {x.shape}"
                )
            if h.shape != x.shape:
                raise ValueError(
                    f"spacing[{d}] has shape {h.shape}, expected {x.shape}"
                )
            if np.any(np.diff(x) <= 0):
                raise ValueError(f"coordinates[{d}] must be strictly increasing")
            if np.any(h <= 0):
                raise ValueError(f"spacing[{d}] must be positive")
        if n < 2:
            raise ValueError(f"Need at least 2 nodes per axis, got {n}")

        self.n_nodes_1d = n
        self.n_cells_1d = n - 1
        self.n_nodes = n ** num_dimensions
        self.n_cells = self.n_cells_1d ** num_dimensions
        self.edge_sizes: List[np.ndarray] = [np.diff(x) for x in self.coordinates]

        self.cell_nodes = np.empty((self.n_cells, 2 ** num_dimensions), dtype=np.intp)
        for cell in range(self.n_cells):
            self.cell_nodes[cell] = cell_corners(self.cell_index(cell), n)

    @classmethod
    def uniform(cls, num_dimensions: int, lo: float, hi: float,
                n_nodes_1d: int) -> "TensorGrid":
        """Equispaced grid on ``[lo, hi]**d`` with spacing equal to the cell edge."""
        x = np.linspace(lo, hi, n_nodes_1d)
        h = np.full(n_nodes_1d, (hi - lo) / (n_nodes_1d - 1))
        return cls(num_dimensions, [x] * num_dimensions, [h] * num_dimensions)

    def node_index(self, node: int) -> Tuple[int, ...]:
        return get_multi_index(node, self.num_dimensions, self.n_nodes_1d)

    def cell_index(self, cell: int) -> Tuple[int, ...]:
        return get_multi_index(cell, self.num_dimensions, self.n_cells_1d)

    def node_coordinates(self, node: int) -> np.ndarray:
        idx = self.node_index(node)
        return np.array([self.coordinates[d][idx[d]] for d in range(self.num_dimensions)])

    def node_spacing(self, node: int) -> np.ndarray:
        idx = self.node_index(node)
        return np.array([self.spacing[d][idx[d]] for d in range(self.num_dimensions)])

    def cell_edges(self, cell: int) -> np.ndarray:
        idx = self.cell_index(cell)
        return np.array([self.edge_sizes[d][idx[d]] for d in range(self.num_dimensions)])

    def cell_bounds(self, cell: int) -> Tuple[np.ndarray, np.ndarray]:
        """Lower and upper corner of the cell box."""
        idx = self.cell_index(cell)
        lo = np.array([self.coordinates[d][idx[d]] for d in range(self.num_dimensions)])
        hi = np.array([self.coordinates[d][idx[d] + 1] for d in range(self.num_dimensions)])
        return lo, hi

    def is_boundary_cell(self, cell: int) -> bool:
        """True if the cell touches either end of axis 0."""
        i0 = self.cell_index(cell)[0]
        return i0 == 0 or i0 == self.n_cells_1d - 1

    def sample_particles(
        self,
        n_per_cell: int,
        rng: np.random.Generator,
        exclude_boundary: bool = True,
    ) -> List[np.ndarray]:
        """Draw uniformly distributed particles inside every cell.

        Parameters
        ----------
        n_per_cell : int
            Particles per seeded cell.
        rng : numpy.random.Generator
            Random source.
        exclude_boundary : bool, optional
            If True (default), cells touching either end of axis 0 receive
            no particles.

        Returns
        -------
        list of ndarray
            One array of shape ``(P, d)`` per cell; ``P`` is 0 for
            excluded cells.
        """
        if n_per_cell < 0:
            raise ValueError(f"n_per_cell must be >= 0, got {n_per_cell}")

        particles = []
        for cell in range(self.n_cells):
            if exclude_boundary and self.is_boundary_cell(cell):
                particles.append(np.empty((0, self.num_dimensions)))
                continue
            lo, hi = self.cell_bounds(cell)
            particles.append(lo + (hi - lo) * rng.random((n_per_cell, self.num_dimensions)))
        return particles

    def __repr__(self) -> str:
        return (
            f"TensorGrid(dims={self.num_dimensions}, "
            f"nodes_per_axis={self.n_nodes_1d}, "
            f"cells={self.n_cells})"
        )
