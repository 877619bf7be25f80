"""Moving-least-squares particle-to-grid reconstruction and its patch test.

:class:`MLSReconstruction` seeds particles in the cells of a tensor-product
grid, assembles the weighted Chebyshev moment matrix of every node, solves
for the per-node correction coefficients ``alpha`` and transfers particle
data back to the nodes:

.. math::

    U_i = \\sum_p W_i(x_p) \\Big(\\sum_k \\alpha_{i,k}\\, T_k(\\xi_{i,p})\\Big) f(x_p)

For any polynomial ``f`` in the span of the basis, ``U_i = f(x_i)`` up to
round-off; :meth:`MLSReconstruction.patch_test` checks exactly that.
"""

from __future__ import annotations

import math
import time
import warnings
from typing import Callable, Dict, List, Sequence, Tuple

import numpy as np

from pymls.grid import TensorGrid
from pymls.linalg import SingularMatrixError, gaussian_elimination
from pymls.moments import MomentAssembly, assemble_moments, local_basis, nodal_weights
from pymls.multi_index import compute_index_set


def split_degree(degree: int, num_dimensions: int) -> List[int]:
    """Split *degree* over the axes as evenly as possible, remainder on axis 0."""
    exponents = [degree // num_dimensions] * num_dimensions
    exponents[0] += degree % num_dimensions
    return exponents


def _monomial(exponents: Sequence[int]) -> Callable:
    def f(x, _):
        return math.prod(x[d] ** e for d, e in enumerate(exponents))
    return f


class PatchTestReport:
    """Outcome of a patch test.

    Parameters
    ----------
    exponents : list of int
        Per-axis exponents of the tested monomial.
    tolerance : float
        Absolute tolerance applied at each node.
    nodes : list of int
        Nodes that were checked.
    exact : ndarray
        Exact monomial values at *nodes*.
    reconstructed : ndarray
        Reconstructed values at *nodes*.
    singular_nodes : list of int
        Nodes skipped because their moment matrix was singular.
    """

    def __init__(
        self,
        exponents: List[int],
        tolerance: float,
        nodes: List[int],
        exact: np.ndarray,
        reconstructed: np.ndarray,
        singular_nodes: List[int],
    ):
        self.exponents = list(exponents)
        self.tolerance = tolerance
        self.nodes = list(nodes)
        self.exact = np.asarray(exact, dtype=float)
        self.reconstructed = np.asarray(reconstructed, dtype=float)
        self.singular_nodes = list(singular_nodes)

        errors = np.abs(self.exact - self.reconstructed)
        self.max_error = float(errors.max()) if len(errors) else 0.0
        self.failures: List[Tuple[int, float, float]] = [
            (node, float(ex), float(ur))
            for node, ex, ur, err in zip(self.nodes, self.exact, self.reconstructed, errors)
            if not err <= tolerance
        ]

    @property
    def passed(self) -> bool:
        """True if every checked node is within tolerance and none was skipped."""
        return not self.failures and not self.singular_nodes

    @property
    def polynomial(self) -> str:
        return " * ".join(f"x{d}^{e}" for d, e in enumerate(self.exponents))

    def __repr__(self) -> str:
        return (
            f"PatchTestReport(polynomial='{self.polynomial}', "
            f"nodes={len(self.nodes)}, failures={len(self.failures)}, "
            f"singular={len(self.singular_nodes)}, passed={self.passed})"
        )

    def __str__(self) -> str:
        lines = ["Testing Polynomial", f"Pn = {self.polynomial}"]
        for node, exact, reconstructed in self.failures:
            lines.append(
                f"Error at node = {node} exact value = {exact} "
                f"reconstructed value = {reconstructed}"
            )
        for node in self.singular_nodes:
            lines.append(f"Singular moment matrix at node = {node}, node skipped")
        if self.passed:
            lines.append("Test passed")
        else:
            lines.append(
                f"Test failed: {len(self.failures)} of {len(self.nodes)} nodes "
                f"outside tolerance {self.tolerance:g}, "
                f"{len(self.singular_nodes)} singular"
            )
        return "\n".join(lines)


class MLSReconstruction:
    """Per-node MLS correction coefficients on a tensor-product grid.

    Parameters
    ----------
    num_dimensions : int
        Number of spatial dimensions.
    degree : int
        Total degree of the Chebyshev basis (and of exactly reproduced
        polynomials).
    coordinates : list of array_like
        Node coordinates per axis; all axes have the same node count.
    spacing : list of array_like
        Per-node Chebyshev scale per axis, same shape as *coordinates*.
    particles_per_cell : int, optional
        Particles seeded in each cell. Defaults to the basis size
        ``C(d + degree, degree)``.
    exclude_boundary_cells : bool, optional
        If True (default), cells at either end of axis 0 get no particles.
    pivoting : {'first', 'partial'}, optional
        Pivot rule of the per-node solver. Default is ``'first'``.

    Examples
    --------
    >>> mls = MLSReconstruction(1, 1, [[0.0, 1.0, 2.0]], [[1.0, 1.0, 1.0]],
    ...                         particles_per_cell=8,
    ...                         exclude_boundary_cells=False)
    >>> mls.build(verbose=False, seed=0)
    >>> mls.patch_test(verbose=False).passed
    True
    """

    def __init__(
        self,
        num_dimensions: int,
        degree: int,
        coordinates: List[Sequence[float]],
        spacing: List[Sequence[float]],
        particles_per_cell: int | None = None,
        exclude_boundary_cells: bool = True,
        pivoting: str = "first",
    ):
        if pivoting not in ("first", "partial"):
            raise ValueError(f"pivoting must be 'first' or 'partial', got {pivoting!r}")

        self.num_dimensions = num_dimensions
        self.degree = degree
        self.grid = TensorGrid(num_dimensions, coordinates, spacing)
        self.index_set = compute_index_set(degree, num_dimensions)

        if particles_per_cell is None:
            particles_per_cell = len(self.index_set)
        if particles_per_cell < 0:
            raise ValueError(f"particles_per_cell must be >= 0, got {particles_per_cell}")
        self.particles_per_cell = particles_per_cell
        self.exclude_boundary_cells = exclude_boundary_cells
        self.pivoting = pivoting

        self.particles: List[np.ndarray] | None = None
        self.moments: MomentAssembly | None = None
        self.alpha: Dict[int, np.ndarray] | None = None
        self.singular_nodes: List[int] = []
        self.build_time: float = 0.0

    @property
    def n_basis(self) -> int:
        return len(self.index_set)

    @property
    def resolved_nodes(self) -> List[int]:
        """Nodes holding correction coefficients, in ascending order."""
        if self.alpha is None:
            return []
        return sorted(self.alpha)

    def build(self, verbose: bool = True, seed: int | None = None,
              particles: List[np.ndarray] | None = None) -> None:
        """Seed particles, assemble moment matrices and solve every node.

        Nodes without particle incidences are skipped silently. Nodes whose
        moment matrix is singular are skipped, listed in
        :attr:`singular_nodes` and reported with a single warning. If the
        build raises, the results of any previous build are kept.

        Parameters
        ----------
        verbose : bool, optional
            If True, print build progress. Default is True.
        seed : int or None, optional
            Seed for particle sampling. Default is None.
        particles : list of ndarray, optional
            Explicit per-cell particle positions (shape ``(P, d)`` each)
            used instead of random sampling. They are used as given, so
            ``exclude_boundary_cells`` does not apply to them.

        Raises
        ------
        ValueError
            If *particles* does not hold one ``(P, d)`` array per cell.
        """
        grid = self.grid
        if verbose:
            print(f"Building {self.num_dimensions}D MLS reconstruction "
                  f"(degree {self.degree}, {self.n_basis} basis terms, "
                  f"{grid.n_nodes:,} nodes, {grid.n_cells:,} cells)...")

        start = time.time()

        # Step 1: Particles
        if particles is None:
            rng = np.random.default_rng(seed)
            particles = grid.sample_particles(
                self.particles_per_cell, rng, self.exclude_boundary_cells
            )
        else:
            particles = [np.asarray(xp, dtype=float) for xp in particles]
            for i, xp in enumerate(particles):
                if xp.ndim != 2 or xp.shape[1] != self.num_dimensions:
                    raise ValueError(
                        f"particles[{i}] must have shape (P, {self.num_dimensions}), "
                        f"got {xp.shape}"
                    )

        # Step 2: Moment matrices
        moments = assemble_moments(
            grid, self.index_set, self.degree, particles, verbose=verbose
        )

        # Step 3: Per-node correction coefficients
        alpha = {}
        singular_nodes = []
        for node in range(grid.n_nodes):
            if moments.basis_count(node) == 0:
                continue
            try:
                alpha[node] = gaussian_elimination(
                    moments.augmented_matrix(node), pivoting=self.pivoting
                )
            except SingularMatrixError:
                singular_nodes.append(node)

        self.particles = particles
        self.moments = moments
        self.alpha = alpha
        self.singular_nodes = singular_nodes
        self.build_time = time.time() - start

        if self.singular_nodes:
            warnings.warn(
                f"Singular moment matrix at {len(self.singular_nodes)} node(s) "
                f"{self.singular_nodes}; these nodes are left unresolved.",
                UserWarning,
                stacklevel=2,
            )

        if verbose:
            truncated = sum(
                1 for node in self.alpha if len(self.alpha[node]) < self.n_basis
            )
            print(f"  Built in {self.build_time:.3f}s "
                  f"({len(self.alpha)} resolved, {truncated} truncated, "
                  f"{len(self.singular_nodes)} singular)")

    def reconstruct(self, function: Callable, data=None) -> np.ndarray:
        """Transfer a field sampled at the particles to the grid nodes.

        Parameters
        ----------
        function : callable
            Field to transfer. Signature: ``f(point, data) -> float``.
        data : optional
            Passed through to *function*.

        Returns
        -------
        ndarray of shape (n_nodes,)
            Reconstructed nodal values; ``nan`` at unresolved nodes.

        Raises
        ------
        RuntimeError
            If ``build()`` has not been called.
        """
        if self.alpha is None:
            raise RuntimeError("Call build() first")

        grid = self.grid
        Ur = np.zeros(grid.n_nodes)

        for cell in range(grid.n_cells):
            xp = self.particles[cell]
            if len(xp) == 0:
                continue
            values = np.array([function(list(p), data) for p in xp], dtype=float)
            edges = grid.cell_edges(cell)
            for node in grid.cell_nodes[cell]:
                alpha = self.alpha.get(int(node))
                if alpha is None:
                    continue
                x_node = grid.node_coordinates(node)
                W = nodal_weights(x_node, xp, edges)
                B = local_basis(self.index_set, self.degree, x_node,
                                grid.node_spacing(node), xp)
                sum_alpha_T = B[:, :len(alpha)] @ alpha
                Ur[node] += np.sum(W * sum_alpha_T * values)

        unresolved = np.ones(grid.n_nodes, dtype=bool)
        unresolved[self.resolved_nodes] = False
        Ur[unresolved] = np.nan
        return Ur

    def patch_test(self, test_degree: Sequence[int] | None = None,
                   tolerance: float = 1e-6, verbose: bool = True) -> PatchTestReport:
        """Check that a monomial is reproduced at every resolved node.

        Parameters
        ----------
        test_degree : list of int, optional
            Per-axis exponents of the monomial ``prod_d x_d**e_d``. Defaults
            to :func:`split_degree` of the basis degree.
        tolerance : float, optional
            Absolute tolerance per node. Default is 1e-6.
        verbose : bool, optional
            If True, print the report. Default is True.

        Returns
        -------
        PatchTestReport
        """
        if self.alpha is None:
            raise RuntimeError("Call build() first")

        if test_degree is None:
            test_degree = split_degree(self.degree, self.num_dimensions)
        if len(test_degree) != self.num_dimensions or any(e < 0 for e in test_degree):
            raise ValueError(
                f"test_degree must hold {self.num_dimensions} non-negative "
                f"exponents, got {list(test_degree)}"
            )

        f = _monomial(test_degree)
        Ur = self.reconstruct(f)
        nodes = self.resolved_nodes
        exact = np.array([f(list(self.grid.node_coordinates(i)), None) for i in nodes])

        report = PatchTestReport(
            test_degree, tolerance, nodes, exact, Ur[nodes], self.singular_nodes
        )
        if verbose:
            print(report)
        return report

    # ------------------------------------------------------------------
    # Printing
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        built = self.alpha is not None
        return (
            f"MLSReconstruction("
            f"dims={self.num_dimensions}, "
            f"degree={self.degree}, "
            f"nodes_per_axis={self.grid.n_nodes_1d}, "
            f"built={built})"
        )

    def __str__(self) -> str:
        built = self.alpha is not None
        status = "built" if built else "not built"
        grid = self.grid

        lines = [
            f"MLSReconstruction ({self.num_dimensions}D, {status})",
            f"  Basis:       degree {self.degree}, {self.n_basis} Chebyshev terms",
            f"  Grid:        {grid.n_nodes_1d} nodes per axis "
            f"({grid.n_nodes:,} nodes, {grid.n_cells:,} cells)",
            f"  Particles:   {self.particles_per_cell} per cell"
            + (", axis-0 boundary cells excluded" if self.exclude_boundary_cells else ""),
        ]

        if built:
            lines.append(
                f"  Build:       {self.build_time:.3f}s, "
                f"{len(self.alpha)} resolved, {len(self.singular_nodes)} singular"
            )

        lines.append(f"  Pivoting:    {self.pivoting}")

        return "\n".join(lines)
