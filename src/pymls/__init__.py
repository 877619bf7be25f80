"""PyMLS: moving-least-squares particle-to-grid reconstruction.

Provides the :class:`MLSReconstruction` class, which builds per-node
correction coefficients for particles scattered over a tensor-product grid
from weighted moment matrices of a local Chebyshev basis, and verifies
polynomial reproduction with a patch test. The building blocks (index set
enumeration, grid numbering, Chebyshev recurrence, Gaussian elimination)
are importable from their submodules.

Example
-------
>>> from pymls import MLSReconstruction
>>> mls = MLSReconstruction(
...     2, 3,
...     coordinates=[[0.0, 0.1, 0.5, 1.0, 1.3]] * 2,
...     spacing=[[0.1, 0.4, 0.5, 0.5, 0.3]] * 2,
...     particles_per_cell=40,
... )
>>> mls.build(verbose=False, seed=1)
>>> mls.patch_test(verbose=False).passed
True
"""

from pymls._version import __version__
from pymls.grid import TensorGrid
from pymls.linalg import SingularMatrixError, gaussian_elimination
from pymls.multi_index import compute_index_set
from pymls.reconstruction import MLSReconstruction, PatchTestReport

__all__ = [
    "MLSReconstruction",
    "PatchTestReport",
    "SingularMatrixError",
    "TensorGrid",
    "compute_index_set",
    "gaussian_elimination",
    "__version__",
]
