"""Direct solver for the small dense per-node moment systems."""

from __future__ import annotations

import numpy as np

from pymls._jit import gaussian_elimination_jit


class SingularMatrixError(np.linalg.LinAlgError):
    """Raised when Gaussian elimination finds no usable pivot."""


def gaussian_elimination(augmented, pivoting: str = "first",
                         verbose: bool = False) -> np.ndarray:
    """Solve ``M x = b`` given the augmented matrix ``[M | b]``.

    Forward elimination with row swaps followed by back substitution. The
    input is copied and left untouched.

    Parameters
    ----------
    augmented : array_like of shape (n, n + 1)
        System matrix with the right-hand side as its last column.
    pivoting : {'first', 'partial'}, optional
        ``'first'`` (default) swaps in the first row with a non-zero entry
        in the pivot column. ``'partial'`` swaps in the row with the
        largest magnitude entry.
    verbose : bool, optional
        If True, print the matrix before and after elimination.

    Returns
    -------
    ndarray of shape (n,)
        Solution vector.

    Raises
    ------
    ValueError
        If the input is not ``n x (n + 1)`` with ``n >= 1`` or *pivoting*
        is unknown.
    SingularMatrixError
        If a pivot column has no non-zero entry at or below the diagonal,
        or the last diagonal entry is zero after elimination.
    """
    if pivoting not in ("first", "partial"):
        raise ValueError(f"pivoting must be 'first' or 'partial', got {pivoting!r}")

    A = np.array(augmented, dtype=np.float64)
    if A.ndim != 2 or A.shape[0] < 1 or A.shape[1] != A.shape[0] + 1:
        raise ValueError(f"Expected an n x (n+1) augmented matrix, got shape {A.shape}")

    if verbose:
        print("Before elimination")
        print(A)

    x, ok = gaussian_elimination_jit(A, pivoting == "partial")
    if not ok:
        raise SingularMatrixError(
            f"Matrix of size {A.shape[0]} is singular (no non-zero pivot)"
        )

    if verbose:
        print("After elimination")
        print(A[:, :-1])

    return x
