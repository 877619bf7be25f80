"""Numba JIT-compiled kernel for the per-node Gaussian elimination.

The kernel works in place on a contiguous float64 copy owned by the caller
and reports a singular system through its status flag, since the public
wrapper (:func:`pymls.linalg.gaussian_elimination`) raises the exception.
"""

import numpy as np
from numba import njit


@njit(cache=True)
def gaussian_elimination_jit(A: np.ndarray, partial_pivoting: bool):
    """Reduce an augmented matrix to upper triangular form and back-substitute.

    Parameters
    ----------
    A : ndarray of shape (n, n + 1)
        Augmented system ``[M | b]``. Overwritten.
    partial_pivoting : bool
        If True, pick the largest-magnitude pivot in each column. Otherwise
        pick the first non-zero entry at or below the diagonal.

    Returns
    -------
    x : ndarray of shape (n,)
        Solution (zeros if the system is singular).
    ok : bool
        False if no non-zero pivot was found or the last diagonal is zero.
    """
    n = A.shape[0]
    x = np.zeros(n)

    for i in range(n - 1):
        p = i
        if partial_pivoting:
            for r in range(i + 1, n):
                if abs(A[r, i]) > abs(A[p, i]):
                    p = r
            if A[p, i] == 0.0:
                return x, False
        else:
            while A[p, i] == 0.0:
                p += 1
                if p == n:
                    return x, False

        if p != i:
            for j in range(n + 1):
                tmp = A[i, j]
                A[i, j] = A[p, j]
                A[p, j] = tmp

        for j in range(i + 1, n):
            mji = A[j, i] / A[i, i]
            for k in range(i, n + 1):
                A[j, k] -= mji * A[i, k]

    if A[n - 1, n - 1] == 0.0:
        return x, False

    x[n - 1] = A[n - 1, n] / A[n - 1, n - 1]
    for i in range(n - 2, -1, -1):
        s = A[i, n]
        for j in range(i + 1, n):
            s -= A[i, j] * x[j]
        x[i] = s / A[i, i]

    return x, True
