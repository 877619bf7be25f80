"""Chebyshev polynomials of the first kind and their tensor products.

References
----------
- Trefethen (2013), "Approximation Theory and Approximation Practice",
  SIAM, Chapter 3.
"""

from __future__ import annotations

import numpy as np


def chebyshev_polynomials(degree: int, x, verbose: bool = False) -> np.ndarray:
    """Evaluate ``T_0(x), ..., T_degree(x)`` by the three-term recurrence.

    ``T_0 = 1``, ``T_1 = x``, ``T_i = 2 x T_{i-1} - T_{i-2}``.

    Parameters
    ----------
    degree : int
        Highest polynomial degree (>= 0).
    x : float or array_like
        Evaluation point(s). Arrays are evaluated elementwise.
    verbose : bool, optional
        If True, print the values, one block per element of *x*.
        Default is False.

    Returns
    -------
    ndarray of shape (degree + 1,) + shape(x)
        ``T[i]`` holds ``T_i(x)``.

    Raises
    ------
    ValueError
        If *degree* is negative.
    """
    if degree < 0:
        raise ValueError(f"degree must be >= 0, got {degree}")

    x = np.asarray(x, dtype=float)
    T = np.empty((degree + 1,) + x.shape)
    T[0] = 1.0
    if degree >= 1:
        T[1] = x
    for i in range(2, degree + 1):
        T[i] = 2.0 * x * T[i - 1] - T[i - 2]

    if verbose:
        for idx in np.ndindex(x.shape):
            print(f"Chebyshev polynomials at x = {float(x[idx])}")
            for i in range(degree + 1):
                print(f"T{i} [x] = {T[(i,) + idx]}")

    return T


def tensor_basis(index_set: np.ndarray, degree: int, xi: np.ndarray) -> np.ndarray:
    """Evaluate every tensor-product Chebyshev term at a batch of points.

    Parameters
    ----------
    index_set : ndarray of shape (nb, d)
        Multi-indices (see :func:`pymls.multi_index.compute_index_set`).
    degree : int
        Maximum degree appearing in *index_set*.
    xi : ndarray of shape (P, d)
        Chebyshev arguments, one row per point.

    Returns
    -------
    ndarray of shape (P, nb)
        ``out[p, k] = prod_d T_{index_set[k, d]}(xi[p, d])``.
    """
    xi = np.asarray(xi, dtype=float)
    if xi.ndim != 2 or xi.shape[1] != index_set.shape[1]:
        raise ValueError(
            f"xi must have shape (P, {index_set.shape[1]}), got {xi.shape}"
        )

    values = np.ones((xi.shape[0], index_set.shape[0]))
    for d in range(index_set.shape[1]):
        T = chebyshev_polynomials(degree, xi[:, d])  # (degree + 1, P)
        values *= T[index_set[:, d]].T
    return values
