"""Enumeration of total-degree multi-indices for a tensor-product basis.

A multi-index ``k = (k_0, ..., k_{d-1})`` selects the basis term
``T_{k_0}(x_0) * ... * T_{k_{d-1}}(x_{d-1})``. The index set of degree ``p``
holds every ``k`` with ``sum(k) <= p``; its generation order fixes the basis
ordering of every moment matrix built from it.
"""

from __future__ import annotations

import numpy as np


def index_set_size(degree: int, num_dimensions: int) -> int:
    """Number of multi-indices of total degree <= *degree*: C(d + p, p)."""
    from scipy.special import comb

    return int(comb(num_dimensions + degree, degree, exact=True))


def compute_index_set(degree: int, num_dimensions: int,
                      verbose: bool = False) -> np.ndarray:
    """Enumerate all multi-indices with entry sum <= *degree*.

    Runs a mixed-radix odometer over ``num_dimensions`` counters, each in
    ``0..degree``, with one extra carry counter that stops the sweep. Every
    counter state whose sum does not exceed *degree* is recorded with the
    counters in reverse order.

    Parameters
    ----------
    degree : int
        Maximum total polynomial degree (>= 0).
    num_dimensions : int
        Number of variables (>= 1).
    verbose : bool, optional
        If True, print every generated multi-index. Default is False.

    Returns
    -------
    ndarray of shape (C(d + p, p), num_dimensions)
        The index set, one multi-index per row.

    Raises
    ------
    ValueError
        If *degree* or *num_dimensions* is out of range.
    RuntimeError
        If the enumeration does not produce C(d + p, p) entries.

    Examples
    --------
    >>> compute_index_set(1, 2).tolist()
    [[0, 0], [0, 1], [1, 0]]
    """
    if num_dimensions < 1:
        raise ValueError(f"num_dimensions must be >= 1, got {num_dimensions}")
    if degree < 0:
        raise ValueError(f"degree must be >= 0, got {degree}")

    counters = [0] * (num_dimensions + 1)
    index_set = []

    while not counters[num_dimensions]:
        if sum(counters[:num_dimensions]) <= degree:
            entry = tuple(counters[num_dimensions - 1 - j]
                          for j in range(num_dimensions))
            if verbose:
                print(" ".join(f"alpha[{len(index_set)}][{j}]= {v}"
                               for j, v in enumerate(entry)))
            index_set.append(entry)

        # Counters already at degree roll over; the next one advances
        i = 0
        while i < num_dimensions and counters[i] == degree:
            counters[i] = 0
            i += 1
        counters[i] += 1

    expected = index_set_size(degree, num_dimensions)
    if len(index_set) != expected:
        raise RuntimeError(
            f"Index set has {len(index_set)} entries, expected {expected} "
            f"for degree={degree}, num_dimensions={num_dimensions}"
        )

    return np.array(index_set, dtype=np.intp).reshape(expected, num_dimensions)
