"""
JIT-compiled histogram kernels.

All kernels are compiled with ``nogil=True`` so that independent shifts can be
processed concurrently by a thread pool. They operate on plain numpy arrays
and never allocate their outputs.
"""

import numpy as np

from ..utils.jit import conditional_njit

# Bin index of a value outside the configured [min, max] range (or NaN).
# Legitimate indices are never negative, so it cannot alias a real bin.
INVALID_INDEX = -1


@conditional_njit(nogil=True)
def map_indices_kernel(values, bins, vmin, vmax, out):
    """Write the bin index of every value into ``out``.

    Values in ``[vmin, vmax)`` go to ``floor((v - vmin) / (vmax - vmin) * bins)``,
    ``v == vmax`` goes to the last bin and everything else (including NaN)
    becomes INVALID_INDEX.
    """
    width = vmax - vmin
    for i in range(values.shape[0]):
        value = values[i]
        if value >= vmin and value < vmax:
            index = int((value - vmin) / width * bins)
            # rounding may push values just below vmax onto the upper edge
            if index >= bins:
                index = bins - 1
            out[i] = index
        elif value == vmax:
            out[i] = bins - 1
        else:
            out[i] = INVALID_INDEX


@conditional_njit(nogil=True)
def fill_histogram_1d(indices, counts):
    """Increment ``counts`` for every in-bounds index.

    Returns
    -------
    int
        Number of indices actually inserted.
    """
    bins = counts.shape[0]
    added = 0
    for i in range(indices.shape[0]):
        index = indices[i]
        if index >= 0 and index < bins:
            counts[index] += 1
            added += 1
    return added


@conditional_njit(nogil=True)
def fill_histogram_2d(indices_x, indices_y, counts):
    """Increment ``counts`` for every pair whose both indices are in bounds.

    Returns
    -------
    int
        Number of pairs actually inserted.
    """
    bins_x = counts.shape[0]
    bins_y = counts.shape[1]
    added = 0
    for i in range(indices_x.shape[0]):
        ix = indices_x[i]
        iy = indices_y[i]
        if ix >= 0 and ix < bins_x and iy >= 0 and iy < bins_y:
            counts[ix, iy] += 1
            added += 1
    return added


@conditional_njit(nogil=True)
def fill_resampled_ensemble(indices_x, indices_y, draws, arena):
    """Fill one joint histogram per row of ``draws``.

    Parameters
    ----------
    indices_x, indices_y : ndarray of int
        Bin indices of the overlapping parts of both series.
    draws : ndarray of int, shape (n_members, n_draws)
        Positions into the index arrays, sampled with replacement.
    arena : ndarray of int, shape (n_members, bins_x, bins_y)
        Zero-initialised storage receiving the member histograms.
    """
    bins_x = arena.shape[1]
    bins_y = arena.shape[2]
    for k in range(draws.shape[0]):
        for j in range(draws.shape[1]):
            pos = draws[k, j]
            ix = indices_x[pos]
            iy = indices_y[pos]
            if ix >= 0 and ix < bins_x and iy >= 0 and iy < bins_y:
                arena[k, ix, iy] += 1


@conditional_njit(nogil=True)
def mutual_information_kernel(counts, marginal_x, marginal_y, count):
    """Mutual information in bits of a joint count table.

    Zero cells contribute nothing. ``count`` must be positive.
    """
    n = float(count)
    mi = 0.0
    for x in range(counts.shape[0]):
        if marginal_x[x] == 0:
            continue
        px = marginal_x[x] / n
        for y in range(counts.shape[1]):
            c = counts[x, y]
            if c > 0:
                pxy = c / n
                py = marginal_y[y] / n
                mi += pxy * np.log2(pxy / (px * py))
    return mi
