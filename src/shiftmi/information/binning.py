"""
Conversion of raw samples into histogram bin indices.

A fixed range ``[vmin, vmax]`` is split into ``bins`` equal-width bins. The
interval is half-open except for the top edge: ``vmax`` itself lands in the
last bin. Everything outside the range, and NaN, maps to ``INVALID_INDEX``
(array form) or ``None`` (scalar form).

Precomputing indices once per series lets a shift scan reuse them for every
shift instead of repeating the range arithmetic.
"""

import math

import numpy as np

from ..exceptions import InvalidArgumentError, InvalidRangeError
from .hist_jit import INVALID_INDEX, map_indices_kernel

SUPPORTED_DTYPES = (np.float32, np.float64)


def check_bins(bins, name="bins"):
    """Validate a bin count.

    Raises
    ------
    TypeError
        If bins is not an integer.
    InvalidArgumentError
        If bins is smaller than one.
    """
    if isinstance(bins, bool) or not isinstance(bins, (int, np.integer)):
        raise TypeError(f"{name} must be integer, got {type(bins).__name__}")
    if bins < 1:
        raise InvalidArgumentError(f"There must be at least one bin, got {name}={bins}")


def check_range(vmin, vmax, name="range"):
    """Validate a value range.

    Raises
    ------
    InvalidRangeError
        If a bound is not finite, ``vmin >= vmax`` or the width
        ``vmax - vmin`` is not representable as a finite float.
    """
    if not (math.isfinite(vmin) and math.isfinite(vmax)):
        raise InvalidRangeError(
            f"{name} bounds must be finite, got ({vmin}, {vmax})", vmin=vmin, vmax=vmax
        )
    if vmin >= vmax:
        raise InvalidRangeError(
            f"{name}: min has to be smaller than max, got ({vmin}, {vmax})",
            vmin=vmin,
            vmax=vmax,
        )
    if not math.isfinite(float(vmax) - float(vmin)):
        raise InvalidRangeError(
            f"{name} is too wide, max - min overflows for ({vmin}, {vmax})",
            vmin=vmin,
            vmax=vmax,
        )


def check_binning(bins, vmin, vmax, name=""):
    """Validate a bin count together with its range."""
    check_bins(bins, name=f"bins{name}")
    check_range(vmin, vmax, name=f"range{name}")


def resolve_dtype(dtype, data=None):
    """Pick the floating point precision of a computation.

    Parameters
    ----------
    dtype : numpy dtype or None
        Explicit precision. Only float32 and float64 are supported.
    data : ndarray, optional
        When dtype is None, a float32 array keeps float32, anything else
        falls back to float64.

    Returns
    -------
    numpy.dtype
    """
    if dtype is None:
        if data is not None and np.asarray(data).dtype == np.float32:
            return np.dtype(np.float32)
        return np.dtype(np.float64)
    dtype = np.dtype(dtype)
    if dtype.type not in SUPPORTED_DTYPES:
        raise InvalidArgumentError(f"dtype must be float32 or float64, got {dtype}")
    return dtype


def as_series(values, dtype=None, name="values"):
    """Convert input to a contiguous 1-D float array of the given precision."""
    arr = np.asarray(values)
    if arr.ndim != 1:
        raise InvalidArgumentError(f"{name} must be one-dimensional, got shape {arr.shape}")
    dtype = resolve_dtype(dtype, arr)
    return np.ascontiguousarray(arr, dtype=dtype)


def as_indices(indices, name="indices"):
    """Convert input to a contiguous 1-D int64 index array."""
    arr = np.asarray(indices)
    if arr.ndim != 1:
        raise InvalidArgumentError(f"{name} must be one-dimensional, got shape {arr.shape}")
    return np.ascontiguousarray(arr, dtype=np.int64)


def resolve_range(values, vmin=None, vmax=None):
    """Fill in missing range bounds from the data.

    A bound given as None or NaN is replaced by the NaN-ignoring extreme of
    ``values``.

    Parameters
    ----------
    values : array-like
        Samples the range is derived from.
    vmin, vmax : float, optional
        Explicit bounds. Kept as given when not None/NaN.

    Returns
    -------
    tuple of float
        ``(vmin, vmax)``

    Raises
    ------
    InvalidRangeError
        If the data contain no finite value to derive a bound from, or the
        resulting range is empty.

    Examples
    --------
    >>> resolve_range([3.0, 1.0, float('nan'), 2.0])
    (1.0, 3.0)
    >>> resolve_range([3.0, 1.0, 2.0], vmax=10.0)
    (1.0, 10.0)
    """
    need_min = vmin is None or np.isnan(vmin)
    need_max = vmax is None or np.isnan(vmax)
    if need_min or need_max:
        arr = np.asarray(values, dtype=np.float64)
        finite = arr[np.isfinite(arr)]
        if finite.size == 0:
            raise InvalidRangeError("Cannot derive a range from data without finite values")
        if need_min:
            vmin = finite.min()
        if need_max:
            vmax = finite.max()
    vmin, vmax = float(vmin), float(vmax)
    check_range(vmin, vmax)
    return vmin, vmax


def map_index(bins, vmin, vmax, value):
    """Bin index of a single value.

    Parameters
    ----------
    bins : int
        Number of bins, at least one.
    vmin, vmax : float
        Range covered by the bins, ``vmin < vmax``.
    value : float
        Sample to classify.

    Returns
    -------
    int or None
        Index in ``[0, bins)``, or None when the value lies outside
        ``[vmin, vmax]`` or is NaN.

    Examples
    --------
    >>> map_index(10, 0.0, 1.0, 0.25)
    2
    >>> map_index(10, 0.0, 1.0, 1.0)
    9
    >>> map_index(10, 0.0, 1.0, 1.5) is None
    True
    """
    check_binning(bins, vmin, vmax)
    index = int(map_indices(bins, vmin, vmax, np.array([value], dtype=np.float64))[0])
    return None if index == INVALID_INDEX else index


def map_indices(bins, vmin, vmax, values, dtype=None, out=None):
    """Bin indices of a whole series.

    The parameters are validated once for the batch; every element is then
    mapped independently.

    Parameters
    ----------
    bins : int
        Number of bins, at least one.
    vmin, vmax : float
        Range covered by the bins, ``vmin < vmax``.
    values : array-like
        1-D samples.
    dtype : numpy dtype, optional
        Precision of the binning arithmetic. Defaults to the float dtype of
        ``values`` (float64 for non-float input).
    out : ndarray of int64, optional
        Pre-sized output array.

    Returns
    -------
    ndarray of int64
        Same length as ``values``; out-of-range entries hold INVALID_INDEX.

    Examples
    --------
    >>> map_indices(5, 0, 10, [0, 3, 10, 11, float('nan')])
    array([ 0,  1,  4, -1, -1])
    """
    check_binning(bins, vmin, vmax)
    series = as_series(values, dtype=dtype)
    if out is None:
        out = np.empty(series.shape[0], dtype=np.int64)
    elif out.shape != series.shape or out.dtype != np.int64:
        raise InvalidArgumentError(
            f"out must be an int64 array of shape {series.shape}, got {out.dtype} {out.shape}"
        )
    scalar = series.dtype.type
    with np.errstate(over="ignore"):
        lo, hi = scalar(vmin), scalar(vmax)
        width = hi - lo
    if not (np.isfinite(width) and width > 0):
        raise InvalidRangeError(
            f"range ({vmin}, {vmax}) has no finite positive width in {series.dtype.name}",
            vmin=vmin,
            vmax=vmax,
        )
    map_indices_kernel(series, int(bins), lo, hi, out)
    return out


__all__ = [
    "INVALID_INDEX",
    "map_index",
    "map_indices",
    "resolve_range",
    "resolve_dtype",
    "as_series",
    "as_indices",
    "check_bins",
    "check_range",
    "check_binning",
]
