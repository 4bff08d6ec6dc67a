"""
Input validation for shift scans.

All checks run before any histogram is built, so a single bad parameter
aborts the whole scan without partial output.
"""

import numpy as np

from ..exceptions import InvalidArgumentError, ShiftOutOfBoundsError, SizeMismatchError
from ..information.binning import check_bins, check_range


def _check_integer(value, name):
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise TypeError(f"{name} must be integer, got {type(value).__name__}")


def validate_series_pair(series_x, series_y, names=("series_x", "series_y")) -> int:
    """
    Validate two series that are paired element by element.

    Parameters
    ----------
    series_x, series_y : ndarray
        One-dimensional arrays.
    names : tuple of str
        Names used in error messages.

    Returns
    -------
    int
        The common length.

    Raises
    ------
    InvalidArgumentError
        If an array is not one-dimensional or empty.
    SizeMismatchError
        If both lengths differ.
    """
    for arr, name in zip((series_x, series_y), names):
        if arr.ndim != 1:
            raise InvalidArgumentError(f"{name} must be one-dimensional, got shape {arr.shape}")
    if series_x.shape[0] != series_y.shape[0]:
        raise SizeMismatchError(
            f"{names[0]} and {names[1]} must have the same size, "
            f"got {series_x.shape[0]} and {series_y.shape[0]}",
            size_x=series_x.shape[0],
            size_y=series_y.shape[0],
        )
    if series_x.shape[0] == 0:
        raise InvalidArgumentError(f"{names[0]} and {names[1]} must not be empty")
    return series_x.shape[0]


def validate_scan_parameters(
    shift_from, shift_to, bins_x, bins_y, range_x, range_y, length, shift_step=1
) -> None:
    """
    Validate the parameters of a shift scan.

    Parameters
    ----------
    shift_from, shift_to : int
        First and last shift, ``shift_from < shift_to``.
    bins_x, bins_y : int
        Bin counts, at least one each.
    range_x, range_y : tuple of float
        ``(min, max)`` with ``min < max``.
    length : int
        Length of the (equally long) input series.
    shift_step : int, default=1
        Distance between consecutive shifts, at least one.

    Raises
    ------
    TypeError
        If an integral parameter is not an integer.
    InvalidArgumentError
        For non-positive bins or shift_step, or ``shift_from >= shift_to``.
    InvalidRangeError
        If a range is empty or inverted.
    ShiftOutOfBoundsError
        If ``max(|shift_from|, |shift_to|) >= length``, which would leave no
        overlap between both series.
    """
    for value, name in (
        (shift_from, "shift_from"),
        (shift_to, "shift_to"),
        (shift_step, "shift_step"),
    ):
        _check_integer(value, name)
    check_bins(bins_x, name="bins_x")
    check_bins(bins_y, name="bins_y")

    if shift_step < 1:
        raise InvalidArgumentError(f"shift_step must be positive, got {shift_step}")
    if shift_from >= shift_to:
        raise InvalidArgumentError(
            f"shift_from has to be smaller than shift_to, got {shift_from} and {shift_to}"
        )

    check_range(range_x[0], range_x[1], name="range_x")
    check_range(range_y[0], range_y[1], name="range_y")

    largest = max(abs(shift_from), abs(shift_to))
    if largest >= length:
        raise ShiftOutOfBoundsError(
            f"Shift of {largest} exceeds the series length of {length}",
            shift=largest,
            length=length,
        )


def validate_bootstrap_parameters(nr_samples, nr_repetitions, min_overlap) -> None:
    """
    Validate bootstrap parameters.

    Parameters
    ----------
    nr_samples : int
        Number of resampled histograms per estimate, at least one.
    nr_repetitions : int
        Number of estimates per shift, at least one.
    min_overlap : int
        Shortest overlap of both series over all scanned shifts. Every
        resampled histogram draws ``overlap // nr_samples`` pairs, so
        ``nr_samples`` may not exceed it.

    Raises
    ------
    TypeError
        If a parameter is not an integer.
    InvalidArgumentError
        If a parameter is out of its domain.
    """
    _check_integer(nr_samples, "nr_samples")
    _check_integer(nr_repetitions, "nr_repetitions")
    if nr_samples < 1:
        raise InvalidArgumentError(f"nr_samples must be positive, got {nr_samples}")
    if nr_repetitions < 1:
        raise InvalidArgumentError(f"nr_repetitions must be positive, got {nr_repetitions}")
    if nr_samples > min_overlap:
        raise InvalidArgumentError(
            f"nr_samples ({nr_samples}) must not exceed the shortest overlap "
            f"of both series ({min_overlap})"
        )


def validate_output_buffer(out, shape, dtype, allow_flat=False) -> np.ndarray:
    """
    Validate a caller-supplied output array.

    Parameters
    ----------
    out : ndarray
        Buffer to write results into.
    shape : tuple of int
        Expected shape.
    dtype : numpy.dtype
        Expected dtype.
    allow_flat : bool, default=False
        Also accept a C-contiguous flat buffer with ``prod(shape)`` elements.

    Returns
    -------
    ndarray
        A view of ``out`` with the expected shape.

    Raises
    ------
    InvalidArgumentError
        If the buffer does not fit.
    """
    if not isinstance(out, np.ndarray):
        raise InvalidArgumentError(f"out must be a numpy array, got {type(out).__name__}")
    if out.dtype != dtype:
        raise InvalidArgumentError(f"out must have dtype {dtype}, got {out.dtype}")
    if out.shape == tuple(shape):
        return out
    if allow_flat and out.shape == (int(np.prod(shape)),) and out.flags.c_contiguous:
        return out.reshape(shape)
    raise InvalidArgumentError(f"out must have shape {tuple(shape)}, got {out.shape}")


__all__ = [
    "validate_series_pair",
    "validate_scan_parameters",
    "validate_bootstrap_parameters",
    "validate_output_buffer",
]
