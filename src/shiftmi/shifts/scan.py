"""
Mutual information as a function of the relative shift of two time series.

Both series are converted to bin indices once. Every shift then builds its
own joint histogram from the overlapping parts of the index arrays, so shifts
are independent of each other and can be distributed over worker threads.
"""

import logging
from typing import Optional

import numpy as np
import tqdm
from joblib import delayed

from ..exceptions import EmptyHistogramError
from ..information.binning import as_indices, as_series, map_indices, resolve_dtype, resolve_range
from ..information.histogram import Histogram2D
from ..utils.parallel import parallel_executor, resolve_n_jobs
from .validation import validate_output_buffer, validate_scan_parameters, validate_series_pair

DEFAULT_SHIFT_FROM = -500
DEFAULT_SHIFT_TO = 500
DEFAULT_SHIFT_STEP = 1
DEFAULT_BINS = 10


def get_shifts(shift_from, shift_to, shift_step=1):
    """All shifts of a scan, in output order.

    The result has ``(shift_to - shift_from) // shift_step + 1`` entries; the
    shift at position ``i`` is ``shift_from + i * shift_step``.

    Examples
    --------
    >>> get_shifts(-2, 2)
    array([-2, -1,  0,  1,  2])
    >>> get_shifts(-5, 5, 3)
    array([-5, -2,  1,  4])
    """
    return np.arange(shift_from, shift_to + 1, shift_step)


def overlap_slices(shift, length):
    """Slices of x and y that are paired at a given shift.

    No shift::

        |--------------------| x
        |--------------------| y

    Negative shift (y is advanced)::

            |--------------------| x
        |--------------------|     y

    Positive shift::

        |--------------------|     x
            |--------------------| y

    Returns
    -------
    tuple of slice
        ``(slice_x, slice_y)``, both of length ``length - abs(shift)``.
    """
    if shift < 0:
        return slice(0, length + shift), slice(-shift, length)
    if shift > 0:
        return slice(shift, length), slice(0, length - shift)
    return slice(0, length), slice(0, length)


def min_overlap(shifts, length):
    """Shortest overlap of both series over the given shifts."""
    return int(length - np.max(np.abs(shifts)))


def dispatch_shifts(
    worker, worker_args, n_shifts, n_workers=1, backend=None, enable_progressbar=False,
    logger=None,
):
    """Evaluate ``worker`` over all shift positions.

    Positions are split into ``n_workers`` contiguous chunks, each evaluated
    as ``worker(chunk, *worker_args)``. ``worker`` has to be a module-level
    function so that process backends can pickle it.

    Parameters
    ----------
    worker : callable
        ``worker(positions, *worker_args, enable_progressbar=False)``
        returning an array whose first axis matches ``positions``.
    worker_args : tuple
        Remaining positional arguments of ``worker``.
    n_shifts : int
        Number of shift positions.
    n_workers : int, default=1
        Resolved number of workers (see
        :func:`~shiftmi.utils.parallel.resolve_n_jobs`). 1 runs in the
        calling thread.
    backend : str, optional
        joblib backend, defaults to shiftmi.PARALLEL_BACKEND.
    enable_progressbar : bool, default=False
        Show a progress bar (sequential mode only).
    logger : logging.Logger, optional
        Logger for debug output. Defaults to the module logger.

    Returns
    -------
    ndarray
        Concatenated results in position order.
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    positions = np.arange(n_shifts)
    if n_workers == 1:
        return worker(positions, *worker_args, enable_progressbar=enable_progressbar)

    split_positions = np.array_split(positions, n_workers)
    with parallel_executor(n_workers, backend=backend) as parallel:
        parallel_results = parallel(
            delayed(worker)(chunk, *worker_args) for chunk in split_positions
        )
    logger.debug(
        f"Collected {len(parallel_results)} chunks "
        f"({', '.join(str(len(chunk)) for chunk in split_positions)} shifts)"
    )
    return np.concatenate(parallel_results, axis=0)


def _shift_chunk_mi(
    positions, indices_x, indices_y, shifts, bins_x, bins_y, range_x, range_y, dtype,
    enable_progressbar=False,
):
    length = indices_x.shape[0]
    result = np.empty(len(positions), dtype=dtype)
    for i, pos in tqdm.tqdm(
        enumerate(positions), total=len(positions), disable=not enable_progressbar
    ):
        shift = int(shifts[pos])
        slice_x, slice_y = overlap_slices(shift, length)
        hist = Histogram2D(bins_x, bins_y, range_x, range_y, dtype=dtype)
        hist.increment(indices_x[slice_x], indices_y[slice_y])
        try:
            result[i] = hist.calculate_mutual_information()
        except EmptyHistogramError as e:
            raise EmptyHistogramError(
                f"No pair of values within range at shift {shift}", shift=shift
            ) from e
    return result


def _scan_indices(
    shifts, bins_x, bins_y, range_x, range_y, indices_x, indices_y, dtype, out,
    n_workers, backend, enable_progressbar, logger,
):
    logger.debug(
        f"Scanning {len(shifts)} shifts in [{shifts[0]}, {shifts[-1]}] "
        f"({bins_x}x{bins_y} bins, {dtype.name}) on {n_workers} worker(s)"
    )
    result = dispatch_shifts(
        _shift_chunk_mi,
        (indices_x, indices_y, shifts, bins_x, bins_y, range_x, range_y, dtype),
        len(shifts),
        n_workers=n_workers,
        backend=backend,
        enable_progressbar=enable_progressbar,
        logger=logger,
    )
    if out is None:
        return result
    out[...] = result
    return out


def prepare_series(series_x, series_y, range_x, range_y, dtype):
    """Convert both series and resolve precision and ranges.

    Returns
    -------
    tuple
        ``(series_x, series_y, range_x, range_y, dtype)``
    """
    dtype = resolve_dtype(dtype, np.asarray(series_x))
    series_x = as_series(series_x, dtype=dtype, name="series_x")
    series_y = as_series(series_y, dtype=dtype, name="series_y")
    validate_series_pair(series_x, series_y)
    range_x = resolve_range(series_x, *(range_x if range_x is not None else (None, None)))
    range_y = resolve_range(series_y, *(range_y if range_y is not None else (None, None)))
    return series_x, series_y, range_x, range_y, dtype


def shifted_mutual_information(
    shift_from,
    shift_to,
    bins_x,
    bins_y,
    range_x,
    range_y,
    series_x,
    series_y,
    shift_step=DEFAULT_SHIFT_STEP,
    dtype=None,
    out=None,
    n_jobs=1,
    backend=None,
    enable_progressbar=False,
    logger: Optional[logging.Logger] = None,
) -> np.ndarray:
    """
    Mutual information between two series for a range of relative shifts.

    For every shift in ``[shift_from, shift_to]`` (stepping by ``shift_step``)
    the overlapping parts of both series are binned into one joint histogram
    and its mutual information is recorded. A negative shift pairs
    ``series_x[:n+shift]`` with ``series_y[-shift:]``, a positive one pairs
    ``series_x[shift:]`` with ``series_y[:n-shift]``.

    Parameters
    ----------
    shift_from, shift_to : int
        First and last shift, ``shift_from < shift_to``. Both must be smaller
        than the series length in absolute value.
    bins_x, bins_y : int
        Number of bins of the joint histogram along each axis.
    range_x, range_y : tuple of float or None
        ``(min, max)`` per series. Values outside are ignored. None, or a
        None/NaN bound, is derived from the data extremes.
    series_x, series_y : array-like
        Equally long 1-D series. NaN samples are ignored.
    shift_step : int, default=1
        Distance between consecutive shifts.
    dtype : {numpy.float32, numpy.float64}, optional
        Precision. Defaults to float32 for float32 input, float64 otherwise.
    out : ndarray, optional
        Pre-sized result buffer of shape ``(n_shifts,)`` and the result dtype.
        Filled in place and returned.
    n_jobs : int, default=1
        Number of parallel workers; -1 uses all cores.
    backend : str, optional
        joblib backend, defaults to shiftmi.PARALLEL_BACKEND ('threading').
    enable_progressbar : bool, default=False
        Show a progress bar in sequential mode.
    logger : logging.Logger, optional
        Logger for debug output. Defaults to the module logger.

    Returns
    -------
    ndarray of shape ((shift_to - shift_from) // shift_step + 1,)
        Mutual information in bits; position ``i`` belongs to shift
        ``shift_from + i * shift_step``.

    Raises
    ------
    InvalidArgumentError, InvalidRangeError, SizeMismatchError, ShiftOutOfBoundsError
        On invalid parameters, before any work is done.
    EmptyHistogramError
        If no pair of values falls within both ranges at some shift.

    Examples
    --------
    >>> x = np.sin(0.01 * np.arange(1000))
    >>> mi = shifted_mutual_information(-100, 100, 10, 10, (-1, 1), (-1, 1), x, x)
    >>> mi.shape
    (201,)
    >>> int(np.argmax(mi))
    100
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    series_x, series_y, range_x, range_y, dtype = prepare_series(
        series_x, series_y, range_x, range_y, dtype
    )
    validate_scan_parameters(
        shift_from, shift_to, bins_x, bins_y, range_x, range_y, series_x.shape[0], shift_step
    )
    shifts = get_shifts(shift_from, shift_to, shift_step)
    if out is not None:
        out = validate_output_buffer(out, (len(shifts),), dtype)
    n_workers = resolve_n_jobs(n_jobs, len(shifts))

    indices_x = map_indices(bins_x, *range_x, series_x, dtype=dtype)
    indices_y = map_indices(bins_y, *range_y, series_y, dtype=dtype)

    return _scan_indices(
        shifts, bins_x, bins_y, range_x, range_y, indices_x, indices_y, dtype, out,
        n_workers, backend, enable_progressbar, logger,
    )


def shifted_mutual_information_indices(
    shift_from,
    shift_to,
    bins_x,
    bins_y,
    indices_x,
    indices_y,
    shift_step=DEFAULT_SHIFT_STEP,
    range_x=None,
    range_y=None,
    dtype=np.float64,
    out=None,
    n_jobs=1,
    backend=None,
    enable_progressbar=False,
    logger: Optional[logging.Logger] = None,
) -> np.ndarray:
    """
    Shift scan over precomputed bin indices.

    Same as :func:`shifted_mutual_information`, but the caller has already
    mapped both series with :func:`~shiftmi.information.binning.map_indices`.
    Indices equal to INVALID_INDEX or outside ``[0, bins)`` are ignored.

    Parameters
    ----------
    shift_from, shift_to, bins_x, bins_y, shift_step
        As in :func:`shifted_mutual_information`.
    indices_x, indices_y : array-like of int
        Equally long bin index arrays.
    range_x, range_y : tuple of float, optional
        Value ranges the indices were computed with. Only recorded on the
        histograms; default to ``(0, bins)``.
    dtype : {numpy.float32, numpy.float64}, default=numpy.float64
        Precision of the result.
    out, n_jobs, backend, enable_progressbar, logger
        As in :func:`shifted_mutual_information`.

    Returns
    -------
    ndarray
        Mutual information per shift.
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    dtype = resolve_dtype(dtype)
    indices_x = as_indices(indices_x, "indices_x")
    indices_y = as_indices(indices_y, "indices_y")
    length = validate_series_pair(indices_x, indices_y, names=("indices_x", "indices_y"))
    range_x = (0.0, float(bins_x)) if range_x is None else range_x
    range_y = (0.0, float(bins_y)) if range_y is None else range_y
    validate_scan_parameters(
        shift_from, shift_to, bins_x, bins_y, range_x, range_y, length, shift_step
    )
    shifts = get_shifts(shift_from, shift_to, shift_step)
    if out is not None:
        out = validate_output_buffer(out, (len(shifts),), dtype)
    n_workers = resolve_n_jobs(n_jobs, len(shifts))

    return _scan_indices(
        shifts, bins_x, bins_y, range_x, range_y, indices_x, indices_y, dtype, out,
        n_workers, backend, enable_progressbar, logger,
    )


__all__ = [
    "get_shifts",
    "overlap_slices",
    "shifted_mutual_information",
    "shifted_mutual_information_indices",
]
