"""
Bootstrapped mutual information over a range of shifts.

For each shift, an ensemble of small joint histograms is built from index
pairs drawn with replacement; a random sub-ensemble (again drawn with
replacement) is merged into the final histogram whose mutual information is
one bootstrap estimate. Repeating this gives a distribution of estimates per
shift from which the caller derives mean and spread.

Random streams are spawned from a single ``numpy.random.SeedSequence``: one
child per shift and one grandchild per repetition. Concurrently processed
shifts therefore never share or repeat a stream, and an explicit seed
reproduces the result independently of the number of workers.
"""

import logging
from typing import Optional

import numpy as np
import tqdm

from ..exceptions import EmptyHistogramError, InvalidArgumentError
from ..information.binning import as_indices, check_binning, map_indices
from ..information.hist_jit import fill_resampled_ensemble
from ..information.histogram import Histogram2D
from ..utils.parallel import resolve_n_jobs
from .scan import (
    DEFAULT_SHIFT_STEP,
    dispatch_shifts,
    get_shifts,
    min_overlap,
    overlap_slices,
    prepare_series,
)
from .validation import (
    validate_bootstrap_parameters,
    validate_output_buffer,
    validate_scan_parameters,
    validate_series_pair,
)

DEFAULT_BOOTSTRAP_SAMPLES = 100
DEFAULT_BOOTSTRAP_REPETITIONS = 1


def spawn_shift_seeds(seed, n_shifts):
    """Independent seed sequences, one per shift.

    Parameters
    ----------
    seed : None, int or numpy.random.SeedSequence
        Root entropy. None draws fresh entropy from the operating system.
    n_shifts : int
        Number of children to spawn.

    Returns
    -------
    list of numpy.random.SeedSequence
    """
    if isinstance(seed, np.random.SeedSequence):
        root = seed
    else:
        root = np.random.SeedSequence(seed)
    return root.spawn(n_shifts)


def bootstrapped_mi(
    indices_x,
    indices_y,
    bins_x,
    bins_y,
    range_x,
    range_y,
    nr_samples,
    rng=None,
    dtype=np.float64,
):
    """
    One bootstrap estimate of the mutual information of paired indices.

    Parameters
    ----------
    indices_x, indices_y : array-like of int
        Equally long bin index arrays (the overlapping parts of both series).
    bins_x, bins_y : int
        Number of bins per axis.
    range_x, range_y : tuple of float
        Value ranges recorded on the histograms.
    nr_samples : int
        Size of the resampled ensemble, ``1 <= nr_samples <= len(indices_x)``.
        Each member histogram holds ``len(indices_x) // nr_samples`` pairs
        drawn with replacement.
    rng : numpy.random.Generator, int or SeedSequence, optional
        Source of randomness; anything accepted by
        ``numpy.random.default_rng``.
    dtype : {numpy.float32, numpy.float64}, default=numpy.float64
        Precision of the returned value.

    Returns
    -------
    numpy.floating
        Mutual information of the merged histogram in bits.

    Raises
    ------
    InvalidArgumentError
        If a bin count is not positive or nr_samples is outside
        ``[1, len(indices_x)]``.
    InvalidRangeError
        If a range is not finite or min is not smaller than max.
    SizeMismatchError
        If both index arrays differ in length.
    EmptyHistogramError
        If none of the drawn pairs lies within range.

    Examples
    --------
    >>> ix = np.arange(100) % 10
    >>> mi = bootstrapped_mi(ix, ix, 10, 10, (0, 10), (0, 10), 10, rng=0)
    >>> bool(0.0 < mi <= np.log2(10) + 1e-9)
    True
    """
    indices_x = as_indices(indices_x, "indices_x")
    indices_y = as_indices(indices_y, "indices_y")
    check_binning(bins_x, *range_x, name="_x")
    check_binning(bins_y, *range_y, name="_y")
    n = validate_series_pair(indices_x, indices_y, names=("indices_x", "indices_y"))
    validate_bootstrap_parameters(nr_samples, 1, n)
    rng = np.random.default_rng(rng)

    draws = rng.integers(0, n, size=(nr_samples, n // nr_samples))
    arena = np.zeros((nr_samples, bins_x, bins_y), dtype=np.int64)
    fill_resampled_ensemble(indices_x, indices_y, draws, arena)
    ensemble = [
        Histogram2D.from_counts(arena[k], range_x, range_y, dtype=dtype, copy=False)
        for k in range(nr_samples)
    ]

    final = Histogram2D(bins_x, bins_y, range_x, range_y, dtype=dtype)
    for k in rng.integers(0, nr_samples, size=nr_samples):
        final.add(ensemble[k])
    return final.calculate_mutual_information()


def _shift_chunk_bootstrap(
    positions, indices_x, indices_y, shifts, seeds, bins_x, bins_y, range_x, range_y,
    nr_samples, nr_repetitions, dtype, enable_progressbar=False,
):
    length = indices_x.shape[0]
    result = np.empty((len(positions), nr_repetitions), dtype=dtype)
    for i, pos in tqdm.tqdm(
        enumerate(positions), total=len(positions), disable=not enable_progressbar
    ):
        shift = int(shifts[pos])
        slice_x, slice_y = overlap_slices(shift, length)
        overlap_x = indices_x[slice_x]
        overlap_y = indices_y[slice_y]
        for rep, rep_seed in enumerate(seeds[pos].spawn(nr_repetitions)):
            try:
                result[i, rep] = bootstrapped_mi(
                    overlap_x, overlap_y, bins_x, bins_y, range_x, range_y,
                    nr_samples, rng=np.random.default_rng(rep_seed), dtype=dtype,
                )
            except EmptyHistogramError as e:
                raise EmptyHistogramError(
                    f"No resampled pair within range at shift {shift}", shift=shift
                ) from e
    return result


def shifted_mutual_information_with_bootstrap(
    shift_from,
    shift_to,
    bins_x,
    bins_y,
    range_x,
    range_y,
    series_x,
    series_y,
    nr_samples=DEFAULT_BOOTSTRAP_SAMPLES,
    nr_repetitions=DEFAULT_BOOTSTRAP_REPETITIONS,
    shift_step=DEFAULT_SHIFT_STEP,
    seed=None,
    dtype=None,
    out=None,
    n_jobs=1,
    backend=None,
    enable_progressbar=False,
    logger: Optional[logging.Logger] = None,
) -> np.ndarray:
    """
    Bootstrapped mutual information for a range of relative shifts.

    Same shift semantics as
    :func:`~shiftmi.shifts.scan.shifted_mutual_information`, but every shift
    gets ``nr_repetitions`` independent estimates from :func:`bootstrapped_mi`.

    Parameters
    ----------
    shift_from, shift_to, bins_x, bins_y, range_x, range_y, series_x, series_y
        As in :func:`~shiftmi.shifts.scan.shifted_mutual_information`.
    nr_samples : int, default=100
        Size of the resampled histogram ensemble. May not exceed the shortest
        overlap of both series.
    nr_repetitions : int, default=1
        Number of estimates per shift.
    shift_step : int, default=1
        Distance between consecutive shifts.
    seed : None, int or numpy.random.SeedSequence, optional
        Root of all random streams. None gives a different result on every
        call; a fixed value is reproducible for any ``n_jobs``.
    dtype : {numpy.float32, numpy.float64}, optional
        Precision. Defaults to float32 for float32 input, float64 otherwise.
    out : ndarray, optional
        Pre-sized buffer of the result dtype, either ``(n_shifts,
        nr_repetitions)`` or flat with ``n_shifts * nr_repetitions`` elements
        (estimates of one shift are contiguous, stride ``nr_repetitions``).
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
    ndarray of shape (n_shifts, nr_repetitions)
        Bootstrap estimates in bits. When ``out`` is given, ``out`` itself is
        returned in its original shape.

    Raises
    ------
    InvalidArgumentError, InvalidRangeError, SizeMismatchError, ShiftOutOfBoundsError
        On invalid parameters, before any work is done.
    EmptyHistogramError
        If a resampled histogram ends up without any pair within range.

    Examples
    --------
    >>> x = np.sin(0.01 * np.arange(1000))
    >>> boot = shifted_mutual_information_with_bootstrap(
    ...     -10, 10, 10, 10, (-1, 1), (-1, 1), x, x,
    ...     nr_samples=100, nr_repetitions=5, shift_step=10, seed=0)
    >>> boot.shape
    (3, 5)
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    series_x, series_y, range_x, range_y, dtype = prepare_series(
        series_x, series_y, range_x, range_y, dtype
    )
    length = series_x.shape[0]
    validate_scan_parameters(
        shift_from, shift_to, bins_x, bins_y, range_x, range_y, length, shift_step
    )
    shifts = get_shifts(shift_from, shift_to, shift_step)
    validate_bootstrap_parameters(nr_samples, nr_repetitions, min_overlap(shifts, length))
    shape = (len(shifts), nr_repetitions)
    target = None
    if out is not None:
        target = validate_output_buffer(out, shape, dtype, allow_flat=True)
    n_workers = resolve_n_jobs(n_jobs, len(shifts))

    indices_x = map_indices(bins_x, *range_x, series_x, dtype=dtype)
    indices_y = map_indices(bins_y, *range_y, series_y, dtype=dtype)
    seeds = spawn_shift_seeds(seed, len(shifts))

    logger.debug(
        f"Bootstrapping {len(shifts)} shifts x {nr_repetitions} repetitions "
        f"({nr_samples} resampled histograms each, {dtype.name}) on {n_workers} worker(s)"
    )

    result = dispatch_shifts(
        _shift_chunk_bootstrap,
        (
            indices_x, indices_y, shifts, seeds, bins_x, bins_y, range_x, range_y,
            nr_samples, nr_repetitions, dtype,
        ),
        len(shifts),
        n_workers=n_workers,
        backend=backend,
        enable_progressbar=enable_progressbar,
        logger=logger,
    )
    if target is None:
        return result
    target[...] = result
    return out


def summarize_bootstrap(result, ddof=0):
    """
    Mean and standard deviation of bootstrap estimates per shift.

    Parameters
    ----------
    result : array-like of shape (n_shifts, nr_repetitions)
        Output of :func:`shifted_mutual_information_with_bootstrap`.
    ddof : int, default=0
        Delta degrees of freedom of the standard deviation.

    Returns
    -------
    mean, std : ndarray of shape (n_shifts,)

    Examples
    --------
    >>> mean, std = summarize_bootstrap([[1.0, 3.0], [2.0, 2.0]])
    >>> mean
    array([2., 2.])
    >>> std
    array([1., 0.])
    """
    result = np.asarray(result)
    if result.ndim != 2:
        raise InvalidArgumentError(
            f"result must have shape (n_shifts, nr_repetitions), got {result.shape}"
        )
    return result.mean(axis=1), result.std(axis=1, ddof=ddof)


__all__ = [
    "bootstrapped_mi",
    "shifted_mutual_information_with_bootstrap",
    "spawn_shift_seeds",
    "summarize_bootstrap",
]
