"""
One- and two-dimensional histograms over fixed value ranges.

Both classes are parameterized by a floating point precision (``dtype``,
float32 or float64) that governs the binning arithmetic, the stored range and
the type of derived quantities. Counts are always int64.
"""

import numpy as np

from ..exceptions import (
    EmptyHistogramError,
    IncompatibleGeometryError,
    InvalidArgumentError,
    SizeMismatchError,
)
from .binning import as_indices, check_binning, map_indices, resolve_dtype, resolve_range
from .hist_jit import fill_histogram_1d, fill_histogram_2d, mutual_information_kernel


def _readonly(arr):
    view = arr.view()
    view.flags.writeable = False
    return view


class Histogram1D:
    """Histogram of one variable with ``bins`` equal-width bins over ``[vmin, vmax]``.

    Values outside the range, and NaN, are skipped silently: they do not
    raise, they are simply not counted.

    Parameters
    ----------
    bins : int
        Number of bins, at least one.
    vmin, vmax : float
        Range covered by the bins, ``vmin < vmax``.
    counts : array-like of int, optional
        Pre-existing bin counts, e.g. a marginal of a joint histogram.
        Its length must equal ``bins``.
    count : int, optional
        Total number of elements behind ``counts``. Defaults to their sum
        and must equal it when given.
    dtype : {numpy.float32, numpy.float64}, default=numpy.float64
        Precision of range and binning arithmetic.

    Raises
    ------
    InvalidArgumentError
        On a bad bin count, a counts vector of wrong length or an
        inconsistent ``count``.
    InvalidRangeError
        If ``vmin >= vmax``.

    Examples
    --------
    >>> hist = Histogram1D(10, -500.0, 500.0)
    >>> hist.calculate(np.arange(1000) - 500.0).count
    1000
    >>> hist.counts[:3]
    array([100, 100, 100])
    """

    def __init__(self, bins, vmin, vmax, counts=None, count=None, dtype=np.float64):
        check_binning(bins, vmin, vmax)
        self._dtype = resolve_dtype(dtype)
        self._bins = int(bins)
        self._min = self._dtype.type(vmin)
        self._max = self._dtype.type(vmax)

        if counts is None:
            self._counts = np.zeros(self._bins, dtype=np.int64)
        else:
            counts = np.array(counts, dtype=np.int64)
            if counts.shape != (self._bins,):
                raise InvalidArgumentError(
                    f"Argument bins has to be of same size as counts vector, "
                    f"got bins={self._bins} and {counts.shape[0] if counts.ndim else 0} counts"
                )
            self._counts = counts

        total = int(self._counts.sum())
        if count is not None and int(count) != total:
            raise InvalidArgumentError(
                f"count={count} does not match the sum of counts ({total})"
            )
        self._count = total

    @classmethod
    def from_data(cls, values, bins, vmin=None, vmax=None, dtype=None):
        """Build and fill a histogram, deriving missing bounds from the data.

        Parameters
        ----------
        values : array-like
            1-D samples.
        bins : int
            Number of bins.
        vmin, vmax : float, optional
            Range bounds. Missing ones are taken from the data extremes.
        dtype : numpy dtype, optional
            Precision. Defaults to the float dtype of ``values``.

        Returns
        -------
        Histogram1D
        """
        vmin, vmax = resolve_range(values, vmin, vmax)
        hist = cls(bins, vmin, vmax, dtype=resolve_dtype(dtype, np.asarray(values)))
        return hist.calculate(values)

    def calculate(self, values):
        """Insert raw values. Subsequent calls accumulate.

        Returns
        -------
        Histogram1D
            self, for chaining.
        """
        indices = map_indices(self._bins, self._min, self._max, values, dtype=self._dtype)
        self._count += int(fill_histogram_1d(indices, self._counts))
        return self

    def increment(self, indices):
        """Insert precomputed bin indices.

        Indices equal to INVALID_INDEX or outside ``[0, bins)`` are skipped.

        Returns
        -------
        Histogram1D
            self, for chaining.
        """
        self._count += int(fill_histogram_1d(as_indices(indices), self._counts))
        return self

    @property
    def bins(self):
        return self._bins

    @property
    def count(self):
        """Total number of inserted elements."""
        return self._count

    @property
    def counts(self):
        """Read-only view of the bin counts."""
        return _readonly(self._counts)

    @property
    def min(self):
        return self._min

    @property
    def max(self):
        return self._max

    @property
    def range(self):
        return self._min, self._max

    @property
    def dtype(self):
        return self._dtype

    def __repr__(self):
        return (
            f"Histogram1D(bins={self._bins}, range=({self._min}, {self._max}), "
            f"count={self._count}, dtype={self._dtype.name})"
        )


class Histogram2D:
    """Joint histogram of two variables.

    A pair is counted only if both of its values (or indices) fall into their
    respective ranges. The two marginal histograms and the mutual information
    are derived lazily and cached; every mutation clears the cache, and
    ``force=True`` recomputes unconditionally.

    Parameters
    ----------
    bins_x, bins_y : int
        Number of bins along each axis, at least one.
    range_x, range_y : tuple of float
        ``(min, max)`` per axis with ``min < max``.
    dtype : {numpy.float32, numpy.float64}, default=numpy.float64
        Precision of ranges, binning and mutual information.

    Warning
    -------
    Instances are not thread-safe. Each scan iteration owns its histograms;
    sharing one instance between threads requires external locking.

    Examples
    --------
    >>> hist = Histogram2D(2, 2, (0.0, 1.0), (0.0, 1.0))
    >>> _ = hist.calculate([0.1, 0.9, 0.1, 0.9], [0.1, 0.9, 0.1, 0.9])
    >>> float(hist.calculate_mutual_information())
    1.0
    """

    def __init__(self, bins_x, bins_y, range_x, range_y, dtype=np.float64):
        check_binning(bins_x, range_x[0], range_x[1], name="_x")
        check_binning(bins_y, range_y[0], range_y[1], name="_y")
        self._dtype = resolve_dtype(dtype)
        scalar = self._dtype.type
        self._range_x = (scalar(range_x[0]), scalar(range_x[1]))
        self._range_y = (scalar(range_y[0]), scalar(range_y[1]))
        self._counts = np.zeros((int(bins_x), int(bins_y)), dtype=np.int64)
        self._count = 0
        self._marginals = None
        self._mutual_information = None

    @classmethod
    def from_counts(cls, counts, range_x, range_y, count=None, dtype=np.float64, copy=True):
        """Wrap an existing ``(bins_x, bins_y)`` count table.

        Parameters
        ----------
        counts : array-like of int, shape (bins_x, bins_y)
            Joint bin counts.
        range_x, range_y : tuple of float
            Value ranges of both axes.
        count : int, optional
            Total element count; defaults to ``counts.sum()`` and must equal it.
        dtype : numpy dtype, default=numpy.float64
            Precision.
        copy : bool, default=True
            If False and ``counts`` already is an int64 array, the histogram
            uses it as storage directly (e.g. a slice of a preallocated arena).

        Returns
        -------
        Histogram2D
        """
        counts = np.array(counts, dtype=np.int64) if copy else np.asarray(counts, dtype=np.int64)
        if counts.ndim != 2:
            raise InvalidArgumentError(f"counts must be two-dimensional, got shape {counts.shape}")
        hist = cls(counts.shape[0], counts.shape[1], range_x, range_y, dtype=dtype)
        total = int(counts.sum())
        if count is not None and int(count) != total:
            raise InvalidArgumentError(
                f"count={count} does not match the sum of counts ({total})"
            )
        hist._counts = counts
        hist._count = total
        return hist

    def _invalidate(self):
        self._marginals = None
        self._mutual_information = None

    def calculate(self, values_x, values_y):
        """Insert paired raw values. Subsequent calls accumulate.

        Raises
        ------
        SizeMismatchError
            If both sequences differ in length.

        Returns
        -------
        Histogram2D
            self, for chaining.
        """
        values_x = np.asarray(values_x)
        values_y = np.asarray(values_y)
        if len(values_x) != len(values_y):
            raise SizeMismatchError(
                f"Both value sequences must have the same size, got {len(values_x)} and {len(values_y)}",
                size_x=len(values_x),
                size_y=len(values_y),
            )
        indices_x = map_indices(self.bins_x, *self._range_x, values_x, dtype=self._dtype)
        indices_y = map_indices(self.bins_y, *self._range_y, values_y, dtype=self._dtype)
        return self.increment(indices_x, indices_y)

    def increment(self, indices_x, indices_y=None):
        """Insert precomputed index pairs.

        Parameters
        ----------
        indices_x : array-like of int
            Bin indices along x, or an ``(n, 2)`` array of index pairs when
            ``indices_y`` is omitted.
        indices_y : array-like of int, optional
            Bin indices along y.

        Raises
        ------
        SizeMismatchError
            If both index sequences differ in length.

        Returns
        -------
        Histogram2D
            self, for chaining.
        """
        if indices_y is None:
            pairs = np.asarray(indices_x)
            if pairs.ndim != 2 or pairs.shape[1] != 2:
                raise InvalidArgumentError(
                    f"index pairs must have shape (n, 2), got {pairs.shape}"
                )
            indices_x, indices_y = pairs[:, 0], pairs[:, 1]
        indices_x = as_indices(indices_x, "indices_x")
        indices_y = as_indices(indices_y, "indices_y")
        if indices_x.shape[0] != indices_y.shape[0]:
            raise SizeMismatchError(
                f"Both index sequences must have the same size, "
                f"got {indices_x.shape[0]} and {indices_y.shape[0]}",
                size_x=indices_x.shape[0],
                size_y=indices_y.shape[0],
            )
        self._count += int(fill_histogram_2d(indices_x, indices_y, self._counts))
        self._invalidate()
        return self

    def increment_at(self, ix, iy):
        """Increment a single cell.

        Out-of-bounds or missing (None) indices are ignored like in
        :meth:`increment`.

        Returns
        -------
        bool
            Whether the pair was counted.
        """
        if ix is None or iy is None:
            return False
        if 0 <= ix < self._counts.shape[0] and 0 <= iy < self._counts.shape[1]:
            self._counts[ix, iy] += 1
            self._count += 1
            self._invalidate()
            return True
        return False

    def add(self, other):
        """Add the counts of a histogram with identical bin geometry.

        Raises
        ------
        IncompatibleGeometryError
            If the bin counts of both histograms differ.

        Returns
        -------
        Histogram2D
            self, for chaining.
        """
        if not isinstance(other, Histogram2D):
            raise TypeError(f"Can only add Histogram2D, got {type(other).__name__}")
        if self._counts.shape != other._counts.shape:
            raise IncompatibleGeometryError(
                f"Cannot add histograms of different geometry: "
                f"{self._counts.shape} and {other._counts.shape}"
            )
        self._counts += other._counts
        self._count += other._count
        self._invalidate()
        return self

    def reduce1d(self, force=False):
        """Marginal histograms along x and y.

        Parameters
        ----------
        force : bool, default=False
            Recompute even if a cached result exists.

        Returns
        -------
        tuple of Histogram1D
            ``(marginal_x, marginal_y)``
        """
        if self._marginals is None or force:
            self._marginals = (
                Histogram1D(
                    self.bins_x, *self._range_x,
                    counts=self._counts.sum(axis=1), count=self._count, dtype=self._dtype,
                ),
                Histogram1D(
                    self.bins_y, *self._range_y,
                    counts=self._counts.sum(axis=0), count=self._count, dtype=self._dtype,
                ),
            )
        return self._marginals

    def calculate_mutual_information(self, force=False):
        """Mutual information (bits) between both axes.

        Computed as ``sum p_xy * log2(p_xy / (p_x * p_y))`` over all non-empty
        cells, with marginals from :meth:`reduce1d`.

        Parameters
        ----------
        force : bool, default=False
            Recompute marginals and mutual information even if cached.

        Returns
        -------
        numpy.floating
            Scalar of the histogram's dtype.

        Raises
        ------
        EmptyHistogramError
            If the histogram holds no elements.
        """
        if self._count == 0:
            raise EmptyHistogramError(
                "Mutual information is undefined for a histogram without elements"
            )
        if self._mutual_information is None or force:
            marginal_x, marginal_y = self.reduce1d(force=force)
            mi = mutual_information_kernel(
                self._counts, marginal_x._counts, marginal_y._counts, self._count
            )
            self._mutual_information = self._dtype.type(mi)
        return self._mutual_information

    @property
    def bins_x(self):
        return self._counts.shape[0]

    @property
    def bins_y(self):
        return self._counts.shape[1]

    @property
    def count(self):
        """Total number of inserted pairs."""
        return self._count

    @property
    def counts(self):
        """Read-only view of the ``(bins_x, bins_y)`` count table."""
        return _readonly(self._counts)

    @property
    def range_x(self):
        return self._range_x

    @property
    def range_y(self):
        return self._range_y

    @property
    def dtype(self):
        return self._dtype

    def __repr__(self):
        return (
            f"Histogram2D(bins=({self.bins_x}, {self.bins_y}), range_x={self._range_x}, "
            f"range_y={self._range_y}, count={self._count}, dtype={self._dtype.name})"
        )


__all__ = ["Histogram1D", "Histogram2D"]
