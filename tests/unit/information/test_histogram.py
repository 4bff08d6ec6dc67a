"""Tests for Histogram1D and Histogram2D."""

import numpy as np
import pytest

from shiftmi.exceptions import (
    EmptyHistogramError,
    IncompatibleGeometryError,
    InvalidArgumentError,
    InvalidRangeError,
    SizeMismatchError,
)
from shiftmi.information import INVALID_INDEX, Histogram1D, Histogram2D, map_indices


class TestHistogram1D:
    """Test one-dimensional histograms."""

    def test_uniform_fill(self):
        hist = Histogram1D(10, -500.0, 500.0)
        hist.calculate(np.arange(1000) - 500.0)
        assert hist.count == 1000
        np.testing.assert_array_equal(hist.counts, np.full(10, 100))

    def test_out_of_range_values_are_skipped(self):
        hist = Histogram1D(4, 0.0, 4.0)
        hist.calculate([-1.0, 0.0, 1.0, 4.0, 5.0, np.nan])
        assert hist.count == 3
        np.testing.assert_array_equal(hist.counts, [1, 1, 0, 1])

    def test_conservation_over_mixed_insertions(self):
        rng = np.random.default_rng(0)
        hist = Histogram1D(8, 0.0, 1.0)
        for _ in range(5):
            hist.calculate(rng.uniform(-0.2, 1.2, size=100))
            hist.increment(rng.integers(-2, 10, size=50))
            assert hist.counts.sum() == hist.count

    def test_increment_skips_invalid_indices(self):
        hist = Histogram1D(3, 0.0, 1.0)
        hist.increment([0, 1, 2, 3, INVALID_INDEX, 2])
        assert hist.count == 4
        np.testing.assert_array_equal(hist.counts, [1, 1, 2])

    def test_calculate_accumulates(self):
        hist = Histogram1D(2, 0.0, 1.0)
        hist.calculate([0.1]).calculate([0.9, 0.8])
        np.testing.assert_array_equal(hist.counts, [1, 2])

    def test_from_counts(self):
        hist = Histogram1D(3, 0.0, 3.0, counts=[1, 2, 3])
        assert hist.count == 6
        assert hist.bins == 3
        assert hist.range == (0.0, 3.0)

    def test_counts_length_mismatch(self):
        with pytest.raises(InvalidArgumentError):
            Histogram1D(3, 0.0, 1.0, counts=[1, 2])

    def test_inconsistent_count(self):
        with pytest.raises(InvalidArgumentError):
            Histogram1D(2, 0.0, 1.0, counts=[1, 2], count=5)

    def test_invalid_construction(self):
        with pytest.raises(InvalidArgumentError):
            Histogram1D(0, 0.0, 1.0)
        with pytest.raises(InvalidRangeError):
            Histogram1D(3, 1.0, 0.0)

    def test_counts_are_read_only(self):
        hist = Histogram1D(2, 0.0, 1.0)
        with pytest.raises(ValueError):
            hist.counts[0] = 5

    def test_from_data_derives_range(self):
        hist = Histogram1D.from_data([2.0, 4.0, 6.0, np.nan], 2)
        assert hist.range == (2.0, 6.0)
        assert hist.count == 3
        np.testing.assert_array_equal(hist.counts, [1, 2])

    def test_float32_precision(self):
        hist = Histogram1D.from_data(np.linspace(0, 1, 11, dtype=np.float32), 5)
        assert hist.dtype == np.float32
        assert isinstance(hist.min, np.float32)
        assert hist.count == 11


class TestHistogram2DFilling:
    """Test insertion into joint histograms."""

    def test_pair_needs_both_axes_in_range(self):
        hist = Histogram2D(2, 2, (0.0, 1.0), (0.0, 1.0))
        hist.calculate([0.1, 0.9, 1.5, 0.2], [0.1, 0.9, 0.5, -0.1])
        assert hist.count == 2
        np.testing.assert_array_equal(hist.counts, [[1, 0], [0, 1]])

    def test_size_mismatch(self):
        hist = Histogram2D(2, 2, (0.0, 1.0), (0.0, 1.0))
        with pytest.raises(SizeMismatchError) as exc_info:
            hist.calculate([0.1, 0.2], [0.1])
        assert exc_info.value.size_x == 2
        assert exc_info.value.size_y == 1
        with pytest.raises(SizeMismatchError):
            hist.increment([0, 1], [1])

    def test_increment_pairs(self):
        hist = Histogram2D(3, 2, (0.0, 1.0), (0.0, 1.0))
        hist.increment(np.array([[0, 0], [2, 1], [3, 0], [1, INVALID_INDEX]]))
        assert hist.count == 2
        assert hist.counts[0, 0] == 1
        assert hist.counts[2, 1] == 1

    def test_increment_pairs_bad_shape(self):
        hist = Histogram2D(2, 2, (0.0, 1.0), (0.0, 1.0))
        with pytest.raises(InvalidArgumentError):
            hist.increment(np.zeros((3, 3), dtype=np.int64))

    def test_index_value_equivalence(self, sinusoid):
        y = np.cos(0.03 * np.arange(sinusoid.size))
        by_values = Histogram2D(7, 5, (-1.0, 1.0), (-0.8, 0.8))
        by_values.calculate(sinusoid, y)
        by_indices = Histogram2D(7, 5, (-1.0, 1.0), (-0.8, 0.8))
        by_indices.increment(map_indices(7, -1.0, 1.0, sinusoid), map_indices(5, -0.8, 0.8, y))
        np.testing.assert_array_equal(by_values.counts, by_indices.counts)
        assert by_values.count == by_indices.count

    def test_increment_at(self):
        hist = Histogram2D(2, 3, (0.0, 1.0), (0.0, 1.0))
        assert hist.increment_at(1, 2) is True
        assert hist.increment_at(2, 0) is False
        assert hist.increment_at(0, -1) is False
        assert hist.increment_at(None, 0) is False
        assert hist.count == 1
        assert hist.counts[1, 2] == 1


class TestHistogram2DDerived:
    """Test marginals, mutual information and their caches."""

    def test_marginal_consistency(self):
        rng = np.random.default_rng(1)
        hist = Histogram2D(6, 4, (0.0, 1.0), (0.0, 1.0))
        hist.calculate(rng.uniform(-0.1, 1.1, 500), rng.uniform(-0.1, 1.1, 500))
        marginal_x, marginal_y = hist.reduce1d()
        assert marginal_x.counts.sum() == hist.count
        assert marginal_y.counts.sum() == hist.count
        np.testing.assert_array_equal(marginal_x.counts, hist.counts.sum(axis=1))
        np.testing.assert_array_equal(marginal_y.counts, hist.counts.sum(axis=0))
        assert marginal_x.range == hist.range_x
        assert marginal_y.bins == 4

    def test_perfect_dependence(self):
        hist = Histogram2D(4, 4, (0.0, 4.0), (0.0, 4.0))
        values = np.arange(4.0).repeat(25) + 0.5
        hist.calculate(values, values)
        assert np.isclose(hist.calculate_mutual_information(), 2.0)

    def test_independence(self):
        hist = Histogram2D(2, 2, (0.0, 1.0), (0.0, 1.0))
        hist.calculate([0.1, 0.1, 0.9, 0.9], [0.1, 0.9, 0.1, 0.9])
        assert np.isclose(hist.calculate_mutual_information(), 0.0)

    def test_mutual_information_is_non_negative(self):
        rng = np.random.default_rng(2)
        hist = Histogram2D(10, 10, (0.0, 1.0), (0.0, 1.0))
        hist.calculate(rng.uniform(size=300), rng.uniform(size=300))
        assert hist.calculate_mutual_information() >= 0.0

    def test_cache_is_reused(self):
        hist = Histogram2D(2, 2, (0.0, 1.0), (0.0, 1.0))
        hist.calculate([0.1, 0.9], [0.1, 0.9])
        assert hist.reduce1d() is hist.reduce1d()
        assert hist.reduce1d(force=True) is not None

    def test_mutation_invalidates_cache(self):
        hist = Histogram2D(2, 2, (0.0, 1.0), (0.0, 1.0))
        hist.calculate([0.1, 0.9], [0.1, 0.9])
        assert np.isclose(hist.calculate_mutual_information(), 1.0)
        marginals_before = hist.reduce1d()

        hist.calculate([0.1, 0.9], [0.9, 0.1])
        assert hist.reduce1d() is not marginals_before
        assert hist.reduce1d()[0].count == 4
        assert np.isclose(hist.calculate_mutual_information(), 0.0)

        hist.increment_at(0, 0)
        assert hist.calculate_mutual_information() > 0.0

    def test_force_recompute_matches_cache(self):
        hist = Histogram2D(3, 3, (0.0, 1.0), (0.0, 1.0))
        hist.calculate(np.linspace(0, 1, 50), np.linspace(0, 1, 50) ** 2)
        cached = hist.calculate_mutual_information()
        assert hist.calculate_mutual_information(force=True) == cached

    def test_empty_histogram(self):
        hist = Histogram2D(3, 3, (0.0, 1.0), (0.0, 1.0))
        with pytest.raises(EmptyHistogramError):
            hist.calculate_mutual_information()
        hist.calculate([5.0], [5.0])
        with pytest.raises(EmptyHistogramError):
            hist.calculate_mutual_information()

    def test_float32_result(self):
        hist = Histogram2D(2, 2, (0.0, 1.0), (0.0, 1.0), dtype=np.float32)
        hist.calculate([0.1, 0.9], [0.1, 0.9])
        assert isinstance(hist.calculate_mutual_information(), np.float32)
        assert hist.range_x[0].dtype == np.float32


class TestHistogram2DMerging:
    """Test adding histograms."""

    def test_add_sums_counts(self):
        a = Histogram2D.from_counts([[1, 2], [3, 4]], (0.0, 1.0), (0.0, 1.0))
        b = Histogram2D.from_counts([[4, 3], [2, 1]], (0.0, 1.0), (0.0, 1.0))
        a.add(b)
        np.testing.assert_array_equal(a.counts, np.full((2, 2), 5))
        assert a.count == 20
        assert b.count == 10

    def test_add_with_empty_histogram(self):
        a = Histogram2D.from_counts([[1, 0], [0, 1]], (0.0, 1.0), (0.0, 1.0))
        a.add(Histogram2D(2, 2, (0.0, 1.0), (0.0, 1.0)))
        assert a.count == 2

    def test_add_invalidates_cache(self):
        a = Histogram2D.from_counts([[1, 0], [0, 1]], (0.0, 1.0), (0.0, 1.0))
        assert np.isclose(a.calculate_mutual_information(), 1.0)
        a.add(Histogram2D.from_counts([[0, 1], [1, 0]], (0.0, 1.0), (0.0, 1.0)))
        assert np.isclose(a.calculate_mutual_information(), 0.0)

    @pytest.mark.parametrize("shape", [(2, 3), (3, 2), (1, 1)])
    def test_incompatible_geometry(self, shape):
        a = Histogram2D(2, 2, (0.0, 1.0), (0.0, 1.0))
        b = Histogram2D.from_counts(np.ones(shape, dtype=np.int64), (0.0, 1.0), (0.0, 1.0))
        with pytest.raises(IncompatibleGeometryError):
            a.add(b)
        assert a.count == 0

    def test_add_rejects_other_types(self):
        a = Histogram2D(2, 2, (0.0, 1.0), (0.0, 1.0))
        with pytest.raises(TypeError):
            a.add(np.ones((2, 2)))

    def test_from_counts_without_copy_shares_storage(self):
        arena = np.zeros((2, 2, 2), dtype=np.int64)
        arena[1, 0, 1] = 3
        hist = Histogram2D.from_counts(arena[1], (0.0, 1.0), (0.0, 1.0), copy=False)
        assert hist.count == 3
        assert np.shares_memory(hist.counts, arena)

    def test_from_counts_rejects_inconsistent_count(self):
        with pytest.raises(InvalidArgumentError):
            Histogram2D.from_counts([[1, 1]], (0.0, 1.0), (0.0, 1.0), count=3)
