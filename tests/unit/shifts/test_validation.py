"""Tests for shift scan parameter validation."""

import numpy as np
import pytest

from shiftmi.exceptions import (
    InvalidArgumentError,
    InvalidRangeError,
    ShiftOutOfBoundsError,
    SizeMismatchError,
)
from shiftmi.shifts.validation import (
    validate_bootstrap_parameters,
    validate_output_buffer,
    validate_scan_parameters,
    validate_series_pair,
)


class TestValidateSeriesPair:

    def test_returns_length(self):
        assert validate_series_pair(np.zeros(7), np.ones(7)) == 7

    def test_mismatch_names_both_sizes(self):
        with pytest.raises(SizeMismatchError, match="3 and 4"):
            validate_series_pair(np.zeros(3), np.zeros(4))

    def test_custom_names(self):
        with pytest.raises(InvalidArgumentError, match="indices_y"):
            validate_series_pair(np.zeros(3), np.zeros((3, 1)), names=("indices_x", "indices_y"))

    def test_empty(self):
        with pytest.raises(InvalidArgumentError):
            validate_series_pair(np.zeros(0), np.zeros(0))


class TestValidateScanParameters:

    def test_valid(self):
        validate_scan_parameters(-3, 3, 2, 2, (0, 1), (0, 1), 4)

    def test_checks_run_in_order(self):
        # the bin count is reported before the inverted range
        with pytest.raises(InvalidArgumentError):
            validate_scan_parameters(-3, 3, 0, 2, (1, 0), (0, 1), 10)

    def test_negative_shifts_only(self):
        validate_scan_parameters(-9, -2, 2, 2, (0, 1), (0, 1), 10)

    def test_numpy_integers(self):
        validate_scan_parameters(np.int64(-1), np.int32(1), np.int64(2), 2, (0, 1), (0, 1), 5)

    def test_range_y(self):
        with pytest.raises(InvalidRangeError, match="range_y"):
            validate_scan_parameters(-1, 1, 2, 2, (0, 1), (1, 1), 5)

    def test_out_of_bounds_attributes(self):
        with pytest.raises(ShiftOutOfBoundsError) as exc_info:
            validate_scan_parameters(-7, 3, 2, 2, (0, 1), (0, 1), 7)
        assert exc_info.value.shift == 7
        assert exc_info.value.length == 7


class TestValidateBootstrapParameters:

    def test_valid(self):
        validate_bootstrap_parameters(10, 3, 10)

    def test_exceeds_overlap(self):
        with pytest.raises(InvalidArgumentError, match="shortest overlap"):
            validate_bootstrap_parameters(11, 3, 10)

    def test_bool_is_not_integer(self):
        with pytest.raises(TypeError):
            validate_bootstrap_parameters(True, 1, 10)


class TestValidateOutputBuffer:

    def test_exact_shape(self):
        out = np.zeros((2, 3))
        assert validate_output_buffer(out, (2, 3), np.dtype(np.float64)) is out

    def test_flat_buffer_gives_view(self):
        out = np.zeros(6)
        view = validate_output_buffer(out, (2, 3), np.dtype(np.float64), allow_flat=True)
        assert view.shape == (2, 3)
        view[1, 0] = 5.0
        assert out[3] == 5.0

    def test_flat_buffer_not_allowed(self):
        with pytest.raises(InvalidArgumentError):
            validate_output_buffer(np.zeros(6), (2, 3), np.dtype(np.float64))

    def test_non_contiguous_flat_buffer(self):
        with pytest.raises(InvalidArgumentError):
            validate_output_buffer(
                np.zeros(12)[::2], (2, 3), np.dtype(np.float64), allow_flat=True
            )

    def test_wrong_dtype(self):
        with pytest.raises(InvalidArgumentError, match="dtype"):
            validate_output_buffer(np.zeros(3, dtype=np.float32), (3,), np.dtype(np.float64))

    def test_not_an_array(self):
        with pytest.raises(InvalidArgumentError):
            validate_output_buffer([0.0, 0.0], (2,), np.dtype(np.float64))
