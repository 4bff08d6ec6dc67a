"""
Shift scans for shiftmi.

This module evaluates the mutual information between two time series over a
range of relative shifts, either directly or with bootstrap resampling.
"""

# Plain scan
from .scan import (
    get_shifts,
    overlap_slices,
    shifted_mutual_information,
    shifted_mutual_information_indices,
)

# Bootstrap scan
from .bootstrap import (
    bootstrapped_mi,
    shifted_mutual_information_with_bootstrap,
    spawn_shift_seeds,
    summarize_bootstrap,
)

# Validation
from .validation import (
    validate_series_pair,
    validate_scan_parameters,
    validate_bootstrap_parameters,
    validate_output_buffer,
)

__all__ = [
    # Plain scan
    "get_shifts",
    "overlap_slices",
    "shifted_mutual_information",
    "shifted_mutual_information_indices",
    # Bootstrap scan
    "bootstrapped_mi",
    "shifted_mutual_information_with_bootstrap",
    "spawn_shift_seeds",
    "summarize_bootstrap",
    # Validation
    "validate_series_pair",
    "validate_scan_parameters",
    "validate_bootstrap_parameters",
    "validate_output_buffer",
]
