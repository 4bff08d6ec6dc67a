"""
shiftmi - Shifted mutual information of time series

Estimates the binned mutual information between two time series as a
function of their relative shift, optionally with bootstrap resampling,
to find the lag of maximal coupling.
"""

__version__ = "0.9.0"

# Global joblib backend for shift scans. The histogram kernels release the
# GIL, so threads scale without copying the index arrays to worker processes.
PARALLEL_BACKEND = "threading"

_SUPPORTED_BACKENDS = ("threading", "loky", "multiprocessing")


def set_parallel_backend(name):
    """Set the global joblib backend used by shift scans.

    Parameters
    ----------
    name : str
        One of 'threading', 'loky', 'multiprocessing'.
    """
    global PARALLEL_BACKEND
    if name not in _SUPPORTED_BACKENDS:
        raise ValueError(
            f"Unknown parallel backend {name!r}, expected one of {_SUPPORTED_BACKENDS}"
        )
    PARALLEL_BACKEND = name


# Core modules
from . import exceptions
from . import information
from . import shifts
from . import utils

# Errors
from .exceptions import (
    ShiftMIError,
    InvalidArgumentError,
    InvalidRangeError,
    SizeMismatchError,
    ShiftOutOfBoundsError,
    IncompatibleGeometryError,
    EmptyHistogramError,
)

# Binning and histograms
from .information import (
    INVALID_INDEX,
    map_index,
    map_indices,
    resolve_range,
    Histogram1D,
    Histogram2D,
)

# Shift scans
from .shifts import (
    get_shifts,
    shifted_mutual_information,
    shifted_mutual_information_indices,
    shifted_mutual_information_with_bootstrap,
    bootstrapped_mi,
    summarize_bootstrap,
)

__all__ = [
    # Version and configuration
    "__version__",
    "PARALLEL_BACKEND",
    "set_parallel_backend",
    # Modules
    "exceptions",
    "information",
    "shifts",
    "utils",
    # Errors
    "ShiftMIError",
    "InvalidArgumentError",
    "InvalidRangeError",
    "SizeMismatchError",
    "ShiftOutOfBoundsError",
    "IncompatibleGeometryError",
    "EmptyHistogramError",
    # Binning and histograms
    "INVALID_INDEX",
    "map_index",
    "map_indices",
    "resolve_range",
    "Histogram1D",
    "Histogram2D",
    # Shift scans
    "get_shifts",
    "shifted_mutual_information",
    "shifted_mutual_information_indices",
    "shifted_mutual_information_with_bootstrap",
    "bootstrapped_mi",
    "summarize_bootstrap",
]
