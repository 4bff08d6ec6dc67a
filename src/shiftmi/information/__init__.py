"""
Binned information theory for shiftmi.

This module provides the bin-index mapping of raw samples and the one- and
two-dimensional histograms from which mutual information is computed.
"""

# Bin index mapping
from .binning import (
    INVALID_INDEX,
    map_index,
    map_indices,
    resolve_range,
)

# Histograms
from .histogram import (
    Histogram1D,
    Histogram2D,
)

__all__ = [
    # Binning
    "INVALID_INDEX",
    "map_index",
    "map_indices",
    "resolve_range",
    # Histograms
    "Histogram1D",
    "Histogram2D",
]
