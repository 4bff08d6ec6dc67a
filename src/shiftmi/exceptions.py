"""
Exception hierarchy for shiftmi.

All exceptions inherit from ShiftMIError to allow catching any library-specific
error. Each one also derives from ValueError, so code that already guards
numerical calls with ``except ValueError`` keeps working.

Messages name the offending parameter together with the value received.
"""


class ShiftMIError(Exception):
    """Base exception for all shiftmi errors."""
    pass


class InvalidArgumentError(ShiftMIError, ValueError):
    """
    A scalar parameter is outside its allowed domain.

    Raised for non-positive bin counts, shift steps, bootstrap sample or
    repetition counts, malformed arrays and unusable output buffers.
    """
    pass


class InvalidRangeError(ShiftMIError, ValueError):
    """
    A value range is empty or inverted (``min >= max``) or not finite.

    Attributes:
        vmin: Lower bound that was received
        vmax: Upper bound that was received
    """

    def __init__(self, message: str, vmin=None, vmax=None):
        super().__init__(message)
        self.vmin = vmin
        self.vmax = vmax


class SizeMismatchError(ShiftMIError, ValueError):
    """
    Two sequences that must be paired element by element differ in length.

    Attributes:
        size_x: Length of the first sequence
        size_y: Length of the second sequence
    """

    def __init__(self, message: str, size_x: int | None = None, size_y: int | None = None):
        super().__init__(message)
        self.size_x = size_x
        self.size_y = size_y


class ShiftOutOfBoundsError(ShiftMIError, ValueError):
    """
    The requested shift range leaves no overlap between the two series.

    Attributes:
        shift: The offending shift
        length: Length of the input series
    """

    def __init__(self, message: str, shift: int | None = None, length: int | None = None):
        super().__init__(message)
        self.shift = shift
        self.length = length


class IncompatibleGeometryError(ShiftMIError, ValueError):
    """
    Two histograms with different bin counts were combined.
    """
    pass


class EmptyHistogramError(ShiftMIError, ValueError):
    """
    A probability-based quantity was requested from a histogram holding no
    elements.

    Attributes:
        shift: Shift whose histogram was empty, when raised from a scan
    """

    def __init__(self, message: str, shift: int | None = None):
        super().__init__(message)
        self.shift = shift


__all__ = [
    "ShiftMIError",
    "InvalidArgumentError",
    "InvalidRangeError",
    "SizeMismatchError",
    "ShiftOutOfBoundsError",
    "IncompatibleGeometryError",
    "EmptyHistogramError",
]
