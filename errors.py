"""
Exceptions raised at the boundaries of the processing functions.
Both subclass ValueError so callers catching bad input keep working.
"""


class CycleAnalysisError(ValueError):
    """Base class for rejected inputs."""


class InvalidParameter(CycleAnalysisError):
    """A tuning parameter (sigma, peak distance, amplitude, cycle number) is out of range."""


class DimensionMismatch(CycleAnalysisError):
    """Paired arrays (e.g. time and values) have different lengths."""
