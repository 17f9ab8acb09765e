"""
Signal processing for skiing IMU data: Gaussian low-pass smoothing of single
channels and 3-axis sensor arrays.

Boundary policy: convolution is zero-padded, so roughly the first and last
3*sigma samples are pulled towards zero. Output always has the input length.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
from scipy import signal as scipy_signal

from errors import DimensionMismatch, InvalidParameter

logger = logging.getLogger(__name__)


def _check_sigma(sigma: float) -> float:
    try:
        sigma = float(sigma)
    except (TypeError, ValueError):
        raise InvalidParameter(f"sigma must be a number, got {sigma!r}")
    if not math.isfinite(sigma) or sigma <= 0:
        raise InvalidParameter(f"sigma must be a positive finite number, got {sigma}")
    return sigma


def gaussian_kernel(sigma: float) -> np.ndarray:
    """
    Normalized Gaussian kernel with round(6*sigma) taps spanning [-3*sigma, 3*sigma].
    Weights sum to 1 so smoothing keeps the signal level.
    """
    sigma = _check_sigma(sigma)
    n_taps = max(1, int(round(6 * sigma)))
    x = np.linspace(-3 * sigma, 3 * sigma, n_taps)
    kernel = np.exp(-x ** 2 / (2 * sigma ** 2))
    return kernel / kernel.sum()


def smooth(x: np.ndarray, sigma: float) -> np.ndarray:
    """
    Gaussian low-pass filter. Same-length output, zero-padded edges.
    """
    kernel = gaussian_kernel(sigma)
    x = np.asarray(x, dtype=float)
    if x.ndim != 1:
        raise DimensionMismatch(f"smooth expects a 1-D signal, got shape {x.shape}")
    if len(x) == 0:
        return np.array([], dtype=float)
    # scipy keeps the size of the first argument in 'same' mode, even when the
    # signal is shorter than the kernel (np.convolve would not).
    return scipy_signal.convolve(x, kernel, mode="same", method="direct")


def smooth_axes(data: np.ndarray, sigma: float) -> np.ndarray:
    """Apply smooth() to every column of an Nx3 (or NxK) sensor array."""
    data = np.asarray(data, dtype=float)
    if data.ndim != 2:
        raise DimensionMismatch(f"smooth_axes expects an NxK array, got shape {data.shape}")
    out = np.zeros_like(data)
    for k in range(data.shape[1]):
        out[:, k] = smooth(data[:, k], sigma)
    logger.debug("Smoothed %d samples x %d axes with sigma=%s", data.shape[0], data.shape[1], sigma)
    return out


@dataclass(frozen=True)
class Signal:
    """One physical channel: timestamps in seconds and the sampled values."""

    time: np.ndarray
    values: np.ndarray

    def __post_init__(self):
        time = np.array(self.time, dtype=float)
        values = np.array(self.values, dtype=float)
        if time.ndim != 1 or values.ndim != 1:
            raise DimensionMismatch("time and values must be 1-D")
        if len(time) != len(values):
            raise DimensionMismatch(
                f"time has {len(time)} samples but values has {len(values)}"
            )
        if len(time) > 1 and np.any(np.diff(time) <= 0):
            raise InvalidParameter("timestamps must be strictly increasing")
        time.setflags(write=False)
        values.setflags(write=False)
        object.__setattr__(self, "time", time)
        object.__setattr__(self, "values", values)

    @classmethod
    def from_arrays(cls, time, values) -> "Signal":
        return cls(time=time, values=values)

    def __len__(self) -> int:
        return len(self.values)

    def smoothed(self, sigma: float) -> "Signal":
        """New Signal on the same time base with Gaussian-smoothed values."""
        return Signal(self.time, smooth(self.values, sigma))
