"""
Cycle detection: peaks on the smoothed arm gyroscope, alternating cycle
indications between consecutive peaks, and per-cycle timing features.
"""

import logging
import math

import numpy as np
import pandas as pd
from scipy import signal as scipy_signal

import config
from errors import DimensionMismatch, InvalidParameter

logger = logging.getLogger(__name__)


def _check_peak_params(min_distance: int, min_amplitude: float) -> tuple[int, float]:
    try:
        if isinstance(min_distance, bool) or not math.isfinite(min_distance):
            raise ValueError
        distance = int(min_distance)
        if distance != min_distance or distance < 1:
            raise ValueError
    except (TypeError, ValueError, OverflowError):
        raise InvalidParameter(f"min_distance must be a positive integer, got {min_distance!r}")
    try:
        min_amplitude = float(min_amplitude)
    except (TypeError, ValueError):
        raise InvalidParameter(f"min_amplitude must be a number, got {min_amplitude!r}")
    if not math.isfinite(min_amplitude) or min_amplitude <= 0:
        raise InvalidParameter(f"min_amplitude must be positive, got {min_amplitude}")
    return distance, min_amplitude


def _select_by_distance(candidates: np.ndarray, heights: np.ndarray, min_distance: int) -> np.ndarray:
    """
    Keep-mask over index-sorted candidates. Peaks are accepted tallest first
    (earlier index first on equal height); each accepted peak suppresses only
    the neighbours within min_distance on either side.
    """
    n = len(candidates)
    keep = [True] * n
    pos = candidates.tolist()
    # lexsort is stable, so equal heights keep index order
    order = np.lexsort((candidates, -heights)).tolist()
    for j in order:
        if not keep[j]:
            continue
        k = j - 1
        while k >= 0 and pos[j] - pos[k] < min_distance:
            keep[k] = False
            k -= 1
        k = j + 1
        while k < n and pos[k] - pos[j] < min_distance:
            keep[k] = False
            k += 1
    return np.array(keep, dtype=bool)


def detect_peaks(
    x: np.ndarray,
    min_distance: int = None,
    min_amplitude: float = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Strict local maxima above min_amplitude, at least min_distance samples apart.
    Returns (peak_indices, peak_amplitudes) sorted by index.

    When two maxima are closer than min_distance the taller one is kept. On
    equal height the earlier one is kept.
    """
    min_distance = min_distance if min_distance is not None else config.CYCLE_PEAK_MIN_DISTANCE
    min_amplitude = min_amplitude if min_amplitude is not None else config.CYCLE_PEAK_MIN_AMPLITUDE
    min_distance, min_amplitude = _check_peak_params(min_distance, min_amplitude)

    x = np.asarray(x, dtype=float)
    if x.ndim != 1:
        raise DimensionMismatch(f"detect_peaks expects a 1-D signal, got shape {x.shape}")
    if len(x) < 3:
        return np.array([], dtype=int), np.array([], dtype=float)

    # argrelmax with order=1 is a strict comparison on both sides; endpoints never qualify
    candidates = scipy_signal.argrelmax(x, order=1)[0]
    candidates = candidates[x[candidates] > min_amplitude]
    if len(candidates) == 0 or min_distance == 1:
        return candidates.astype(int), x[candidates]

    peaks = candidates[_select_by_distance(candidates, x[candidates], min_distance)]
    return peaks.astype(int), x[peaks]


def cycle_indications(n_samples: int, peak_indices: np.ndarray) -> np.ndarray:
    """
    Label array of length n_samples. Cycle i (1-based) spans peak[i]..peak[i+1]
    and gets CYCLE_LABEL_ODD for odd i, CYCLE_LABEL_EVEN for even i. A later
    cycle overwrites the boundary sample it shares with the previous one.
    Samples before the first and after the last peak stay neutral.
    """
    labels = np.full(int(n_samples), config.CYCLE_LABEL_NEUTRAL, dtype=int)
    peak_indices = np.asarray(peak_indices, dtype=int)
    if len(peak_indices) and (peak_indices.min() < 0 or peak_indices.max() >= n_samples):
        raise DimensionMismatch("peak index outside the signal")
    for i in range(1, len(peak_indices)):
        label = config.CYCLE_LABEL_ODD if i % 2 else config.CYCLE_LABEL_EVEN
        labels[peak_indices[i - 1]:peak_indices[i] + 1] = label
    return labels


def detect_cycles(
    x: np.ndarray,
    min_distance: int = None,
    min_amplitude: float = None,
) -> tuple[tuple[np.ndarray, np.ndarray], np.ndarray]:
    """
    Peaks plus cycle indication labels for a smoothed signal.
    Returns ((peak_indices, peak_amplitudes), labels) with len(labels) == len(x).
    """
    peaks, amplitudes = detect_peaks(x, min_distance, min_amplitude)
    labels = cycle_indications(len(np.asarray(x)), peaks)
    logger.info("Detected %d peaks (%d cycles)", len(peaks), max(0, len(peaks) - 1))
    return (peaks, amplitudes), labels


def cycle_rate(time_s: np.ndarray, peak_indices: np.ndarray) -> float:
    """Cycles per minute over the detected span."""
    if len(peak_indices) < 2:
        return 0.0
    time_s = np.asarray(time_s, dtype=float)
    t_span = time_s[peak_indices[-1]] - time_s[peak_indices[0]]
    if t_span <= 0:
        return 0.0
    return (len(peak_indices) - 1) / t_span * 60.0


def cycle_table(time_s: np.ndarray, peak_indices: np.ndarray, n_samples: int = None) -> pd.DataFrame:
    """
    One row per cycle between consecutive peaks:
    cycle, start_idx, end_idx, t_start_s, t_end_s, t_mid_s, duration_s, cycles_per_min, indication.
    """
    columns = [
        "cycle", "start_idx", "end_idx", "t_start_s", "t_end_s",
        "t_mid_s", "duration_s", "cycles_per_min", "indication",
    ]
    time_s = np.asarray(time_s, dtype=float)
    peak_indices = np.asarray(peak_indices, dtype=int)
    if n_samples is not None and n_samples != len(time_s):
        raise DimensionMismatch(f"time has {len(time_s)} samples, signal has {n_samples}")
    if len(peak_indices) and (peak_indices.min() < 0 or peak_indices.max() >= len(time_s)):
        raise DimensionMismatch("peak index outside the time axis")
    if len(peak_indices) < 2:
        return pd.DataFrame(columns=columns)

    start = peak_indices[:-1]
    end = peak_indices[1:]
    t_start = time_s[start]
    t_end = time_s[end]
    duration = t_end - t_start
    with np.errstate(divide="ignore"):
        cpm = np.where(duration > 0, 60.0 / duration, np.nan)
    cycle = np.arange(1, len(peak_indices))
    indication = np.where(cycle % 2 == 1, config.CYCLE_LABEL_ODD, config.CYCLE_LABEL_EVEN)

    return pd.DataFrame({
        "cycle": cycle,
        "start_idx": start,
        "end_idx": end,
        "t_start_s": t_start,
        "t_end_s": t_end,
        "t_mid_s": (t_start + t_end) / 2.0,
        "duration_s": duration,
        "cycles_per_min": cpm,
        "indication": indication,
    })
