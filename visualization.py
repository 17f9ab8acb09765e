"""
Visualization: filtered chest/arm signals with detected cycles, and per-cycle timing.
"""

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

import config


def plot_cycles(
    accel_time: np.ndarray,
    accel_raw: np.ndarray,
    accel_f: np.ndarray,
    gyro_time: np.ndarray,
    gyro_f: np.ndarray,
    peak_indices: np.ndarray,
    peak_amplitudes: np.ndarray,
    indications: np.ndarray,
    xlim: tuple = None,
    figsize: tuple = (12, 7),
) -> plt.Figure:
    """
    Top: chest accel (raw x plus filtered axes) with the cycle indicator and cycle numbers.
    Bottom: filtered arm gyro, detected peaks and the scaled cycle indicator.
    """
    fig, (ax1, ax2) = plt.subplots(2, 1, sharex=True, figsize=figsize)

    ax1.plot(accel_time, accel_raw[:, 0], label="x-axis raw", alpha=0.5)
    for i, axis in enumerate("xyz"):
        ax1.plot(accel_time, accel_f[:, i], label=f"{axis}-axis filtered")
    ax1.plot(gyro_time, indications, label="cycle indicator")
    for k, idx in enumerate(peak_indices, start=1):
        ax1.text(gyro_time[idx], config.CYCLE_LABEL_ODD, str(k), fontsize=7)
    ax1.set_title("Accelerometer data from chest")
    ax1.set_ylabel("Amplitude")
    ax1.legend(loc="upper right")
    ax1.grid(True, alpha=0.3)

    for i, axis in enumerate("xyz"):
        ax2.plot(gyro_time, gyro_f[:, i], label=f"{axis}-axis")
    if len(peak_indices) > 0:
        ax2.plot(gyro_time[peak_indices], peak_amplitudes, "*", label=f"peak ({len(peak_indices)})")
    ax2.plot(gyro_time, indications * config.INDICATOR_PLOT_SCALE, label="cycle indicator")
    ax2.set_title("Gyroscope data from arm")
    ax2.set_xlabel("Time (s)")
    ax2.set_ylabel("Amplitude")
    ax2.legend(loc="upper right")
    ax2.grid(True, alpha=0.3)

    if xlim is not None:
        ax2.set_xlim(xlim)
    plt.tight_layout()
    return fig


def plot_cycle_durations(df: pd.DataFrame, title: str = "Cycle timing") -> plt.Figure:
    """Cycle duration and rate per cycle. df comes from cycles.cycle_table()."""
    fig, (ax1, ax2) = plt.subplots(2, 1, sharex=True, figsize=(12, 5))
    t = df["t_mid_s"].values

    ax1.plot(t, df["duration_s"], "b.-", markersize=4)
    ax1.set_ylabel("Duration (s)")
    ax1.grid(True, alpha=0.3)

    ax2.plot(t, df["cycles_per_min"], "r.-", markersize=4)
    ax2.set_ylabel("Cycles per minute")
    ax2.set_xlabel("Time (s)")
    ax2.grid(True, alpha=0.3)

    fig.suptitle(title, fontsize=12)
    plt.tight_layout()
    return fig
