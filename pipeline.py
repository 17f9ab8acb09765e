"""
End-to-end pipeline: load chest accel + arm gyro -> Gaussian smoothing ->
cycle detection on gyro z -> annotations -> session (optionally written to disk).
"""

import logging

import numpy as np
import pandas as pd

import config
from annotations import annotate_subtechniques
from cycles import cycle_rate, cycle_table, detect_cycles
from errors import DimensionMismatch, InvalidParameter
from session import Session, signal_table, video_offset_us, write_session
from signal_processing import Signal, smooth_axes

logger = logging.getLogger(__name__)


def _to_seconds(t: np.ndarray, time_unit: str = None) -> np.ndarray:
    """
    Convert a time column to seconds. time_unit is "s", "ms" or None to infer:
    milliseconds when the clock reads like epoch milliseconds or the sample
    spacing exceeds one unit. Relative millisecond clocks logged at 1 kHz or
    faster cannot be told apart from seconds; pass time_unit="ms" for those.
    """
    if time_unit is None:
        is_ms = len(t) > 0 and (
            abs(t[0]) > config.EPOCH_MS_THRESHOLD
            or (len(t) > 1 and np.median(np.diff(t)) > 1.0)
        )
        time_unit = "ms" if is_ms else "s"
    if time_unit == "ms":
        return t / 1000.0
    if time_unit != "s":
        raise InvalidParameter(f"time_unit must be 's', 'ms' or None, got {time_unit!r}")
    return t


def load_sensor_csv(
    filepath: str,
    time_col: str = None,
    axis_cols: dict = None,
    time_unit: str = None,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Load one 3-axis sensor export. Returns (time_s (N,), data (Nx3)).
    Timestamps in milliseconds (given or inferred by _to_seconds) become seconds; the
    original clock is kept (no shift to zero) so sensors stay synchronized.
    """
    df = pd.read_csv(filepath)
    time_col = time_col or config.DEFAULT_TIME_COL
    axis_cols = axis_cols or config.DEFAULT_ACCEL_COLS

    if time_col not in df.columns:
        # Try common alternatives
        for c in ["timestamp", "Timestamp", "Time", "time", "t"]:
            if c in df.columns:
                time_col = c
                break
        else:
            raise ValueError(f"No time column in {filepath}. Columns: {df.columns.tolist()}")
    missing = [c for c in axis_cols.values() if c not in df.columns]
    if missing:
        raise ValueError(f"Missing columns {missing} in {filepath}")

    df = df.dropna(subset=[time_col] + list(axis_cols.values()))
    t = pd.to_numeric(df[time_col], errors="coerce").to_numpy(dtype=float)
    t = _to_seconds(t, time_unit)
    data = np.column_stack([pd.to_numeric(df[axis_cols[k]]).to_numpy(dtype=float) for k in ("x", "y", "z")])
    logger.info("Loaded %d samples from %s", len(t), filepath)
    return t, data


def build_session(
    accel_time: np.ndarray,
    accel_f: np.ndarray,
    gyro_time: np.ndarray,
    indications: np.ndarray,
    annotations=None,
    video_path: str = None,
    name: str = None,
) -> Session:
    """Session with the cycle indicator, filtered chest accel, annotations and video."""
    session = Session(name)
    session.add_table("cycle_indicator", signal_table(gyro_time, cycle_indicator=indications))
    session.add_table(
        "filtered_acc_chest",
        signal_table(accel_time, x_axis=accel_f[:, 0], y_axis=accel_f[:, 1], z_axis=accel_f[:, 2]),
    )
    if annotations is not None:
        session.set_annotations(annotations)
    if video_path is not None and len(accel_time):
        session.set_video(video_path, video_offset_us(accel_time[0]))
    return session


def run_pipeline(
    accel_csv: str = None,
    gyro_csv: str = None,
    accel: np.ndarray = None,
    accel_time: np.ndarray = None,
    gyro: np.ndarray = None,
    gyro_time: np.ndarray = None,
    subtechniques: dict = None,
    video_path: str = None,
    out_dir: str = None,
    make_figures: bool = False,
    accel_sigma: float = None,
    gyro_sigma: float = None,
    min_distance: int = None,
    min_amplitude: float = None,
    time_unit: str = None,
) -> dict:
    """
    Run full pipeline. Either:
      - accel_csv and gyro_csv: paths to the chest accelerometer and arm gyroscope exports, or
      - accel (Nx3), accel_time (N,), gyro (Mx3), gyro_time (M,) provided directly.
    Returns dict with: accel_f, gyro_f, peaks, amplitudes, cycle_indications,
    df_cycles, cycles_per_min, annotations, session, session_dir, figures.
    """
    if accel_csv is not None and gyro_csv is not None:
        accel_time, accel = load_sensor_csv(accel_csv, axis_cols=config.DEFAULT_ACCEL_COLS, time_unit=time_unit)
        gyro_time, gyro = load_sensor_csv(gyro_csv, axis_cols=config.DEFAULT_GYRO_COLS, time_unit=time_unit)
    elif accel is None or gyro is None or accel_time is None or gyro_time is None:
        raise ValueError("Provide either accel_csv and gyro_csv or (accel, accel_time, gyro, gyro_time)")

    accel = np.asarray(accel, dtype=float)
    gyro = np.asarray(gyro, dtype=float)
    accel_time = np.asarray(accel_time, dtype=float)
    gyro_time = np.asarray(gyro_time, dtype=float)
    if len(accel) != len(accel_time):
        raise DimensionMismatch(f"accel has {len(accel)} samples, accel_time has {len(accel_time)}")
    if len(gyro) != len(gyro_time):
        raise DimensionMismatch(f"gyro has {len(gyro)} samples, gyro_time has {len(gyro_time)}")

    # Filter
    accel_sigma = accel_sigma if accel_sigma is not None else config.ACCEL_GAUSS_SIGMA
    gyro_sigma = gyro_sigma if gyro_sigma is not None else config.GYRO_GAUSS_SIGMA
    accel_f = smooth_axes(accel, accel_sigma)
    gyro_f = smooth_axes(gyro, gyro_sigma)

    # Cycles from arm gyro z
    arm_z = Signal(gyro_time, gyro_f[:, 2])
    (peaks, amplitudes), indications = detect_cycles(arm_z.values, min_distance, min_amplitude)
    df_cycles = cycle_table(gyro_time, peaks, n_samples=len(gyro_f))
    cpm = cycle_rate(gyro_time, peaks)

    annotations = annotate_subtechniques(gyro_time, peaks, subtechniques)
    session = build_session(accel_time, accel_f, gyro_time, indications, annotations, video_path)

    session_dir = None
    if out_dir is not None:
        session_dir = write_session(session, out_dir)

    figures = []
    if make_figures:
        from visualization import plot_cycle_durations, plot_cycles

        figures.append(plot_cycles(accel_time, accel, accel_f, gyro_time, gyro_f, peaks, amplitudes, indications))
        if len(df_cycles) > 0:
            figures.append(plot_cycle_durations(df_cycles))

    return {
        "accel_f": accel_f,
        "gyro_f": gyro_f,
        "peaks": peaks,
        "amplitudes": amplitudes,
        "cycle_indications": indications,
        "df_cycles": df_cycles,
        "cycles_per_min": cpm,
        "annotations": annotations,
        "session": session,
        "session_dir": session_dir,
        "figures": figures,
    }
