"""
Generate synthetic chest accelerometer and arm gyroscope data for testing the
pipeline without the sample recording. Simulates classical cross-country
skiing with diagonal stride, double poling and downhill tucking phases.
"""

import numpy as np

import config

# (sub-technique, duration s, arm swing frequency Hz, gyro z amplitude deg/s)
DEFAULT_PHASES = (
    ("DIA", 20.0, 0.8, 250.0),
    ("TCK", 8.0, 0.0, 0.0),
    ("DP", 20.0, 0.9, 200.0),
    ("DIA", 15.0, 0.8, 250.0),
)


def generate_synthetic_xc_imu(
    phases: tuple = DEFAULT_PHASES,
    sample_rate_hz: float = 256.0,
    noise_level_accel: float = 0.3,
    noise_level_gyro: float = 15.0,
    start_time_s: float = 0.0,
    seed: int = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Returns (time_s (N,), chest accel (Nx3) in m/s², arm gyro (Nx3) in deg/s).
    Arm gyro z swings sinusoidally at the phase frequency; tucking has no swing.
    """
    rng = np.random.default_rng(seed)
    freq = []
    amp = []
    for _, duration, f_hz, a in phases:
        n_phase = int(duration * sample_rate_hz)
        freq.append(np.full(n_phase, f_hz))
        amp.append(np.full(n_phase, a))
    freq = np.concatenate(freq)
    amp = np.concatenate(amp)
    n = len(freq)
    t = start_time_s + np.arange(n) / sample_rate_hz

    # Continuous phase across technique changes
    phase = 2 * np.pi * np.cumsum(freq) / sample_rate_hz

    gyro = np.zeros((n, 3))
    gyro[:, 0] = 0.2 * amp * np.cos(phase) + rng.standard_normal(n) * noise_level_gyro
    gyro[:, 1] = 0.1 * amp * np.sin(2 * phase) + rng.standard_normal(n) * noise_level_gyro
    gyro[:, 2] = amp * np.sin(phase) + rng.standard_normal(n) * noise_level_gyro

    # Chest: gravity on x (upright torso), trunk bounce at twice the arm frequency
    swing = amp / max(amp.max(), 1.0)
    accel = np.zeros((n, 3))
    accel[:, 0] = 9.81 + 2.0 * swing * np.sin(2 * phase) + rng.standard_normal(n) * noise_level_accel
    accel[:, 1] = 1.0 * swing * np.sin(phase) + rng.standard_normal(n) * noise_level_accel
    accel[:, 2] = 1.5 * swing * np.cos(2 * phase) + rng.standard_normal(n) * noise_level_accel

    return t, accel, gyro


def generate_synthetic_csv(
    accel_path: str,
    gyro_path: str,
    sample_rate_hz: float = 256.0,
    **kwargs,
) -> None:
    """
    Write synthetic chest accel and arm gyro to two CSVs with column names
    matching config.DEFAULT_ACCEL_COLS / DEFAULT_GYRO_COLS.
    """
    import pandas as pd

    t, accel, gyro = generate_synthetic_xc_imu(sample_rate_hz=sample_rate_hz, **kwargs)
    time_col = config.DEFAULT_TIME_COL
    pd.DataFrame(
        np.hstack([t.reshape(-1, 1), accel]),
        columns=[time_col] + list(config.DEFAULT_ACCEL_COLS.values()),
    ).to_csv(accel_path, index=False)
    pd.DataFrame(
        np.hstack([t.reshape(-1, 1), gyro]),
        columns=[time_col] + list(config.DEFAULT_GYRO_COLS.values()),
    ).to_csv(gyro_path, index=False)
    print(f"Wrote synthetic data to {accel_path} and {gyro_path} ({len(t)} rows each)")


if __name__ == "__main__":
    generate_synthetic_csv("synthetic_chest_accel.csv", "synthetic_arm_gyro.csv", seed=42)
