"""
Session export: signal tables, annotations and a video reference written as
plain CSV files plus a JSON manifest.
"""

import json
import logging
from pathlib import Path

import numpy as np
import pandas as pd

import config
from annotations import AnnotationSet
from errors import DimensionMismatch, InvalidParameter

logger = logging.getLogger(__name__)


def to_microseconds(time_s: np.ndarray) -> np.ndarray:
    return np.round(np.asarray(time_s, dtype=float) * 1e6).astype(np.int64)


def video_offset_us(first_time_s: float, lag_s: float = None) -> int:
    """Video start relative to the data clock: first sample time plus a fixed lag."""
    lag_s = config.VIDEO_LAG_S if lag_s is None else lag_s
    return int(round(first_time_s * 1e6 + lag_s * 1e6))


def signal_table(time_s: np.ndarray, **columns) -> pd.DataFrame:
    """
    Table with an int64 'time' column (microseconds) followed by the given columns.
    """
    time_us = to_microseconds(time_s)
    data = {"time": time_us}
    for name, values in columns.items():
        values = np.asarray(values)
        if len(values) != len(time_us):
            raise DimensionMismatch(
                f"column '{name}' has {len(values)} samples, time has {len(time_us)}"
            )
        data[name] = values
    return pd.DataFrame(data)


class Session:
    """Named collection of tables, annotations and an optional video."""

    def __init__(self, name: str = None):
        self.name = name or config.SESSION_NAME
        self.tables = {}
        self.annotations = AnnotationSet()
        self.video_path = None
        self.video_start_us = None

    def add_table(self, name: str, df: pd.DataFrame) -> None:
        if "time" not in df.columns:
            raise InvalidParameter(f"table '{name}' has no 'time' column")
        if not pd.api.types.is_integer_dtype(df["time"]):
            raise InvalidParameter(f"table '{name}': 'time' must be integer microseconds")
        self.tables[name] = df

    def set_annotations(self, annotations: AnnotationSet) -> None:
        self.annotations = annotations

    def set_video(self, path, start_time_us: int) -> None:
        self.video_path = Path(path)
        self.video_start_us = int(start_time_us)


def write_session(session: Session, out_dir) -> Path:
    """
    Write every table to <name>.csv, annotations to annotations.csv and
    annotation_info.csv, and a session.json manifest. Returns the directory.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    for name, df in session.tables.items():
        df.to_csv(out_dir / f"{name}.csv", index=False)
    session.annotations.to_frame().to_csv(out_dir / "annotations.csv", index=False)
    session.annotations.info_frame().to_csv(out_dir / "annotation_info.csv", index=False)

    manifest = {
        "name": session.name,
        "tables": {
            name: {"file": f"{name}.csv", "columns": list(df.columns), "units": {"time": config.TIME_UNIT}}
            for name, df in session.tables.items()
        },
        "annotations": {"file": "annotations.csv", "info": "annotation_info.csv", "count": len(session.annotations)},
        "video": None,
    }
    if session.video_path is not None:
        manifest["video"] = {"path": str(session.video_path), "start_time_us": session.video_start_us}
    with open(out_dir / "session.json", "w") as f:
        json.dump(manifest, f, indent=2)

    logger.info("Wrote session '%s' (%d tables) to %s", session.name, len(session.tables), out_dir)
    return out_dir
