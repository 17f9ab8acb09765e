"""
Manual sub-technique annotations placed at the middle of chosen cycles.
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

import config
from errors import InvalidParameter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnnotationInfo:
    name: str
    abbreviation: str
    description: str = ""


def cycle_midpoint_us(time_s: np.ndarray, peak_indices: np.ndarray, cycle: int) -> int:
    """
    Time halfway between peak[cycle] and peak[cycle + 1] in microseconds.
    Cycles are numbered from 1, so cycle 1 lies between the first two peaks.
    """
    n_cycles = len(peak_indices) - 1
    if not 1 <= cycle <= n_cycles:
        raise InvalidParameter(f"cycle {cycle} outside 1..{n_cycles}")
    t0 = time_s[peak_indices[cycle - 1]]
    t1 = time_s[peak_indices[cycle]]
    return int(round((t0 + t1) / 2.0 * 1e6))


class AnnotationSet:
    """Timestamped annotation ids plus a description per id."""

    def __init__(self):
        self._rows = []
        self._info = {}

    def __len__(self):
        return len(self._rows)

    def add_annotation(self, timestamp_us: int, annotation_id: int) -> None:
        self._rows.append((int(timestamp_us), int(annotation_id)))

    def set_annotation_info(self, annotation_id: int, name: str, abbreviation: str, description: str = "") -> None:
        self._info[int(annotation_id)] = AnnotationInfo(name, abbreviation, description)

    def info(self, annotation_id: int) -> AnnotationInfo:
        return self._info[int(annotation_id)]

    def annotate_cycles(self, time_s, peak_indices, cycles, annotation_id: int) -> int:
        """Add one annotation at the midpoint of every listed cycle. Returns how many were added."""
        time_s = np.asarray(time_s, dtype=float)
        peak_indices = np.asarray(peak_indices, dtype=int)
        # validate everything first so a bad cycle number leaves the set untouched
        stamps = [cycle_midpoint_us(time_s, peak_indices, c) for c in cycles]
        for ts in stamps:
            self.add_annotation(ts, annotation_id)
        return len(stamps)

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame(self._rows, columns=["time", "annotation_id"])
        return df.sort_values("time", kind="stable").reset_index(drop=True).astype("int64")

    def info_frame(self) -> pd.DataFrame:
        rows = [
            {"annotation_id": k, "name": v.name, "abbreviation": v.abbreviation, "description": v.description}
            for k, v in sorted(self._info.items())
        ]
        return pd.DataFrame(rows, columns=["annotation_id", "name", "abbreviation", "description"])


def annotate_subtechniques(
    time_s: np.ndarray,
    peak_indices: np.ndarray,
    subtechniques: dict = None,
) -> AnnotationSet:
    """
    Build an AnnotationSet from {annotation_id: {name, abbreviation, description, cycles}}.
    Cycle numbers beyond the detected cycles are skipped with a warning, since the
    example ranges belong to one particular recording.
    """
    subtechniques = subtechniques if subtechniques is not None else config.XC_SUBTECHNIQUES
    n_cycles = max(0, len(peak_indices) - 1)
    annotations = AnnotationSet()
    for annotation_id, technique in subtechniques.items():
        cycles = [c for c in technique["cycles"] if 1 <= c <= n_cycles]
        skipped = len(technique["cycles"]) - len(cycles)
        if skipped:
            logger.warning(
                "%s: %d of %d cycles not present in recording (%d cycles detected)",
                technique["abbreviation"], skipped, len(technique["cycles"]), n_cycles,
            )
        annotations.annotate_cycles(time_s, peak_indices, cycles, annotation_id)
        annotations.set_annotation_info(
            annotation_id, technique["name"], technique["abbreviation"], technique.get("description", "")
        )
    return annotations
