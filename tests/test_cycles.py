import time

import numpy as np
import pytest

import config
from cycles import cycle_indications, cycle_rate, cycle_table, detect_cycles, detect_peaks
from errors import DimensionMismatch, InvalidParameter
from signal_processing import smooth


def _runs(labels):
    """(value, start, end_inclusive) for each run of equal non-neutral labels."""
    runs = []
    start = None
    for i, v in enumerate(labels):
        if start is not None and v != labels[start]:
            if labels[start] != 0:
                runs.append((labels[start], start, i - 1))
            start = None
        if start is None:
            start = i
    if start is not None and labels[start] != 0:
        runs.append((labels[start], start, len(labels) - 1))
    return runs


def test_pulse_train_scenario():
    x = [0, 1, 0, 5, 0, 1, 0, 5, 0]
    (peaks, amps), labels = detect_cycles(x, min_distance=2, min_amplitude=2)
    np.testing.assert_array_equal(peaks, [3, 7])
    np.testing.assert_array_equal(amps, [5, 5])
    np.testing.assert_array_equal(labels, [0, 0, 0, 3, 3, 3, 3, 3, 0])


def test_nothing_above_threshold():
    x = [0, 1, 0, 1.5, 0, 1, 0]
    (peaks, amps), labels = detect_cycles(x, min_distance=1, min_amplitude=2)
    assert len(peaks) == 0
    assert len(amps) == 0
    np.testing.assert_array_equal(labels, np.zeros(7))


def test_amplitude_must_exceed_threshold():
    peaks, _ = detect_peaks([0, 2, 0, 3, 0], min_distance=1, min_amplitude=2)
    np.testing.assert_array_equal(peaks, [3])


def test_monotonic_signal_has_no_peaks():
    peaks, _ = detect_peaks(np.arange(50.0), min_distance=1, min_amplitude=1)
    assert len(peaks) == 0


def test_plateaus_and_endpoints_are_not_peaks():
    assert len(detect_peaks([0, 5, 5, 0], 1, 1)[0]) == 0
    assert len(detect_peaks([5, 0, 0, 5], 1, 1)[0]) == 0


def test_taller_peak_wins_conflict():
    peaks, amps = detect_peaks([0, 3, 0, 5, 0], min_distance=3, min_amplitude=1)
    np.testing.assert_array_equal(peaks, [3])
    np.testing.assert_array_equal(amps, [5])


def test_equal_height_keeps_earlier_peak():
    peaks, _ = detect_peaks([0, 5, 0, 5, 0, 5, 0], min_distance=3, min_amplitude=1)
    # index 1 wins over 3, then 5 is far enough from 1
    np.testing.assert_array_equal(peaks, [1, 5])


def test_suppressed_neighbours_on_both_sides():
    peaks, _ = detect_peaks([0, 4, 0, 5, 0, 4, 0], min_distance=3, min_amplitude=1)
    np.testing.assert_array_equal(peaks, [3])


@pytest.mark.parametrize("min_distance", [5, 20, 60])
def test_peaks_respect_min_distance(min_distance):
    rng = np.random.default_rng(7)
    x = smooth(rng.standard_normal(2000) * 10, 3)
    peaks, amps = detect_peaks(x, min_distance=min_distance, min_amplitude=0.5)
    assert len(peaks) > 2
    assert np.all(np.diff(peaks) >= min_distance)
    assert np.all(amps > 0.5)
    assert np.all(x[peaks] > x[peaks - 1])
    assert np.all(x[peaks] > x[peaks + 1])
    np.testing.assert_array_equal(amps, x[peaks])


def test_labels_tile_between_first_and_last_peak():
    peaks = np.array([2, 5, 9, 12])
    labels = cycle_indications(15, peaks)
    runs = _runs(list(labels))
    assert len(runs) == len(peaks) - 1
    assert runs[0] == (config.CYCLE_LABEL_ODD, 2, 4)
    assert runs[1] == (config.CYCLE_LABEL_EVEN, 5, 8)
    assert runs[2] == (config.CYCLE_LABEL_ODD, 9, 12)
    assert np.all(labels[:2] == config.CYCLE_LABEL_NEUTRAL)
    assert np.all(labels[13:] == config.CYCLE_LABEL_NEUTRAL)


def test_sine_cycles_alternate():
    n = 1000
    x = 10 * np.sin(2 * np.pi * np.arange(n) / 100)
    (peaks, _), labels = detect_cycles(x, min_distance=50, min_amplitude=5)
    assert len(peaks) == 10
    runs = _runs(list(labels))
    assert len(runs) == len(peaks) - 1
    assert runs[0][1] == peaks[0]
    assert runs[-1][2] == peaks[-1]
    values = [r[0] for r in runs]
    assert values[::2] == [config.CYCLE_LABEL_ODD] * len(values[::2])
    assert values[1::2] == [config.CYCLE_LABEL_EVEN] * len(values[1::2])


@pytest.mark.parametrize("peaks", [[], [4]])
def test_fewer_than_two_peaks_all_neutral(peaks):
    labels = cycle_indications(10, peaks)
    np.testing.assert_array_equal(labels, np.zeros(10, dtype=int))


def test_peak_outside_signal_rejected():
    with pytest.raises(DimensionMismatch):
        cycle_indications(5, [1, 7])


def test_empty_signal():
    (peaks, amps), labels = detect_cycles([], min_distance=2, min_amplitude=1)
    assert len(peaks) == 0
    assert len(amps) == 0
    assert len(labels) == 0


@pytest.mark.parametrize("min_distance", [0, -3, 2.5, True, float("inf"), float("nan"), "abc"])
def test_bad_min_distance(min_distance):
    with pytest.raises(InvalidParameter):
        detect_cycles([0, 1, 0], min_distance=min_distance, min_amplitude=1)


@pytest.mark.parametrize("min_amplitude", [0, -1, float("nan"), float("inf"), "abc"])
def test_bad_min_amplitude(min_amplitude):
    with pytest.raises(InvalidParameter):
        detect_cycles([0, 1, 0], min_distance=1, min_amplitude=min_amplitude)


def test_defaults_come_from_config():
    x = np.zeros(600)
    x[150] = 120.0
    x[300] = 50.0
    x[450] = 130.0
    peaks, _ = detect_peaks(x)
    np.testing.assert_array_equal(peaks, [150, 450])


def test_cycle_table():
    time_s = np.arange(10) * 0.5
    df = cycle_table(time_s, np.array([1, 5, 9]))
    assert list(df["cycle"]) == [1, 2]
    assert list(df["start_idx"]) == [1, 5]
    assert list(df["end_idx"]) == [5, 9]
    np.testing.assert_allclose(df["duration_s"], [2.0, 2.0])
    np.testing.assert_allclose(df["t_mid_s"], [1.5, 3.5])
    np.testing.assert_allclose(df["cycles_per_min"], [30.0, 30.0])
    assert list(df["indication"]) == [config.CYCLE_LABEL_ODD, config.CYCLE_LABEL_EVEN]


def test_cycle_table_empty_and_mismatch():
    df = cycle_table(np.arange(10.0), np.array([3]))
    assert len(df) == 0
    assert "duration_s" in df.columns
    with pytest.raises(DimensionMismatch):
        cycle_table(np.arange(10.0), np.array([1, 5]), n_samples=12)


def test_cycle_rate():
    time_s = np.arange(20) * 0.5
    assert cycle_rate(time_s, np.array([0, 4, 8])) == pytest.approx(30.0)
    assert cycle_rate(time_s, np.array([3])) == 0.0


def _greedy_reference(x, min_distance, min_amplitude):
    """Accept maxima tallest first, earlier index on ties, skipping any too close to an accepted one."""
    candidates = [i for i in range(1, len(x) - 1) if x[i] > x[i - 1] and x[i] > x[i + 1] and x[i] > min_amplitude]
    kept = []
    for i in sorted(candidates, key=lambda i: (-x[i], i)):
        if all(abs(i - k) >= min_distance for k in kept):
            kept.append(i)
    return sorted(kept)


@pytest.mark.parametrize("min_distance", [2, 7, 40])
def test_distance_selection_matches_greedy_rule(min_distance):
    rng = np.random.default_rng(min_distance)
    # rounding creates many equal heights to exercise the tie rule
    x = np.round(smooth(rng.standard_normal(3000) * 10, 2))
    peaks, _ = detect_peaks(x, min_distance=min_distance, min_amplitude=0.5)
    assert list(peaks) == _greedy_reference(list(x), min_distance, 0.5)


def test_long_noisy_signal_is_fast():
    # about 20 minutes at 256 Hz
    rng = np.random.default_rng(3)
    x = rng.standard_normal(300_000) * 10 + 50
    start = time.perf_counter()
    (peaks, _), labels = detect_cycles(x, min_distance=2, min_amplitude=1)
    (peaks_far, _), _ = detect_cycles(x, min_distance=100, min_amplitude=1)
    elapsed = time.perf_counter() - start
    assert elapsed < 10.0
    assert len(labels) == len(x)
    assert np.all(np.diff(peaks) >= 2)
    assert np.all(np.diff(peaks_far) >= 100)


def test_cycle_table_rejects_negative_peak_index():
    with pytest.raises(DimensionMismatch):
        cycle_table(np.arange(10.0), np.array([-1, 5]))
