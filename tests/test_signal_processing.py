import dataclasses

import numpy as np
import pytest

from errors import DimensionMismatch, InvalidParameter
from signal_processing import Signal, gaussian_kernel, smooth, smooth_axes


@pytest.mark.parametrize("sigma", [0.1, 0.5, 1, 2.5, 10, 15, 42.7])
def test_kernel_sums_to_one(sigma):
    assert abs(gaussian_kernel(sigma).sum() - 1.0) < 1e-9


def test_sigma_one_kernel_shape():
    k = gaussian_kernel(1)
    assert len(k) == 6
    np.testing.assert_allclose(k, k[::-1], atol=1e-15)
    # even length: the two middle taps share the maximum
    assert k[2] == pytest.approx(k.max())
    assert k[3] == pytest.approx(k.max())
    assert np.argmax(k) in (2, 3)


def test_kernel_length_scales_with_sigma():
    assert len(gaussian_kernel(10)) == 60
    assert len(gaussian_kernel(15)) == 90
    assert len(gaussian_kernel(0.05)) == 1


@pytest.mark.parametrize("sigma", [0, -1, -0.5, float("nan"), float("inf")])
def test_bad_sigma_rejected(sigma):
    with pytest.raises(InvalidParameter):
        gaussian_kernel(sigma)
    with pytest.raises(InvalidParameter):
        smooth(np.ones(10), sigma)


def test_invalid_parameter_is_value_error():
    with pytest.raises(ValueError):
        smooth(np.ones(10), 0)


def test_smooth_is_linear():
    rng = np.random.default_rng(0)
    x = rng.standard_normal(500)
    y = rng.standard_normal(500)
    a, b = 2.5, -0.7
    np.testing.assert_allclose(
        smooth(a * x + b * y, 3), a * smooth(x, 3) + b * smooth(y, 3), atol=1e-9
    )


def test_constant_signal_unchanged_away_from_edges():
    sigma = 4
    n_taps = len(gaussian_kernel(sigma))
    out = smooth(np.full(200, 7.0), sigma)
    np.testing.assert_allclose(out[n_taps:-n_taps], 7.0, atol=1e-9)
    # zero padding pulls the edges down
    assert out[0] < 7.0
    assert out[-1] < 7.0


def test_same_length_output():
    assert len(smooth(np.arange(100.0), 2)) == 100
    # signal shorter than the kernel keeps its own length
    assert len(smooth(np.arange(5.0), 10)) == 5


def test_empty_signal_returns_empty():
    out = smooth([], 3)
    assert out.shape == (0,)


def test_empty_signal_still_validates_sigma():
    with pytest.raises(InvalidParameter):
        smooth([], -1)


def test_smooth_rejects_2d():
    with pytest.raises(DimensionMismatch):
        smooth(np.ones((10, 3)), 1)


def test_smooth_axes_matches_per_column():
    rng = np.random.default_rng(1)
    data = rng.standard_normal((300, 3))
    out = smooth_axes(data, 5)
    assert out.shape == data.shape
    for k in range(3):
        np.testing.assert_allclose(out[:, k], smooth(data[:, k], 5))


def test_signal_length_mismatch():
    with pytest.raises(DimensionMismatch):
        Signal([0.0, 1.0, 2.0], [1.0, 2.0])


def test_signal_requires_increasing_time():
    with pytest.raises(InvalidParameter):
        Signal([0.0, 1.0, 1.0], [1.0, 2.0, 3.0])


def test_signal_is_immutable():
    s = Signal.from_arrays(np.arange(5.0), np.ones(5))
    assert len(s) == 5
    with pytest.raises(ValueError):
        s.values[0] = 3.0
    with pytest.raises(dataclasses.FrozenInstanceError):
        s.values = np.zeros(5)


def test_signal_does_not_alias_input():
    values = np.ones(5)
    s = Signal(np.arange(5.0), values)
    values[0] = 9.0
    assert s.values[0] == 1.0


def test_signal_smoothed_keeps_time_base():
    s = Signal(np.arange(50) / 10.0, np.sin(np.arange(50)))
    sm = s.smoothed(2)
    np.testing.assert_array_equal(sm.time, s.time)
    np.testing.assert_allclose(sm.values, smooth(s.values, 2))


def test_empty_signal_allowed():
    s = Signal([], [])
    assert len(s) == 0
    assert len(s.smoothed(1)) == 0
