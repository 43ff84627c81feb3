import numpy as np
import pytest

from rasteringest.services.band_normalizer import BandNormalizer, normalize_band


def test_linear_range():
    assert normalize_band([10, 20, 30, 40]).tolist() == [0, 85, 170, 255]


@pytest.mark.parametrize("values", [
    [7, 7, 7, 7],
    [7.0, np.nan, 7.0, np.inf],
    [np.nan, np.nan],
    [-np.inf, np.inf],
])
def test_no_dynamic_range_is_neutral_gray(values):
    out = normalize_band(values)
    assert out.dtype == np.uint8
    assert out.tolist() == [128] * len(values)


def test_non_finite_become_zero_and_are_ignored_in_range():
    out = normalize_band([0.0, np.nan, 10.0, np.inf, -np.inf, 5.0])
    assert out.tolist() == [0, 0, 255, 0, 0, 128]


def test_negative_and_float_ranges():
    out = normalize_band(np.array([-1.0, 0.0, 1.0], dtype=np.float32))
    assert out.tolist() == [0, 128, 255]


def test_bands_are_independent():
    raw = np.array([[0, 10], [100, 200], [5, 5]])
    out = BandNormalizer().normalize_all(raw)
    assert out.tolist() == [[0, 255], [0, 255], [128, 128]]
    assert out.dtype == np.uint8
