import logging

import numpy as np
import pytest

from rasteringest.adapters.pillow_png_encoder import PillowPngEncoder
from rasteringest.contracts.core import BandSelection, DisplayMode
from rasteringest.services.compositor import ImageCompositor
from tests.factories import make_dataset

BANDS3 = [[10, 20, 30, 40], [50, 60, 70, 80], [90, 100, 110, 120]]


@pytest.fixture
def comp():
    return ImageCompositor(encoder=PillowPngEncoder())


def test_rgb_channels_and_opaque_alpha(comp):
    ds = make_dataset(BANDS3, 2, 2)
    sel = BandSelection(display_mode=DisplayMode.RGB, red_band=2, green_band=0, blue_band=1)
    px = comp.pixels(ds.normalized_bands, 2, 2, sel)
    assert px.shape == (2, 2, 4)
    assert px[0, 0].tolist() == [90, 10, 50, 255]
    assert px[1, 1].tolist() == [120, 40, 80, 255]


def test_grayscale_replicates_band(comp):
    ds = make_dataset(BANDS3, 2, 2)
    sel = BandSelection(display_mode=DisplayMode.GRAYSCALE, grayscale_band=1)
    px = comp.pixels(ds.normalized_bands, 2, 2, sel)
    assert px[:, :, 0].ravel().tolist() == [50, 60, 70, 80]
    assert (px[:, :, 0] == px[:, :, 1]).all() and (px[:, :, 1] == px[:, :, 2]).all()
    assert (px[:, :, 3] == 255).all()


def test_rgb_with_single_band_renders_gray(comp):
    sel = BandSelection(display_mode=DisplayMode.RGB, red_band=0, green_band=1, blue_band=2)
    eff = comp.effective_selection(sel, 1)
    assert eff.display_mode is DisplayMode.GRAYSCALE
    assert eff.grayscale_band == 0


def test_out_of_range_index_falls_back_with_warning(comp, caplog):
    sel = BandSelection(display_mode=DisplayMode.RGB, red_band=7, green_band=1, blue_band=2)
    with caplog.at_level(logging.WARNING):
        eff = comp.effective_selection(sel, 3)
    assert eff.red_band == 0
    assert "red_band=7" in caplog.text


def test_gray_index_out_of_range_clamped_to_last_band(comp):
    eff = comp.effective_selection(BandSelection(grayscale_band=9), 2)
    assert eff.grayscale_band == 0
    eff = comp.effective_selection(
        BandSelection(display_mode=DisplayMode.RGB, red_band=0, green_band=1, blue_band=9), 4
    )
    assert eff.blue_band == 2


def test_composite_returns_png_data_url_and_leaves_bands_untouched(comp):
    ds = make_dataset(BANDS3, 2, 2)
    before = ds.normalized_bands.copy()
    img = comp.composite(ds, BandSelection.default_for(3))
    assert img.image_url.startswith("data:image/png;base64,")
    assert np.array_equal(ds.normalized_bands, before)


def test_composite_without_encoder_fails():
    with pytest.raises(RuntimeError):
        ImageCompositor().composite(make_dataset([[1, 2]], 2, 1), BandSelection())


def test_single_pixel_rgb_then_gray_without_redecoding(comp):
    ds = make_dataset([[200], [50], [10]], 1, 1)
    rgb = BandSelection(display_mode=DisplayMode.RGB, red_band=0, green_band=1, blue_band=2)
    assert comp.pixels(ds.normalized_bands, 1, 1, rgb)[0, 0].tolist() == [200, 50, 10, 255]
    gray = rgb.with_changes(display_mode=DisplayMode.GRAYSCALE, grayscale_band=1)
    assert comp.pixels(ds.normalized_bands, 1, 1, gray)[0, 0].tolist() == [50, 50, 50, 255]


def test_negative_index_falls_back_with_warning(comp, caplog):
    sel = BandSelection.default_for(3).with_changes(red_band=-1)
    with caplog.at_level(logging.WARNING):
        eff = comp.effective_selection(sel, 3)
    assert eff.red_band == 0
    assert "red_band=-1" in caplog.text
    gray = comp.effective_selection(BandSelection(grayscale_band=-4), 2)
    assert gray.grayscale_band == 0


def test_recomposite_with_negative_index_renders(svc):
    ds = make_dataset(BANDS3, 2, 2)
    out = svc.recomposite(ds, BandSelection.default_for(3).with_changes(red_band=-1))
    assert out.image_url.startswith("data:image/png;base64,")


def test_unused_gray_index_is_quiet_in_rgb(comp, caplog):
    sel = BandSelection(display_mode=DisplayMode.RGB, red_band=0, green_band=1, blue_band=2,
                        grayscale_band=9)
    with caplog.at_level(logging.WARNING):
        eff = comp.effective_selection(sel, 3)
    assert eff.display_mode is DisplayMode.RGB
    assert "grayscale_band" not in caplog.text
