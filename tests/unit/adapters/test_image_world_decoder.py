import numpy as np

from rasteringest.adapters.image_world_decoder import ImageWorldFileDecoder
from tests.factories import png_bytes, world_file


def test_png_three_channel_bands():
    rgb = np.array([[[10, 20, 30], [40, 50, 60]]], dtype=np.uint8)  # 1 fila x 2 cols
    out = ImageWorldFileDecoder().decode(png_bytes(rgb))
    assert (out.width, out.height, out.num_bands) == (2, 1, 3)
    assert out.raw_bands.tolist() == [[10, 40], [20, 50], [30, 60]]
    assert out.band_names == ("Red", "Green", "Blue")
    assert out.georef.kind == "none"


def test_grayscale_png_expands_to_rgb():
    gray = np.array([[0, 255]], dtype=np.uint8)
    out = ImageWorldFileDecoder().decode(png_bytes(gray))
    assert out.num_bands == 3
    assert out.raw_bands[:, 1].tolist() == [255, 255, 255]


def test_world_file_is_passed_through_untouched():
    rgb = np.zeros((2, 2, 3), dtype=np.uint8)
    wf = world_file(0.01, 0, 0, -0.01, 100, 50)
    out = ImageWorldFileDecoder().decode(png_bytes(rgb), wf.encode())
    assert out.georef.kind == "world_file"
    assert out.georef.world_file_text == wf


def test_jpeg_decodes():
    rgb = np.full((4, 3, 3), 200, dtype=np.uint8)
    out = ImageWorldFileDecoder().decode(png_bytes(rgb, fmt="JPEG"))
    assert (out.width, out.height, out.num_bands) == (3, 4, 3)
