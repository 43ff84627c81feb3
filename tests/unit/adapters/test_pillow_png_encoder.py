import base64
import io

import numpy as np
import pytest
from PIL import Image

from rasteringest.adapters.pillow_png_encoder import PillowPngEncoder


def test_data_url_decodes_back_to_pixels():
    rgba = np.array([[[200, 50, 10, 255], [1, 2, 3, 255]]], dtype=np.uint8)
    url = PillowPngEncoder().to_data_url(rgba)
    assert url.startswith("data:image/png;base64,")
    img = Image.open(io.BytesIO(base64.b64decode(url.split(",", 1)[1])))
    assert img.mode == "RGBA"
    assert np.array_equal(np.asarray(img), rgba)


def test_rejects_non_rgba():
    with pytest.raises(ValueError):
        PillowPngEncoder().encode(np.zeros((2, 2, 3), dtype=np.uint8))
