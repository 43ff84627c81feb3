# src/rasteringest/adapters/pillow_png_encoder.py
from __future__ import annotations

import base64
import io
from dataclasses import dataclass

import numpy as np
from PIL import Image

from ..ports.image_encode import ImageEncoderPort


@dataclass(frozen=True)
class PillowPngEncoder(ImageEncoderPort):
    mime_type: str = "image/png"
    compress_level: int = 6

    def encode(self, rgba: np.ndarray) -> bytes:
        if rgba.ndim != 3 or rgba.shape[2] != 4 or rgba.dtype != np.uint8:
            raise ValueError(f"se esperaba RGBA uint8 (h, w, 4); es {rgba.shape} {rgba.dtype}")
        buf = io.BytesIO()
        Image.fromarray(np.ascontiguousarray(rgba)).save(
            buf, format="PNG", compress_level=self.compress_level
        )
        return buf.getvalue()

    def to_data_url(self, rgba: np.ndarray) -> str:
        b64 = base64.b64encode(self.encode(rgba)).decode("ascii")
        return f"data:{self.mime_type};base64,{b64}"
