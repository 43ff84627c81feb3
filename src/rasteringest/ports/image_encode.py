# src/rasteringest/ports/image_encode.py
from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class ImageEncoderPort(Protocol):
    """
    Codificador de imágenes RGBA (height, width, 4) uint8.
    """
    mime_type: str

    def encode(self, rgba: np.ndarray) -> bytes: ...
    def to_data_url(self, rgba: np.ndarray) -> str: ...

__all__ = ["ImageEncoderPort"]
