# src/rasteringest/adapters/image_world_decoder.py
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from PIL import Image

from ..contracts.products import DecodedRaster, GeorefInputs
from ..ports.raster_decode import RasterDecoderPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageWorldFileDecoder(RasterDecoderPort):
    """PNG/JPEG + world file opcional (.pgw/.jgw/.wld).

    Siempre 3 bandas uint8 (R, G, B) tomadas del buffer RGBA decodificado;
    el alfa se descarta. El world file se pasa sin interpretar al resolver.
    """

    def decode(self, payload: bytes, companion: Optional[bytes] = None) -> DecodedRaster:
        with Image.open(io.BytesIO(payload)) as img:
            img.load()
            rgba = np.asarray(img.convert("RGBA"), dtype=np.uint8)
        height, width = rgba.shape[:2]
        logger.debug("imagen %dx%d (modo origen convertido a RGBA)", width, height)
        bands = rgba[:, :, :3].reshape(width * height, 3).T.copy()
        world = companion.decode("utf-8", errors="replace") if companion is not None else None
        return DecodedRaster(
            width=width,
            height=height,
            raw_bands=bands,
            georef=GeorefInputs(world_file_text=world),
            band_names=("Red", "Green", "Blue"),
        )
