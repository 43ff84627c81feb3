# src/rasteringest/adapters/erdas_decoder.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..contracts.products import DecodedRaster, GeorefInputs
from ..ports.raster_decode import RasterDecoderPort

logger = logging.getLogger(__name__)

# Firma de un archivo ERDAS Imagine (HFA)
HFA_MAGIC = b"EHFA_HEADER_TAG"


def looks_like_erdas(head: bytes) -> bool:
    return head[: len(HFA_MAGIC)] == HFA_MAGIC


@dataclass(frozen=True)
class ErdasDecoder(RasterDecoderPort):
    """Lectura best-effort de ERDAS Imagine (.img).

    Limitación conocida: NO interpreta el header HFA. Salta `header_bytes`
    opacos y lee una sola banda uint8 de tamaño fijo width x height.
    Bounds siempre "sin ubicar".
    """
    header_bytes: int = 512
    width: int = 512
    height: int = 512

    def decode(self, payload: bytes, companion: Optional[bytes] = None) -> DecodedRaster:
        n = self.width * self.height
        need = self.header_bytes + n
        if len(payload) < need:
            raise ValueError(f"payload truncado: se necesitan {need} bytes, hay {len(payload)}")
        logger.warning("ERDAS: lectura simplificada %dx%d uint8 (header HFA ignorado)", self.width, self.height)
        band = np.frombuffer(payload, dtype=np.uint8, count=n, offset=self.header_bytes)
        return DecodedRaster(
            width=self.width,
            height=self.height,
            raw_bands=band.reshape(1, n),
            georef=GeorefInputs(),
        )
