# src/rasteringest/ports/raster_decode.py
from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ..contracts.products import DecodedRaster


@runtime_checkable
class RasterDecoderPort(Protocol):
    """
    Decoder de un formato raster: bytes (+ companion opcional) -> DecodedRaster.
    Reglas: sin estado compartido entre llamadas; ante un payload malformado
    lanza una excepción normal (ValueError, etc.), el servicio la envuelve.
    """
    def decode(self, payload: bytes, companion: Optional[bytes] = None) -> DecodedRaster: ...

__all__ = ["RasterDecoderPort"]
