# src/rasteringest/adapters/rasterio_geotiff_decoder.py
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Optional

import numpy as np
import rasterio
from rasterio.errors import NotGeoreferencedWarning
from rasterio.io import MemoryFile

from ..contracts.geo import Bounds
from ..contracts.products import DecodedRaster, GeorefInputs
from ..ports.raster_decode import RasterDecoderPort

logger = logging.getLogger(__name__)


def _mask_nodata(data: np.ndarray, nodata: Optional[float]) -> np.ndarray:
    """Muestras == nodata pasan a NaN (quedan fuera del min/max y se pintan en 0)."""
    if nodata is None:
        return data
    out = data.astype(np.float64)
    if np.isnan(nodata):
        return out
    out[out == nodata] = np.nan
    return out


def _embedded_bounds(ds: "rasterio.io.DatasetReader") -> Optional[Bounds]:
    # Sin transform (identidad) => el TIFF no trae georreferencia
    if ds.transform.is_identity and ds.crs is None:
        return None
    b = ds.bounds
    return Bounds(float(b.left), float(b.bottom), float(b.right), float(b.top))


@dataclass(frozen=True)
class RasterioGeoTiffDecoder(RasterDecoderPort):
    """GeoTIFF vía rasterio (en memoria, sin tocar disco).

    Los tags los interpreta rasterio/GDAL; aquí solo se extraen dimensiones,
    bandas crudas y el bounding box embebido.
    """
    mask_nodata: bool = True

    def decode(self, payload: bytes, companion: Optional[bytes] = None) -> DecodedRaster:
        if companion is not None:
            logger.warning("GeoTIFF: se ignora el archivo companion (bounds vienen de los tags)")
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", NotGeoreferencedWarning)
            with MemoryFile(payload) as mem, mem.open() as ds:
                data = ds.read()  # (count, height, width)
                width, height = ds.width, ds.height
                bounds = _embedded_bounds(ds)
                names = tuple(d or "" for d in ds.descriptions)
                nodata = ds.nodata
        logger.debug("GeoTIFF %dx%d, %d banda(s), dtype=%s", width, height, data.shape[0], data.dtype)
        raw = data.reshape(data.shape[0], width * height)
        if self.mask_nodata:
            raw = _mask_nodata(raw, nodata)
        return DecodedRaster(
            width=width,
            height=height,
            raw_bands=raw,
            georef=GeorefInputs(embedded=bounds),
            band_names=names,
        )
