# src/rasteringest/services/compositor.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..contracts.core import BandSelection, DisplayMode
from ..contracts.products import CompositeImage, RasterDataset
from ..ports.image_encode import ImageEncoderPort

logger = logging.getLogger(__name__)

_CHANNEL_DEFAULTS = {"red_band": 0, "green_band": 1, "blue_band": 2, "grayscale_band": 0}


def _pick(sel: BandSelection, field_name: str, num_bands: int) -> int:
    idx = getattr(sel, field_name)
    if 0 <= idx < num_bands:
        return idx
    fallback = min(_CHANNEL_DEFAULTS[field_name], num_bands - 1)
    logger.warning("%s=%d fuera de rango (0..%d); se usa %d", field_name, idx, num_bands - 1, fallback)
    return fallback


@dataclass(frozen=True)
class ImageCompositor:
    """
    Asigna bandas normalizadas a canales RGBA y codifica la imagen.
    No toca las bandas; brillo/contraste/saturación NO se aplican aquí.
    """
    encoder: Optional[ImageEncoderPort] = None

    @staticmethod
    def effective_selection(sel: BandSelection, num_bands: int) -> BandSelection:
        """Selección realmente usada: índices fuera de rango por defecto, rgb<3 bandas -> grayscale."""
        if num_bands < 1:
            raise ValueError("dataset sin bandas")
        if sel.display_mode is DisplayMode.RGB and num_bands >= 3:
            return BandSelection(
                display_mode=DisplayMode.RGB,
                red_band=_pick(sel, "red_band", num_bands),
                green_band=_pick(sel, "green_band", num_bands),
                blue_band=_pick(sel, "blue_band", num_bands),
                grayscale_band=sel.grayscale_band,  # no se usa en rgb
            )
        if sel.display_mode is DisplayMode.RGB:
            logger.debug("modo rgb con %d banda(s): se muestra en escala de grises", num_bands)
        gray = _pick(sel, "grayscale_band", num_bands)
        return BandSelection(
            display_mode=DisplayMode.GRAYSCALE,
            red_band=gray, green_band=gray, blue_band=gray, grayscale_band=gray,
        )

    def pixels(self, bands: np.ndarray, width: int, height: int, sel: BandSelection) -> np.ndarray:
        eff = self.effective_selection(sel, bands.shape[0])
        rgba = np.empty((width * height, 4), dtype=np.uint8)
        if eff.display_mode is DisplayMode.RGB:
            rgba[:, 0] = bands[eff.red_band]
            rgba[:, 1] = bands[eff.green_band]
            rgba[:, 2] = bands[eff.blue_band]
        else:
            v = bands[eff.grayscale_band]
            rgba[:, 0] = v; rgba[:, 1] = v; rgba[:, 2] = v
        rgba[:, 3] = 255
        return rgba.reshape(height, width, 4)

    def composite(self, dataset: RasterDataset, sel: BandSelection) -> CompositeImage:
        if self.encoder is None:
            raise RuntimeError("No hay ImageEncoderPort configurado")
        px = self.pixels(dataset.normalized_bands, dataset.width, dataset.height, sel)
        return CompositeImage(pixels=px, image_url=self.encoder.to_data_url(px))
