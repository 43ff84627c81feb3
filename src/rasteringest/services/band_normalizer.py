# src/rasteringest/services/band_normalizer.py
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

NEUTRAL_GRAY = 128


def normalize_band(values) -> np.ndarray:
    """
    Reescala una banda cruda a uint8 [0,255] usando min/max de los valores finitos.
    Sin rango dinámico (todo igual, o nada finito) -> todo 128.
    No finitos -> 0. Redondeo half-up.
    """
    arr = np.asarray(values, dtype=np.float64).ravel()
    finite = np.isfinite(arr)
    if not finite.any():
        return np.full(arr.shape, NEUTRAL_GRAY, dtype=np.uint8)
    vals = arr[finite]
    lo = float(vals.min()); hi = float(vals.max())
    if lo == hi:
        return np.full(arr.shape, NEUTRAL_GRAY, dtype=np.uint8)
    out = np.zeros(arr.shape, dtype=np.uint8)
    scaled = np.floor((vals - lo) / (hi - lo) * 255.0 + 0.5)
    out[finite] = np.clip(scaled, 0, 255).astype(np.uint8)
    return out


@dataclass(frozen=True)
class BandNormalizer:
    """Normalización por banda, independiente entre bandas. Se calcula una vez al importar."""

    def normalize(self, values) -> np.ndarray:
        return normalize_band(values)

    def normalize_all(self, raw_bands: np.ndarray) -> np.ndarray:
        raw = np.asarray(raw_bands)
        if raw.ndim == 1:
            raw = raw.reshape(1, -1)
        out = np.empty(raw.shape, dtype=np.uint8)
        for i in range(raw.shape[0]):
            out[i] = normalize_band(raw[i])
        return out
