# src/rasteringest/contracts/core.py
from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

# -------------------------
# Formatos soportados (conjunto cerrado)
# -------------------------
class RasterFormat(str, Enum):
    GEOTIFF = "geotiff"
    IMAGE_WORLD = "image_world"
    ENVI = "envi"
    ERDAS = "erdas"

# -------------------------
# ENVI: layout binario
# -------------------------
class Interleave(str, Enum):
    BSQ = "bsq"  # band-sequential
    BIL = "bil"  # band-interleaved-by-line
    BIP = "bip"  # band-interleaved-by-pixel

class EnviDataType(int, Enum):
    BYTE = 1
    INT16 = 2
    FLOAT32 = 4

    @property
    def numpy_code(self) -> str:
        return {1: "u1", 2: "i2", 4: "f4"}[self.value]

    @property
    def itemsize(self) -> int:
        return {1: 1, 2: 2, 4: 4}[self.value]

# -------------------------
# Selección de bandas
# -------------------------
class DisplayMode(str, Enum):
    RGB = "rgb"
    GRAYSCALE = "grayscale"

class BandSelection(BaseModel):
    """Asignación de bandas a canales. Valor inmutable: el consumidor crea uno nuevo.

    Los índices no se acotan aquí; el compositor resuelve los que caen fuera
    de rango (incluidos negativos) con el valor por defecto del canal.
    """
    model_config = ConfigDict(frozen=True)
    display_mode: DisplayMode = DisplayMode.GRAYSCALE
    red_band: int = 0
    green_band: int = 1
    blue_band: int = 2
    grayscale_band: int = 0

    @classmethod
    def default_for(cls, num_bands: int) -> "BandSelection":
        if num_bands >= 3:
            return cls(display_mode=DisplayMode.RGB, red_band=0, green_band=1, blue_band=2, grayscale_band=0)
        return cls(display_mode=DisplayMode.GRAYSCALE, red_band=0, green_band=0, blue_band=0, grayscale_band=0)

    def with_changes(self, **update) -> "BandSelection":
        # model_copy no valida; se reconstruye para mantener las restricciones
        return BandSelection(**{**self.model_dump(), **update})

# -------------------------
# Parámetros de visualización (se aplican al pintar, no en los píxeles)
# -------------------------
class DisplayParams(BaseModel):
    model_config = ConfigDict(frozen=True)
    brightness: float = Field(0.0, ge=-1.0, le=1.0)
    contrast: float = Field(0.0, ge=-1.0, le=1.0)
    saturation: float = Field(0.0, ge=-1.0, le=1.0)
    opacity: float = Field(1.0, ge=0.0, le=1.0)

    def to_paint(self) -> Dict[str, float]:
        b = self.brightness
        return {
            "raster-opacity": self.opacity,
            "raster-fade-duration": 0,
            "raster-brightness-min": max(0.0, b),
            "raster-brightness-max": min(1.0, 1.0 + b),
            "raster-contrast": self.contrast * 0.5 + 0.5,  # [-1,1] -> [0,1]
            "raster-saturation": self.saturation,
        }


def default_band_names(num_bands: int, names: Optional[tuple] = None) -> tuple[str, ...]:
    if names and len(names) == num_bands and all(str(n).strip() for n in names):
        return tuple(str(n).strip() for n in names)
    return tuple(f"Band {i + 1}" for i in range(num_bands))

__all__ = [
    "RasterFormat", "Interleave", "EnviDataType", "DisplayMode",
    "BandSelection", "DisplayParams", "default_band_names",
]
