from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .core import BandSelection, DisplayParams, RasterFormat, default_band_names
from .geo import Bounds


def _freeze(arr: np.ndarray) -> np.ndarray:
    # Bloquea mutaciones accidentales sobre los datos
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class GeorefInputs:
    """
    Entradas de georreferencia tal como salen del decoder (sin resolver).
    A lo sumo una fuente está presente; ninguna => bounds "sin ubicar".
    """
    embedded: Optional[Bounds] = None            # GeoTIFF: derivado de tags
    world_file_text: Optional[str] = None        # PNG/JPEG + world file
    map_info: Optional[Tuple[str, ...]] = None   # ENVI 'map info'

    @property
    def kind(self) -> str:
        if self.embedded is not None:
            return "embedded"
        if self.world_file_text is not None:
            return "world_file"
        if self.map_info is not None:
            return "map_info"
        return "none"


@dataclass(frozen=True)
class DecodedRaster:
    """
    Fragmento producido por un decoder.
    raw_bands: (num_bands, width*height), fila 0 arriba, orden row-major.
    """
    width: int
    height: int
    raw_bands: np.ndarray
    georef: GeorefInputs = GeorefInputs()
    band_names: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"dimensiones inválidas: {self.width}x{self.height}")
        arr = np.asarray(self.raw_bands)
        if arr.ndim == 1:
            arr = arr.reshape(1, -1)
        if arr.ndim != 2 or arr.shape[0] < 1 or arr.shape[1] != self.width * self.height:
            raise ValueError(
                f"raw_bands con forma {arr.shape} no coincide con {self.width}x{self.height}"
            )
        object.__setattr__(self, "raw_bands", _freeze(arr))
        object.__setattr__(self, "band_names", default_band_names(arr.shape[0], self.band_names))

    @property
    def num_bands(self) -> int:
        return int(self.raw_bands.shape[0])


@dataclass(frozen=True)
class CompositeImage:
    pixels: np.ndarray   # (height, width, 4) uint8 RGBA
    image_url: str


@dataclass(frozen=True)
class RasterDataset:
    """
    Dataset listo para el mapa. Inmutable salvo `image_url` (derivado),
    que se reemplaza creando un dataset nuevo con `with_image_url`.
    """
    width: int
    height: int
    normalized_bands: np.ndarray   # (num_bands, width*height) uint8
    bounds: Bounds
    source_format: RasterFormat
    image_url: str = ""
    band_names: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        arr = np.asarray(self.normalized_bands)
        if arr.dtype != np.uint8:
            raise ValueError(f"normalized_bands debe ser uint8, es {arr.dtype}")
        if arr.ndim != 2 or arr.shape[1] != self.width * self.height:
            raise ValueError(f"normalized_bands con forma {arr.shape} no coincide con {self.width}x{self.height}")
        object.__setattr__(self, "normalized_bands", _freeze(arr))
        object.__setattr__(self, "band_names", default_band_names(arr.shape[0], self.band_names))

    @property
    def num_bands(self) -> int:
        return int(self.normalized_bands.shape[0])

    @property
    def is_placed(self) -> bool:
        return not self.bounds.is_unplaced

    def band(self, index: int) -> np.ndarray:
        """Banda `index` como imagen (height, width)."""
        return self.normalized_bands[index].reshape(self.height, self.width)

    def with_image_url(self, image_url: str) -> "RasterDataset":
        # mismas bandas (sin copia); solo cambia el derivado
        return replace(self, image_url=image_url)

    def summary(self) -> Dict[str, Any]:
        return {
            "format": self.source_format.value,
            "width": self.width,
            "height": self.height,
            "num_bands": self.num_bands,
            "band_names": list(self.band_names),
            "bounds": [list(p) for p in self.bounds.as_pairs()],
            "placed": self.is_placed,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class RasterLayer:
    """Lo que recibe la capa de render: dataset + selección + parámetros de pintura."""
    name: str
    dataset: RasterDataset
    selection: BandSelection
    display: DisplayParams = DisplayParams()

    def image_source(self) -> Dict[str, Any]:
        return {
            "type": "image",
            "url": self.dataset.image_url,
            "coordinates": [list(c) for c in self.dataset.bounds.corners()],
        }

    def paint(self) -> Dict[str, float]:
        return self.display.to_paint()

    def with_display(self, **update) -> "RasterLayer":
        params = DisplayParams(**{**self.display.model_dump(), **update})
        return replace(self, display=params)

__all__ = [
    "GeorefInputs", "DecodedRaster", "CompositeImage", "RasterDataset", "RasterLayer",
]
