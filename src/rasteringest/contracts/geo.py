# src/rasteringest/contracts/geo.py

from __future__ import annotations
import math
from typing import List, NamedTuple, Tuple

GeoTransform = Tuple[float, float, float, float, float, float]
LonLat = Tuple[float, float]


class Bounds(NamedTuple):
    """Rectángulo geográfico en la misma referencia que el mapa consumidor."""
    west: float; south: float; east: float; north: float

    def as_pairs(self) -> Tuple[LonLat, LonLat]:
        """((west, south), (east, north)), el formato que consume el mapa."""
        return ((self.west, self.south), (self.east, self.north))

    def corners(self) -> List[LonLat]:
        """Esquinas en el orden de una fuente de imagen: TL, TR, BR, BL."""
        return [
            (self.west, self.north),
            (self.east, self.north),
            (self.east, self.south),
            (self.west, self.south),
        ]

    @property
    def is_unplaced(self) -> bool:
        return tuple(self) == tuple(UNPLACED_BOUNDS)

    def is_ordered(self) -> bool:
        return self.west < self.east and self.south < self.north

    @classmethod
    def from_pairs(cls, pairs) -> "Bounds":
        (w, s), (e, n) = pairs
        return cls(float(w), float(s), float(e), float(n))


# Placeholder documentado: "sin ubicar". No es un error.
UNPLACED_BOUNDS = Bounds(0.0, 0.0, 1.0, 1.0)


class WorldFile(NamedTuple):
    """Los seis parámetros de un world file, en el orden del archivo."""
    x_scale: float; rot_y: float; rot_x: float
    y_scale: float; x_origin: float; y_origin: float

    def to_geotransform(self) -> GeoTransform:
        # orden GDAL: (x0, px, rx, y0, ry, py)
        return (self.x_origin, self.x_scale, self.rot_x, self.y_origin, self.rot_y, self.y_scale)


def lonlat_valid(b: Bounds) -> bool:
    """Todas las coordenadas finitas y dentro de [-180,180] x [-90,90]."""
    if not all(math.isfinite(v) for v in b):
        return False
    return (
        -180.0 <= b.west <= 180.0 and -180.0 <= b.east <= 180.0
        and -90.0 <= b.south <= 90.0 and -90.0 <= b.north <= 90.0
    )


def pixel_to_world(col: float, row: float, gt: GeoTransform) -> Tuple[float, float]:
    x0, px, rx, y0, ry, py = gt
    x = x0 + col * px + row * rx
    y = y0 + col * ry + row * py
    return x, y


def pretty_bounds(b: Bounds, ndigits: int = 3) -> str:
    return (f"Bounds(west={b.west:.{ndigits}f}, south={b.south:.{ndigits}f}, "
            f"east={b.east:.{ndigits}f}, north={b.north:.{ndigits}f})")

__all__ = [
    "GeoTransform", "LonLat", "Bounds", "UNPLACED_BOUNDS", "WorldFile",
    "lonlat_valid", "pixel_to_world", "pretty_bounds",
]
