# src/rasteringest/services/georeference_service.py
from __future__ import annotations

"""
Resolución de georreferencia: entradas crudas del decoder -> Bounds.

  • world file: 6 líneas numéricas [xScale, rotY, rotX, yScale, xOrigin, yOrigin]
    (rotación ignorada). east = xOrigin + width*xScale,
    south = yOrigin + height*yScale (yScale suele ser negativo).
  • ENVI map info: upperLeftX = [3], upperLeftY = [4], pixelSize = [5].
  • GeoTIFF: bounds embebidos, sin más cálculo.
  • sin entradas: UNPLACED_BOUNDS ((0,0),(1,1)).

La validación final (lon/lat) nunca falla: sustituye por el rectángulo de
respaldo y deja constancia en el log y en el resultado.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ..contracts.errors import InvalidWorldFileError
from ..contracts.geo import UNPLACED_BOUNDS, Bounds, WorldFile, lonlat_valid, pretty_bounds
from ..contracts.products import GeorefInputs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundsCheck:
    bounds: Bounds
    substituted: bool = False
    reason: Optional[str] = None


def parse_world_file(text: str) -> WorldFile:
    values = []
    for line in text.splitlines():
        s = line.strip()
        if not s:
            continue
        try:
            values.append(float(s))
        except ValueError:
            continue
    if len(values) < 6:
        raise InvalidWorldFileError(
            f"Invalid world file format: se esperaban 6 líneas numéricas, hay {len(values)}"
        )
    return WorldFile(*values[:6])


def bounds_from_world_file(wf: WorldFile, width: int, height: int) -> Bounds:
    east = wf.x_origin + width * wf.x_scale
    south = wf.y_origin + height * wf.y_scale
    return Bounds(wf.x_origin, south, east, wf.y_origin)


def bounds_from_map_info(map_info: Optional[Sequence[str]], width: int, height: int) -> Bounds:
    if not map_info:
        return UNPLACED_BOUNDS
    if len(map_info) < 6:
        logger.warning("map info con %d entradas (se esperan >= 6); raster sin ubicar", len(map_info))
        return UNPLACED_BOUNDS
    try:
        ul_x = float(map_info[3])
        ul_y = float(map_info[4])
        pixel = float(map_info[5])
    except ValueError as e:
        raise ValueError(f"map info no numérico: {list(map_info)}") from e
    return Bounds(ul_x, ul_y - height * pixel, ul_x + width * pixel, ul_y)


@dataclass(frozen=True)
class GeoreferenceResolver:
    fallback: Bounds

    def resolve(self, georef: GeorefInputs, width: int, height: int) -> Bounds:
        if georef.embedded is not None:
            return georef.embedded
        if georef.world_file_text is not None:
            return bounds_from_world_file(parse_world_file(georef.world_file_text), width, height)
        if georef.map_info is not None:
            return bounds_from_map_info(georef.map_info, width, height)
        return UNPLACED_BOUNDS

    def validate(self, bounds: Bounds, *, name: str = "") -> BoundsCheck:
        if not lonlat_valid(bounds):
            reason = "fuera del rango lon/lat válido"
        elif not bounds.is_ordered():
            reason = "rectángulo degenerado o invertido"
        else:
            return BoundsCheck(bounds)
        msg = (f"{name or 'raster'}: bounds {pretty_bounds(bounds)} {reason}; "
               f"se usa la región por defecto {pretty_bounds(self.fallback)}")
        logger.warning(msg)
        return BoundsCheck(self.fallback, substituted=True, reason=msg)
