# src/rasteringest/services/format_detection.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from ..adapters.erdas_decoder import looks_like_erdas
from ..contracts.core import RasterFormat
from ..contracts.errors import MissingCompanionFileError, UnsupportedFormatError

# Extensión -> formato. Conjunto cerrado: lo que no está aquí no se decodifica.
EXTENSION_FORMATS: Mapping[str, RasterFormat] = MappingProxyType({
    "tif": RasterFormat.GEOTIFF,
    "tiff": RasterFormat.GEOTIFF,
    "png": RasterFormat.IMAGE_WORLD,
    "jpg": RasterFormat.IMAGE_WORLD,
    "jpeg": RasterFormat.IMAGE_WORLD,
    "img": RasterFormat.ENVI,
    "dat": RasterFormat.ENVI,
})
HEADER_EXTENSION = "hdr"
ENVI_DATA_EXTENSIONS: Tuple[str, ...] = ("img", "dat")
# Aceptadas en la entrada (hdr solo como companion)
ACCEPTED_EXTENSIONS: Tuple[str, ...] = tuple(EXTENSION_FORMATS) + (HEADER_EXTENSION,)


def extension_of(filename: str) -> str:
    return PurePath(filename).suffix.lower().lstrip(".")


@dataclass(frozen=True)
class FormatDetector:
    """Elige el decoder a partir de la extensión (y del companion, si lo hay)."""

    def detect(self, filename: str, companion_name: Optional[str] = None, head: bytes = b"") -> RasterFormat:
        ext = extension_of(filename)
        if ext == HEADER_EXTENSION:
            raise MissingCompanionFileError(filename)
        fmt = EXTENSION_FORMATS.get(ext)
        if fmt is None:
            raise UnsupportedFormatError(ext, filename=filename)
        if fmt is RasterFormat.ENVI and ext == "img":
            has_hdr = companion_name is not None and extension_of(companion_name) == HEADER_EXTENSION
            if not has_hdr and looks_like_erdas(head):
                return RasterFormat.ERDAS
        return fmt

    @staticmethod
    def is_header_pair(filename: str, companion_name: Optional[str]) -> bool:
        """True si el primario es .hdr y el companion es su .img/.dat."""
        return (
            extension_of(filename) == HEADER_EXTENSION
            and companion_name is not None
            and extension_of(companion_name) in ENVI_DATA_EXTENSIONS
        )
