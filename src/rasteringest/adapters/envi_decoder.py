# src/rasteringest/adapters/envi_decoder.py
from __future__ import annotations

"""
Decoder ENVI (.img/.dat + .hdr opcional), sin dependencias de GDAL.

Header: texto plano `clave = valor`, valores entre llaves pueden ocupar
varias líneas. Claves usadas:
  samples, lines, bands, data type (1|2|4), interleave (bsq|bil|bip),
  byte order (0|1), header offset, map info, band names.

Payload: se recorre con un cursor que lee bloques de tamaño fijo según el
interleave declarado:
  • bsq: por banda, width*height muestras
  • bil: por fila, por banda, width muestras
  • bip: por píxel, una muestra por banda (se leen filas completas)
Los tres recorridos reconstruyen las mismas bandas para layouts equivalentes.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from ..config import EnviDefaults
from ..contracts.core import EnviDataType, Interleave
from ..contracts.products import DecodedRaster, GeorefInputs
from ..ports.raster_decode import RasterDecoderPort

logger = logging.getLogger(__name__)


# ----------------------
# Header
# ----------------------

def parse_header_entries(text: str) -> Dict[str, str]:
    """Pares clave/valor del header; claves en minúscula, valores sin tocar."""
    entries: Dict[str, str] = {}
    lines = iter(text.splitlines())
    for line in lines:
        s = line.strip()
        if not s or "=" not in s:
            continue  # "ENVI", líneas en blanco
        key, _, value = s.partition("=")
        value = value.strip()
        if value.startswith("{") and "}" not in value:
            parts = [value]
            for cont in lines:
                parts.append(cont.strip())
                if "}" in cont:
                    break
            value = " ".join(parts)
        entries[" ".join(key.lower().split())] = value
    return entries


def _brace_list(value: str) -> Tuple[str, ...]:
    inner = value.strip()
    if inner.startswith("{"):
        inner = inner[1:]
    if "}" in inner:
        inner = inner[: inner.index("}")]
    return tuple(p.strip() for p in inner.split(","))


def _int_field(entries: Dict[str, str], key: str, default: int) -> int:
    if key not in entries:
        return default
    try:
        return int(entries[key].strip())
    except ValueError as e:
        raise ValueError(f"header ENVI: '{key}' no es entero: {entries[key]!r}") from e


@dataclass(frozen=True)
class EnviHeader:
    width: int
    height: int
    bands: int
    data_type: EnviDataType
    interleave: Interleave
    byte_order: int
    header_offset: int = 0
    map_info: Optional[Tuple[str, ...]] = None
    band_names: Tuple[str, ...] = ()

    @property
    def dtype(self) -> np.dtype:
        prefix = "<" if self.byte_order == 0 else ">"
        return np.dtype(prefix + self.data_type.numpy_code)

    @property
    def expected_bytes(self) -> int:
        return self.header_offset + self.width * self.height * self.bands * self.data_type.itemsize

    @classmethod
    def defaults(cls, d: EnviDefaults) -> "EnviHeader":
        return cls(d.width, d.height, d.bands, d.data_type, d.interleave, d.byte_order, d.header_offset)

    @classmethod
    def parse(cls, text: str, d: EnviDefaults) -> "EnviHeader":
        e = parse_header_entries(text)
        width = _int_field(e, "samples", d.width)
        height = _int_field(e, "lines", d.height)
        bands = _int_field(e, "bands", d.bands)
        if width <= 0 or height <= 0 or bands <= 0:
            raise ValueError(f"header ENVI: dimensiones inválidas samples={width} lines={height} bands={bands}")

        code = _int_field(e, "data type", int(d.data_type))
        try:
            data_type = EnviDataType(code)
        except ValueError:
            logger.warning("header ENVI: data type %d no soportado, se lee como byte", code)
            data_type = EnviDataType.BYTE

        raw_il = e.get("interleave", d.interleave.value).strip().lower()
        try:
            interleave = Interleave(raw_il)
        except ValueError as ex:
            raise ValueError(f"header ENVI: interleave desconocido: {raw_il!r}") from ex

        byte_order = _int_field(e, "byte order", d.byte_order)
        if byte_order not in (0, 1):
            raise ValueError(f"header ENVI: byte order debe ser 0 o 1, es {byte_order}")
        offset = _int_field(e, "header offset", d.header_offset)
        if offset < 0:
            raise ValueError(f"header ENVI: header offset negativo: {offset}")

        map_info = _brace_list(e["map info"]) if "map info" in e else None
        names = _brace_list(e["band names"]) if "band names" in e else ()
        return cls(width, height, bands, data_type, interleave, byte_order, offset, map_info, names)


# ----------------------
# Payload
# ----------------------

class _SampleCursor:
    """Cursor de lectura sobre el buffer; cada take() consume `count` muestras."""

    def __init__(self, buf: bytes, dtype: np.dtype, offset: int = 0):
        self._buf = buf
        self._dtype = dtype
        self._pos = offset

    def take(self, count: int) -> np.ndarray:
        end = self._pos + count * self._dtype.itemsize
        if end > len(self._buf):
            raise ValueError(
                f"payload truncado: se necesitan {end} bytes, hay {len(self._buf)}"
            )
        out = np.frombuffer(self._buf, dtype=self._dtype, count=count, offset=self._pos)
        self._pos = end
        return out


def read_bands(payload: bytes, h: EnviHeader) -> np.ndarray:
    """Bandas crudas (bands, width*height) en orden nativo, según el interleave."""
    w, rows, nb = h.width, h.height, h.bands
    cur = _SampleCursor(payload, h.dtype, h.header_offset)
    out = np.empty((nb, w * rows), dtype=h.dtype.newbyteorder("="))

    if h.interleave is Interleave.BSQ:
        for b in range(nb):
            out[b] = cur.take(w * rows)
    elif h.interleave is Interleave.BIL:
        for r in range(rows):
            line = cur.take(nb * w).reshape(nb, w)
            out[:, r * w:(r + 1) * w] = line
    elif h.interleave is Interleave.BIP:
        for r in range(rows):
            pixels = cur.take(w * nb).reshape(w, nb)
            out[:, r * w:(r + 1) * w] = pixels.T
    else:  # pragma: no cover - Interleave es cerrado
        raise ValueError(f"interleave no soportado: {h.interleave}")
    return out


def decode_envi(payload: bytes, header_text: Optional[str], defaults: EnviDefaults) -> DecodedRaster:
    """Función pura: bytes x header -> DecodedRaster."""
    h = EnviHeader.parse(header_text, defaults) if header_text is not None else EnviHeader.defaults(defaults)
    logger.debug(
        "ENVI %dx%d, %d banda(s), %s, %s, byte order=%d",
        h.width, h.height, h.bands, h.data_type.name, h.interleave.value, h.byte_order,
    )
    bands = read_bands(payload, h)
    return DecodedRaster(
        width=h.width,
        height=h.height,
        raw_bands=bands,
        georef=GeorefInputs(map_info=h.map_info),
        band_names=h.band_names,
    )


@dataclass(frozen=True)
class EnviDecoder(RasterDecoderPort):
    defaults: EnviDefaults = EnviDefaults()

    def decode(self, payload: bytes, companion: Optional[bytes] = None) -> DecodedRaster:
        text = companion.decode("utf-8", errors="replace") if companion is not None else None
        return decode_envi(payload, text, self.defaults)
