# src/rasteringest/services/ingest_service.py
from __future__ import annotations

"""
Servicio de ingesta raster (contracts-first, sin dependencias duras fuera de *ports*).

Flujo de una importación (todo o nada):
  tamaño -> formato -> decoder -> georreferencia -> validación de bounds
  -> normalización por banda -> composición inicial

Casos cubiertos:
  • validate_upload: límite de tamaño y extensión, antes de leer nada
  • ingest / ingest_path: una importación completa -> RasterDataset
  • ingest_many: varias importaciones independientes en paralelo (hilos)
  • recomposite / reselect: nueva imagen para otra selección, sin re-decodificar
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

from ..config import Settings, get_settings
from ..contracts.core import BandSelection, DisplayParams, RasterFormat
from ..contracts.errors import (
    DecodeFailure,
    FileTooLargeError,
    MissingCompanionFileError,
    RasterIngestError,
    UnsupportedFormatError,
)
from ..contracts.products import RasterDataset, RasterLayer
from ..ports.raster_decode import RasterDecoderPort
from .band_normalizer import BandNormalizer
from .compositor import ImageCompositor
from .format_detection import ACCEPTED_EXTENSIONS, FormatDetector, extension_of
from .georeference_service import GeoreferenceResolver

logger = logging.getLogger(__name__)

# bytes que se miran para reconocer firmas (ERDAS)
_SNIFF_BYTES = 64


# ----------------------
# DTOs de entrada/salida
# ----------------------

@dataclass(frozen=True)
class IngestRequest:
    filename: str
    payload: bytes
    companion: Optional[bytes] = None
    companion_name: Optional[str] = None
    fmt: Optional[RasterFormat] = None


@dataclass(frozen=True)
class IngestOutcome:
    filename: str
    dataset: Optional[RasterDataset] = None
    error: Optional[RasterIngestError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ----------------------
# Servicio
# ----------------------

@dataclass
class RasterIngestService:
    decoders: Mapping[RasterFormat, RasterDecoderPort]
    compositor: ImageCompositor
    detector: FormatDetector = field(default_factory=FormatDetector)
    normalizer: BandNormalizer = field(default_factory=BandNormalizer)
    resolver: Optional[GeoreferenceResolver] = None
    settings: Settings = field(default_factory=get_settings)

    def __post_init__(self):
        if self.resolver is None:
            self.resolver = GeoreferenceResolver(fallback=self.settings.fallback())

    # ---------- Validación previa ----------
    def check_size(self, size: int, filename: str) -> None:
        limit = self.settings.max_upload_bytes
        if size > limit:
            raise FileTooLargeError(size, limit, filename=filename)

    def validate_upload(self, filename: str, size: int) -> str:
        """Límite de tamaño primero (independiente del formato), luego extensión."""
        self.check_size(size, filename)
        ext = extension_of(filename)
        if ext not in ACCEPTED_EXTENSIONS:
            raise UnsupportedFormatError(ext, filename=filename)
        return ext

    # ---------- Casos de uso ----------
    def ingest(
        self,
        payload: bytes,
        filename: str,
        companion: Optional[bytes] = None,
        companion_name: Optional[str] = None,
        fmt: Optional[RasterFormat] = None,
    ) -> RasterDataset:
        self.check_size(len(payload), filename)
        if companion is not None:
            self.check_size(len(companion), companion_name or filename)

        # .hdr + .img/.dat: el dato es el companion
        if self.detector.is_header_pair(filename, companion_name):
            if companion is None:
                # nombre del .img/.dat sin sus bytes
                raise MissingCompanionFileError(filename)
            payload, companion = companion, payload
            filename, companion_name = companion_name, filename

        if fmt is None:
            fmt = self.detector.detect(filename, companion_name, bytes(payload[:_SNIFF_BYTES]))
        decoder = self.decoders.get(fmt)
        if decoder is None:
            raise UnsupportedFormatError(extension_of(filename), filename=filename)

        try:
            decoded = decoder.decode(payload, companion)
            raw_bounds = self.resolver.resolve(decoded.georef, decoded.width, decoded.height)
        except RasterIngestError as e:
            if e.filename is None:
                e.filename = filename
            raise
        except Exception as e:
            raise DecodeFailure(filename, e) from e

        check = self.resolver.validate(raw_bounds, name=filename)
        warnings: Tuple[str, ...] = (check.reason,) if check.substituted else ()

        dataset = RasterDataset(
            width=decoded.width,
            height=decoded.height,
            normalized_bands=self.normalizer.normalize_all(decoded.raw_bands),
            bounds=check.bounds,
            source_format=fmt,
            band_names=decoded.band_names,
            warnings=warnings,
        )
        dataset = self.recomposite(dataset, BandSelection.default_for(dataset.num_bands))
        logger.info(
            "importado %s (%s): %dx%d, %d banda(s)%s",
            filename, fmt.value, dataset.width, dataset.height, dataset.num_bands,
            "" if dataset.is_placed else ", sin ubicar",
        )
        return dataset

    def ingest_path(
        self,
        path: str | Path,
        companion_path: Optional[str | Path] = None,
        fmt: Optional[RasterFormat] = None,
    ) -> RasterDataset:
        p = Path(path)
        self.check_size(os.stat(p).st_size, p.name)
        companion = companion_name = None
        if companion_path is not None:
            c = Path(companion_path)
            self.check_size(os.stat(c).st_size, c.name)
            companion, companion_name = c.read_bytes(), c.name
        return self.ingest(p.read_bytes(), p.name, companion, companion_name, fmt)

    def _ingest_one(self, req: IngestRequest) -> IngestOutcome:
        try:
            ds = self.ingest(req.payload, req.filename, req.companion, req.companion_name, req.fmt)
        except RasterIngestError as e:
            logger.warning("falló la importación de %s: %s", req.filename, e)
            return IngestOutcome(req.filename, error=e)
        return IngestOutcome(req.filename, dataset=ds)

    def ingest_many(self, requests: Sequence[IngestRequest]) -> List[IngestOutcome]:
        """Importaciones independientes en paralelo; un resultado por pedido, en orden."""
        if not requests:
            return []
        workers = min(self.settings.max_workers, len(requests))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(self._ingest_one, requests))

    def recomposite(self, dataset: RasterDataset, selection: BandSelection) -> RasterDataset:
        """Nueva imagen para `selection`; no re-decodifica ni toca las bandas."""
        image = self.compositor.composite(dataset, selection)
        return dataset.with_image_url(image.image_url)

    def build_layer(
        self,
        dataset: RasterDataset,
        name: str,
        selection: Optional[BandSelection] = None,
        display: Optional[DisplayParams] = None,
    ) -> RasterLayer:
        sel = selection or BandSelection.default_for(dataset.num_bands)
        if selection is not None:
            dataset = self.recomposite(dataset, sel)
        return RasterLayer(name=name, dataset=dataset, selection=sel, display=display or DisplayParams())

    def reselect(self, layer: RasterLayer, selection: BandSelection) -> RasterLayer:
        return RasterLayer(
            name=layer.name,
            dataset=self.recomposite(layer.dataset, selection),
            selection=selection,
            display=layer.display,
        )
