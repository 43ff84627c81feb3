from __future__ import annotations
from pathlib import Path
from typing import Dict, Optional

import yaml

from ..adapters.envi_decoder import EnviDecoder
from ..adapters.erdas_decoder import ErdasDecoder
from ..adapters.image_world_decoder import ImageWorldFileDecoder
from ..adapters.pillow_png_encoder import PillowPngEncoder
from ..adapters.rasterio_geotiff_decoder import RasterioGeoTiffDecoder
from ..config import Settings, get_settings
from ..contracts.core import RasterFormat
from ..ports.raster_decode import RasterDecoderPort
from ..services.compositor import ImageCompositor
from ..services.ingest_service import RasterIngestService

def load_settings_from_yaml(path: Path) -> Settings:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return Settings(**data)

def build_settings(config_path: Optional[Path] = None) -> Settings:
    if config_path is None:
        return get_settings()
    return load_settings_from_yaml(Path(config_path).resolve())

def build_decoders(settings: Settings) -> Dict[RasterFormat, RasterDecoderPort]:
    return {
        RasterFormat.GEOTIFF: RasterioGeoTiffDecoder(mask_nodata=settings.geotiff_mask_nodata),
        RasterFormat.IMAGE_WORLD: ImageWorldFileDecoder(),
        RasterFormat.ENVI: EnviDecoder(defaults=settings.envi_defaults),
        RasterFormat.ERDAS: ErdasDecoder(
            header_bytes=settings.erdas_header_bytes,
            width=settings.erdas_width,
            height=settings.erdas_height,
        ),
    }

def build_ingest_service(settings: Optional[Settings] = None) -> RasterIngestService:
    st = settings or get_settings()
    return RasterIngestService(
        decoders=build_decoders(st),
        compositor=ImageCompositor(encoder=PillowPngEncoder()),
        settings=st,
    )
