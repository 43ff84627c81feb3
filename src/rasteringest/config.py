# src/rasteringest/config.py
from __future__ import annotations

from functools import lru_cache
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .contracts.core import EnviDataType, Interleave
from .contracts.geo import Bounds, lonlat_valid

MIB = 1024 * 1024

# Región de operación de la aplicación (west, south, east, north)
DEFAULT_FALLBACK_BOUNDS: Tuple[float, float, float, float] = (21.8, 8.0, 38.6, 23.0)


class EnviDefaults(BaseModel):
    """Valores que usa el decoder ENVI cuando no hay .hdr (o falta una clave)."""
    model_config = ConfigDict(frozen=True)
    width: PositiveInt = 512
    height: PositiveInt = 512
    bands: PositiveInt = 1
    data_type: EnviDataType = EnviDataType.BYTE
    interleave: Interleave = Interleave.BSQ
    byte_order: int = Field(0, ge=0, le=1)  # 0=little, 1=big
    header_offset: int = Field(0, ge=0)


class Settings(BaseSettings):
    """
    Config del motor de ingesta. No toca disco.
    Debe ser construida y provista por composition/di.py (CLI/adapters).
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RASTER_",
        env_nested_delimiter="__",
        extra="forbid",
        frozen=True,
    )

    # --- límites ---
    max_upload_bytes: PositiveInt = 500 * MIB

    # --- decoders ---
    envi_defaults: EnviDefaults = EnviDefaults()
    erdas_header_bytes: int = Field(512, ge=0)
    erdas_width: PositiveInt = 512
    erdas_height: PositiveInt = 512
    geotiff_mask_nodata: bool = True

    # --- georreferencia ---
    fallback_bounds: Tuple[float, float, float, float] = DEFAULT_FALLBACK_BOUNDS

    # --- ejecución ---
    max_workers: PositiveInt = 4
    log_level: str = "INFO"

    # ----------------------------
    # Validadores
    # ----------------------------
    @field_validator("fallback_bounds")
    @classmethod
    def _valid_fallback(cls, v: Tuple[float, float, float, float]) -> Tuple[float, float, float, float]:
        b = Bounds(*v)
        if not (lonlat_valid(b) and b.is_ordered()):
            raise ValueError(f"fallback_bounds inválido: {v}")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        v2 = str(v).strip().upper()
        if v2 not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"log_level inválido: {v}")
        return v2

    def fallback(self) -> Bounds:
        return Bounds(*self.fallback_bounds)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Instancia cacheada. Úsala SOLO desde composition/di.py o CLI.
    Prohibido usarla en services/. Para tests, recuerda limpiar:
        get_settings.cache_clear()
    """
    return Settings()
