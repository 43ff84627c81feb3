# src/rasteringest/contracts/errors.py
from __future__ import annotations

from typing import Optional


class RasterIngestError(Exception):
    """Base de todos los errores de importación. Siempre local a un intento."""

    def __init__(self, message: str, *, filename: Optional[str] = None):
        super().__init__(message)
        self.filename = filename


class UnsupportedFormatError(RasterIngestError):
    def __init__(self, extension: str, *, filename: Optional[str] = None):
        ext = extension or "<sin extensión>"
        super().__init__(f"Unsupported file format: {ext}", filename=filename)
        self.extension = extension


class MissingCompanionFileError(RasterIngestError):
    def __init__(self, filename: Optional[str] = None):
        super().__init__(
            "Please upload the .img or .dat file along with the .hdr file",
            filename=filename,
        )


class FileTooLargeError(RasterIngestError):
    def __init__(self, size: int, limit: int, *, filename: Optional[str] = None):
        super().__init__(
            f"File too large ({size} bytes). Maximum size: {limit // (1024 * 1024)}MB",
            filename=filename,
        )
        self.size = size
        self.limit = limit


class InvalidWorldFileError(RasterIngestError):
    pass


class DecodeFailure(RasterIngestError):
    """Envoltorio de cualquier fallo interno de un decoder."""

    def __init__(self, filename: str, cause: BaseException):
        super().__init__(f"Failed to parse {filename}: {cause}", filename=filename)
        self.cause = cause

__all__ = [
    "RasterIngestError", "UnsupportedFormatError", "MissingCompanionFileError",
    "FileTooLargeError", "InvalidWorldFileError", "DecodeFailure",
]
