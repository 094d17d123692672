"""Gzip decompression with a graceful fallback."""

from __future__ import annotations

from mobilithek_csv.common.errors import DecompressionError, PipelineError, UnsupportedOperationError
from mobilithek_csv.common.models import GunzipResult
from mobilithek_csv.decode.sniff import looks_gzip


def _gzip_modules():
    # zlib is an optional part of a CPython build
    try:
        import gzip
        import zlib
    except ImportError as exc:
        raise UnsupportedOperationError("This runtime cannot gunzip (zlib support is not available).") from exc
    return gzip, zlib


def maybe_gunzip(data: bytes) -> bytes | None:
    """Return the decompressed bytes, or ``None`` when ``data`` is not gzip."""
    if not looks_gzip(data):
        return None
    gzip, zlib = _gzip_modules()
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as exc:
        raise DecompressionError(f"Failed to gunzip: {exc}") from exc


def try_gunzip(data: bytes) -> GunzipResult:
    try:
        result = maybe_gunzip(data)
    except PipelineError as exc:
        return GunzipResult(data=data, decompressed=False, reason=str(exc) or "Failed to gunzip.")
    if result is None:
        return GunzipResult(data=data, decompressed=False)
    return GunzipResult(data=result, decompressed=True)
