"""Content-type sniffing for decoded payload bytes.

Classification is an ordered chain of predicates over the leading bytes. Each
predicate returns a ``ContentDescriptor`` or ``None`` when inconclusive; the
first conclusive answer wins, so magic numbers always beat the text heuristics.
"""

from __future__ import annotations

from typing import Callable, Optional

from mobilithek_csv.common.config_loader import SniffOptions
from mobilithek_csv.common.models import ContentDescriptor

GZIP_MAGIC = b"\x1f\x8b"
ZIP_MAGIC = b"PK\x03\x04"

GZIP = ContentDescriptor("gz", "application/gzip", False)
ZIP = ContentDescriptor("zip", "application/zip", False)
BINARY = ContentDescriptor("bin", "application/octet-stream", False)
XML = ContentDescriptor("xml", "application/xml", True)
CSV = ContentDescriptor("csv", "text/csv", True)
TEXT = ContentDescriptor("txt", "text/plain", True)

Predicate = Callable[[bytes, SniffOptions], Optional[ContentDescriptor]]


def looks_gzip(data: bytes) -> bool:
    return data[:2] == GZIP_MAGIC


def looks_zip(data: bytes) -> bool:
    return data[:4] == ZIP_MAGIC


def _is_control(byte: int) -> bool:
    return byte < 0x09 or 0x0D < byte < 0x20


def looks_like_text(data: bytes, options: SniffOptions | None = None) -> bool:
    opts = options or SniffOptions()
    sample = data[: opts.sample_bytes]
    if not sample:
        return False
    if 0 in sample:
        return False
    controlish = sum(1 for byte in sample if _is_control(byte))
    return controlish / len(sample) < opts.control_ratio


def decode_text(data: bytes) -> str:
    """Lossy UTF-8 decode; a leading byte-order mark is dropped."""
    return data.decode("utf-8-sig", errors="replace")


def _gzip_signature(data: bytes, _options: SniffOptions) -> ContentDescriptor | None:
    return GZIP if looks_gzip(data) else None


def _zip_signature(data: bytes, _options: SniffOptions) -> ContentDescriptor | None:
    return ZIP if looks_zip(data) else None


def _binary_heuristic(data: bytes, options: SniffOptions) -> ContentDescriptor | None:
    return None if looks_like_text(data, options) else BINARY


def _text_kind(data: bytes, options: SniffOptions) -> ContentDescriptor | None:
    text = decode_text(data[: options.text_window_bytes]).lstrip()
    if text.startswith("<"):
        return XML
    if "\n" in text and ("," in text or ";" in text):
        return CSV
    return TEXT


CHAIN: tuple[Predicate, ...] = (
    _gzip_signature,
    _zip_signature,
    _binary_heuristic,
    _text_kind,
)


def describe(data: bytes, options: SniffOptions | None = None) -> ContentDescriptor:
    opts = options or SniffOptions()
    for predicate in CHAIN:
        found = predicate(data, opts)
        if found is not None:
            return found
    return BINARY


def make_preview(data: bytes, options: SniffOptions | None = None) -> str:
    opts = options or SniffOptions()
    info = describe(data, opts)
    if not info.is_text:
        hex_dump = data[: opts.preview_hex_bytes].hex()
        marker = "…" if len(data) > opts.preview_hex_bytes else ""
        return f"Binary preview (hex): {hex_dump}{marker}"

    text = decode_text(data[: opts.preview_text_bytes])
    if len(text) > opts.preview_max_chars:
        return f"{text[: opts.preview_max_chars]}\n…"
    return text
