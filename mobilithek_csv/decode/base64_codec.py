"""Chunked base64 / base64url decoding."""

from __future__ import annotations

import base64
import binascii
import re

from mobilithek_csv.common.errors import DecodeError

DEFAULT_CHUNK_SIZE = 32768

_WHITESPACE = re.compile(r"\s+")


def normalize_base64(text: str | None) -> str:
    """Strip whitespace, map the URL-safe alphabet and pad to a multiple of 4."""
    value = _WHITESPACE.sub("", text or "").replace("-", "+").replace("_", "/")
    remainder = len(value) % 4
    if remainder:
        value += "=" * (4 - remainder)
    return value


def decode_base64(text: str | None, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    if chunk_size <= 0 or chunk_size % 4:
        raise ValueError("chunk_size must be a positive multiple of 4")

    value = normalize_base64(text)
    if not value:
        return b""

    parts: list[bytes] = []
    for start in range(0, len(value), chunk_size):
        chunk = value[start : start + chunk_size]
        try:
            parts.append(base64.b64decode(chunk, validate=True))
        except (binascii.Error, ValueError) as exc:
            raise DecodeError(f"Invalid base64 content: {exc}") from exc
    return b"".join(parts)


def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")
