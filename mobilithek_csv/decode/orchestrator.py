"""Per-binary decode: base64, sniff, conditional gunzip, preview, filenames."""

from __future__ import annotations

import re
from typing import Iterable

from mobilithek_csv.common.config_loader import DecodeOptions
from mobilithek_csv.common.constants import EMPTY_BINARY_ERROR
from mobilithek_csv.common.models import DecodedItem, DecodeSession, RawBinaryDescriptor
from mobilithek_csv.decode.base64_codec import decode_base64
from mobilithek_csv.decode.binaries import extract_binaries
from mobilithek_csv.decode.gunzip import try_gunzip
from mobilithek_csv.decode.sniff import describe, make_preview

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]+")


def safe_file_name(value: object, max_length: int = 180) -> str:
    base = str(value or "file").strip() or "file"
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", base).strip("_")
    return cleaned[:max_length] or "file"


def decode_item(descriptor: RawBinaryDescriptor, options: DecodeOptions | None = None) -> DecodedItem:
    opts = options or DecodeOptions()
    identity = {"index": descriptor.index, "id": descriptor.id, "type": descriptor.type}
    if not descriptor.base64_text:
        return DecodedItem(**identity, error=EMPTY_BINARY_ERROR)

    try:
        raw_bytes = decode_base64(descriptor.base64_text, chunk_size=opts.base64_chunk_size)
        raw_info = describe(raw_bytes, opts.sniff)

        gunzip_error = None
        was_gunzipped = False
        decoded_bytes = raw_bytes
        if raw_info.extension == "gz":
            outcome = try_gunzip(raw_bytes)
            decoded_bytes = outcome.data
            was_gunzipped = outcome.decompressed
            gunzip_error = outcome.reason

        decoded_info = describe(decoded_bytes, opts.sniff)
        preview = make_preview(decoded_bytes, opts.sniff)
    except Exception as exc:
        return DecodedItem(**identity, error=str(exc) or "Failed to decode.")

    base_name = safe_file_name(f"{descriptor.id}_{descriptor.type}", opts.filename_max_length)
    return DecodedItem(
        **identity,
        raw_bytes=raw_bytes,
        raw_info=raw_info,
        decoded_bytes=decoded_bytes,
        decoded_info=decoded_info,
        was_gunzipped=was_gunzipped,
        gunzip_error=gunzip_error,
        preview=preview,
        raw_filename=f"{base_name}.{raw_info.extension}",
        decoded_filename=f"{base_name}.{decoded_info.extension}",
    )


def decode_binaries(
    descriptors: Iterable[RawBinaryDescriptor],
    options: DecodeOptions | None = None,
) -> list[DecodedItem]:
    # strictly sequential; output order is document order
    return [decode_item(descriptor, options) for descriptor in descriptors]


def decode_response(xml_text: str, options: DecodeOptions | None = None) -> DecodeSession:
    """Decode every binary of ``xml_text``; only an unparsable document raises."""
    items = decode_binaries(extract_binaries(xml_text), options)
    return DecodeSession(source_text=xml_text, items=tuple(items))
