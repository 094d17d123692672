"""JSON and XML documents describing every decoded binary of a session."""

from __future__ import annotations

import json
from datetime import datetime
from xml.sax.saxutils import escape

from mobilithek_csv.common.models import DecodedItem, DecodeSession
from mobilithek_csv.common.time_utils import iso_timestamp_z
from mobilithek_csv.decode.base64_codec import encode_base64
from mobilithek_csv.decode.sniff import decode_text

_ATTR_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def escape_xml_attr(value: object) -> str:
    return escape("" if value is None else str(value), _ATTR_ENTITIES)


def safe_cdata_text(text: str | None) -> str:
    return (text or "").replace("]]>", "]]]]><![CDATA[>")


def _cdata(tag: str, text: str) -> str:
    return f"    <{tag}><![CDATA[{safe_cdata_text(text)}]]></{tag}>\n"


def _byte_count(data: bytes | None) -> int:
    return len(data) if data is not None else 0


def _export_item(item: DecodedItem) -> dict:
    raw_info = item.raw_info
    decoded_info = item.decoded_info
    out = {
        "id": item.id or "",
        "type": item.type or "",
        "wasGunzipped": bool(item.was_gunzipped),
        "error": item.error or None,
        "gunzipError": item.gunzip_error or None,
        "raw": {
            "bytes": _byte_count(item.raw_bytes),
            "ext": raw_info.extension if raw_info else "",
            "mime": raw_info.mime_type if raw_info else "",
        },
        "decoded": {
            "bytes": _byte_count(item.decoded_bytes),
            "ext": decoded_info.extension if decoded_info else "",
            "mime": decoded_info.mime_type if decoded_info else "",
            "isText": bool(decoded_info.is_text) if decoded_info else False,
        },
        "preview": item.preview or "",
    }
    if not item.error and item.decoded_bytes is not None:
        if decoded_info is not None and decoded_info.is_text:
            out["decodedText"] = decode_text(item.decoded_bytes)
        else:
            out["decodedBase64"] = encode_base64(item.decoded_bytes)
    return out


def decoded_items_document(session: DecodeSession, generated_at: datetime | None = None) -> dict:
    return {
        "generatedAt": iso_timestamp_z(generated_at),
        "responseXmlLength": len(session.source_text or ""),
        "items": [_export_item(item) for item in session.items],
    }


def decoded_items_json(session: DecodeSession, generated_at: datetime | None = None) -> str:
    return json.dumps(decoded_items_document(session, generated_at), ensure_ascii=False, indent=2)


def _binary_open_tag(item: DecodedItem) -> str:
    raw_info = item.raw_info
    decoded_info = item.decoded_info
    attrs = [
        ("id", item.id or ""),
        ("type", item.type or ""),
        ("rawBytes", _byte_count(item.raw_bytes)),
        ("decodedBytes", _byte_count(item.decoded_bytes)),
        ("rawExt", raw_info.extension if raw_info else ""),
        ("decodedExt", decoded_info.extension if decoded_info else ""),
        ("rawMime", raw_info.mime_type if raw_info else ""),
        ("decodedMime", decoded_info.mime_type if decoded_info else ""),
        ("wasGunzipped", "true" if item.was_gunzipped else "false"),
    ]
    rendered = " ".join(f'{name}="{escape_xml_attr(value)}"' for name, value in attrs)
    return f"  <binary {rendered}>\n"


def decoded_items_xml(session: DecodeSession, generated_at: datetime | None = None) -> str:
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>\n',
        f'<decodedBinaries generatedAt="{escape_xml_attr(iso_timestamp_z(generated_at))}">\n',
    ]
    for item in session.items:
        parts.append(_binary_open_tag(item))
        if item.error:
            parts.append(_cdata("error", item.error))
        elif item.gunzip_error:
            parts.append(_cdata("gunzipError", item.gunzip_error))

        if not item.error and item.decoded_bytes is not None:
            if item.decoded_info is not None and item.decoded_info.is_text:
                parts.append(_cdata("decoded", decode_text(item.decoded_bytes)))
            else:
                parts.append(_cdata("decodedBase64", encode_base64(item.decoded_bytes)))
        parts.append("  </binary>\n")
    parts.append("</decodedBinaries>\n")
    return "".join(parts)
