from __future__ import annotations

import base64
import json
from datetime import datetime, timezone
from xml.etree import ElementTree as ET

from mobilithek_csv.common.models import ContentDescriptor, DecodedItem, DecodeSession
from mobilithek_csv.pipeline.decoded_export import (
    decoded_items_document,
    decoded_items_json,
    decoded_items_xml,
    escape_xml_attr,
    safe_cdata_text,
)

GENERATED_AT = datetime(2024, 3, 1, 12, 30, 5, 123456, tzinfo=timezone.utc)
TEXT = ContentDescriptor("txt", "text/plain", True)
GZ = ContentDescriptor("gz", "application/gzip", False)
BIN = ContentDescriptor("bin", "application/octet-stream", False)


def _session() -> DecodeSession:
    items = (
        DecodedItem(
            index=0,
            id="t1",
            type='a"b',
            raw_bytes=b"hi ]]> there",
            raw_info=TEXT,
            decoded_bytes=b"hi ]]> there",
            decoded_info=TEXT,
            preview="hi ]]> there",
        ),
        DecodedItem(
            index=1,
            id="g1",
            type="gz",
            raw_bytes=b"\x1f\x8b\x00",
            raw_info=GZ,
            decoded_bytes=b"\x1f\x8b\x00",
            decoded_info=GZ,
            gunzip_error="Failed to gunzip: bad",
            preview="Binary preview (hex): 1f8b00",
        ),
        DecodedItem(index=2, id="e1", type="t", error="Empty <binary> content."),
    )
    return DecodeSession(source_text="<response>…</response>", items=items)


def test_cdata_and_attribute_escaping():
    assert safe_cdata_text("a]]>b") == "a]]]]><![CDATA[>b"
    assert safe_cdata_text(None) == ""
    assert escape_xml_attr("<&\"'>") == "&lt;&amp;&quot;&apos;&gt;"


def test_json_document_shape():
    document = decoded_items_document(_session(), GENERATED_AT)

    assert document["generatedAt"] == "2024-03-01T12:30:05.123Z"
    assert document["responseXmlLength"] == len("<response>…</response>")

    text_item, gz_item, failed_item = document["items"]
    assert text_item["decodedText"] == "hi ]]> there"
    assert "decodedBase64" not in text_item
    assert text_item["decoded"] == {"bytes": 12, "ext": "txt", "mime": "text/plain", "isText": True}

    assert gz_item["gunzipError"] == "Failed to gunzip: bad"
    assert gz_item["wasGunzipped"] is False
    assert base64.b64decode(gz_item["decodedBase64"]) == b"\x1f\x8b\x00"

    assert failed_item["error"] == "Empty <binary> content."
    assert failed_item["raw"] == {"bytes": 0, "ext": "", "mime": ""}
    assert failed_item["decoded"]["isText"] is False
    assert "decodedText" not in failed_item and "decodedBase64" not in failed_item


def test_json_text_is_valid_json():
    parsed = json.loads(decoded_items_json(_session(), GENERATED_AT))
    assert [item["id"] for item in parsed["items"]] == ["t1", "g1", "e1"]


def test_xml_document_parses_and_round_trips_cdata():
    text = decoded_items_xml(_session(), GENERATED_AT)
    root = ET.fromstring(text.encode("utf-8"))

    assert root.tag == "decodedBinaries"
    assert root.get("generatedAt") == "2024-03-01T12:30:05.123Z"

    text_el, gz_el, failed_el = root.findall("binary")
    assert text_el.get("type") == 'a"b'
    assert text_el.get("rawBytes") == "12"
    assert text_el.get("wasGunzipped") == "false"
    assert text_el.findtext("decoded") == "hi ]]> there"

    assert gz_el.findtext("gunzipError") == "Failed to gunzip: bad"
    assert base64.b64decode(gz_el.findtext("decodedBase64")) == b"\x1f\x8b\x00"

    assert failed_el.findtext("error") == "Empty <binary> content."
    assert failed_el.get("decodedBytes") == "0"
    assert failed_el.find("decoded") is None
