from __future__ import annotations

import gzip

import pytest

from mobilithek_csv.common.config_loader import DecodeOptions
from mobilithek_csv.common.constants import EMPTY_BINARY_ERROR
from mobilithek_csv.common.models import RawBinaryDescriptor
from mobilithek_csv.decode import orchestrator
from mobilithek_csv.decode.base64_codec import encode_base64
from mobilithek_csv.decode.orchestrator import decode_binaries, decode_item, decode_response, safe_file_name


def _descriptor(content: bytes | str, index: int = 0, binary_id: str = "b1", binary_type: str = "t"):
    text = content if isinstance(content, str) else encode_base64(content)
    return RawBinaryDescriptor(index=index, id=binary_id, type=binary_type, base64_text=text)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("b1_t", "b1_t"),
        ("a b/c\\d", "a_b_c_d"),
        ("__x__", "x"),
        ("", "file"),
        ("***", "file"),
        (None, "file"),
        ("äöü.xml", ".xml"),
    ],
)
def test_safe_file_name(value, expected):
    assert safe_file_name(value) == expected


def test_safe_file_name_is_length_capped():
    assert safe_file_name("x" * 500) == "x" * 180
    assert safe_file_name("x" * 50, max_length=10) == "x" * 10


def test_gzip_item_is_decompressed_and_classified(fuel_publication_bytes: bytes):
    item = decode_item(_descriptor(gzip.compress(fuel_publication_bytes)))

    assert item.error is None
    assert item.was_gunzipped is True
    assert item.gunzip_error is None
    assert item.raw_info.extension == "gz"
    assert item.decoded_info.extension == "xml"
    assert item.decoded_bytes == fuel_publication_bytes
    assert item.raw_filename == "b1_t.gz"
    assert item.decoded_filename == "b1_t.xml"
    assert item.preview.startswith("<?xml")


def test_plain_item_keeps_raw_bytes():
    item = decode_item(_descriptor(b"id;price\n1;2\n", binary_id="x y", binary_type="csv data"))

    assert item.was_gunzipped is False
    assert item.decoded_bytes is item.raw_bytes
    assert item.decoded_info.extension == "csv"
    assert item.raw_filename == "x_y_csv_data.csv"


def test_corrupt_gzip_keeps_raw_bytes_and_records_reason():
    raw = b"\x1f\x8b\x08\x00broken"
    item = decode_item(_descriptor(raw))

    assert item.error is None
    assert item.was_gunzipped is False
    assert item.decoded_bytes == item.raw_bytes == raw
    assert item.gunzip_error
    assert item.decoded_info.extension == "gz"


def test_empty_payload_is_an_item_error():
    item = decode_item(_descriptor(""))
    assert item.error == EMPTY_BINARY_ERROR
    assert item.raw_bytes is None
    assert item.decoded_bytes is None


def test_bad_base64_is_isolated_to_its_item():
    items = decode_binaries(
        [
            _descriptor("!!!!", index=0, binary_id="bad"),
            _descriptor(b"hello", index=1, binary_id="good"),
        ]
    )

    assert [item.id for item in items] == ["bad", "good"]
    assert items[0].error
    assert items[0].decoded_bytes is None
    assert items[1].error is None
    assert items[1].decoded_bytes == b"hello"


def test_unexpected_exception_is_recorded_on_the_item(monkeypatch):
    def boom(*_args, **_kwargs):
        raise RuntimeError("sniffer exploded")

    monkeypatch.setattr(orchestrator, "make_preview", boom)
    item = decode_item(_descriptor(b"hello"))
    assert item.error == "sniffer exploded"


def test_custom_options_reach_the_sniffer():
    options = DecodeOptions(filename_max_length=3)
    item = decode_item(_descriptor(b"hello", binary_id="abcdef"), options)
    assert item.raw_filename == "abc.txt"


def test_decode_response_preserves_order_and_source(make_response, encode_b64):
    xml_text = make_response(("a", "t", encode_b64(b"one")), ("b", "t", ""), ("c", "t", encode_b64(b"three")))
    session = decode_response(xml_text)

    assert session.source_text == xml_text
    assert [item.id for item in session.items] == ["a", "b", "c"]
    assert session.items[1].error == EMPTY_BINARY_ERROR
