from __future__ import annotations

import base64
import os

import pytest

from mobilithek_csv.common.errors import DecodeError
from mobilithek_csv.decode.base64_codec import decode_base64, encode_base64, normalize_base64


def test_normalize_strips_whitespace_maps_urlsafe_and_pads():
    assert normalize_base64(" ab-_\n cd\tef ") == "ab+/cdef"
    assert normalize_base64("abcde") == "abcde==="
    assert normalize_base64("YQ") == "YQ=="


@pytest.mark.parametrize("payload", [b"", b"a", b"\xfb\xff\xfe", os.urandom(1000)])
def test_decode_matches_reference_for_urlsafe_unpadded_and_wrapped(payload: bytes):
    urlsafe = base64.urlsafe_b64encode(payload).decode("ascii").rstrip("=")
    wrapped = "\n".join(urlsafe[i : i + 7] for i in range(0, len(urlsafe), 7))

    assert decode_base64(urlsafe) == payload
    assert decode_base64(wrapped) == payload
    assert decode_base64(base64.b64encode(payload).decode("ascii")) == payload


def test_decode_in_small_chunks_concatenates_everything():
    payload = os.urandom(4099)
    assert decode_base64(encode_base64(payload), chunk_size=8) == payload


def test_decode_twice_round_trips():
    payload = bytes(range(256)) * 3
    nested = encode_base64(encode_base64(payload).encode("ascii"))
    assert decode_base64(decode_base64(nested).decode("ascii")) == payload


def test_empty_and_whitespace_only_give_empty_bytes():
    assert decode_base64("") == b""
    assert decode_base64("  \n\t ") == b""
    assert decode_base64(None) == b""


@pytest.mark.parametrize("bad", ["a", "ab$d", "a=bc", "abcd*efg"])
def test_malformed_base64_raises_decode_error(bad: str):
    with pytest.raises(DecodeError):
        decode_base64(bad)


def test_chunk_size_must_be_multiple_of_four():
    with pytest.raises(ValueError):
        decode_base64("abcd", chunk_size=6)
