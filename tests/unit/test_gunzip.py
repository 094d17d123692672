from __future__ import annotations

import gzip

import pytest

from mobilithek_csv.common.errors import DecompressionError, UnsupportedOperationError
from mobilithek_csv.decode import gunzip


def test_maybe_gunzip_returns_none_for_non_gzip():
    assert gunzip.maybe_gunzip(b"<xml/>") is None
    assert gunzip.maybe_gunzip(b"") is None


def test_maybe_gunzip_decompresses():
    assert gunzip.maybe_gunzip(gzip.compress(b"payload")) == b"payload"


def test_corrupt_stream_raises_decompression_error():
    with pytest.raises(DecompressionError):
        gunzip.maybe_gunzip(b"\x1f\x8bnot really gzip")


def test_truncated_stream_raises_decompression_error():
    with pytest.raises(DecompressionError):
        gunzip.maybe_gunzip(gzip.compress(b"x" * 1000)[:-12])


def test_try_gunzip_falls_back_to_input_on_failure():
    data = b"\x1f\x8b\x08\x00garbage"
    result = gunzip.try_gunzip(data)
    assert result.data == data
    assert result.decompressed is False
    assert result.reason


def test_try_gunzip_success_and_not_applicable():
    ok = gunzip.try_gunzip(gzip.compress(b"abc"))
    assert (ok.data, ok.decompressed, ok.reason) == (b"abc", True, None)
    skipped = gunzip.try_gunzip(b"abc")
    assert (skipped.data, skipped.decompressed, skipped.reason) == (b"abc", False, None)


def test_missing_runtime_support_is_reported(monkeypatch):
    def no_zlib():
        raise UnsupportedOperationError("This runtime cannot gunzip.")

    monkeypatch.setattr(gunzip, "_gzip_modules", no_zlib)
    data = gzip.compress(b"abc")

    with pytest.raises(UnsupportedOperationError):
        gunzip.maybe_gunzip(data)

    result = gunzip.try_gunzip(data)
    assert result.data == data
    assert result.reason == "This runtime cannot gunzip."
