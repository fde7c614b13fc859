"""Tests for the image codec helpers."""

import base64
import io

import pytest

from plugin.codec import decode_binary, encode_to_data_url
from plugin.errors import DecodeError


@pytest.mark.parametrize("data", [b"", b"\x00", b"\xff\xd8\xff\xe0JFIF", bytes(range(256))])
def test_data_url_payload_decodes_to_original(data):
    url = encode_to_data_url(data, "image/jpg")
    header, payload = url.split(",", 1)
    assert header == "data:image/jpg;base64"
    assert base64.b64decode(payload, validate=True) == data


def test_data_url_keeps_padding_and_has_no_newlines():
    url = encode_to_data_url(b"ab" * 1001, "image/png")
    payload = url.split(",", 1)[1]
    assert "\n" not in payload
    assert payload.endswith("=")


def test_decode_binary_copies_bytes_like():
    source = bytearray(b"heatmap")
    data = decode_binary(source)
    assert data == b"heatmap"
    assert isinstance(data, bytes)
    source[0] = 0
    assert data == b"heatmap"


def test_decode_binary_reads_streams():
    assert decode_binary(io.BytesIO(b"\x89PNG")) == b"\x89PNG"


def test_decode_binary_rejects_text():
    with pytest.raises(DecodeError):
        decode_binary("not bytes")
    with pytest.raises(DecodeError):
        decode_binary(io.StringIO("text stream"))


def test_decode_binary_wraps_io_errors():
    class Truncated:
        def read(self):
            raise OSError("connection reset")

    with pytest.raises(DecodeError) as info:
        decode_binary(Truncated())
    assert isinstance(info.value.cause, OSError)
