from __future__ import annotations

import base64
import io

import pytest

from letters.core.errors import ContentDecodeError
from letters.services.mime.base64raw import Base64ToRaw, normalize_base64
from letters.services.mime.decoders import decode_raw_base64


def _chunked(data: bytes, size: int) -> list[bytes]:
    return [data[i : i + size] for i in range(0, len(data), size)]


@pytest.mark.parametrize("size", [1, 2, 3, 7, 76, 4096])
def test_normalize_base64_output_ignores_chunking(size: int) -> None:
    encoded = base64.encodebytes(bytes(range(256)) * 3 + b"x").replace(b"\n", b"\r\n")
    expected = encoded.replace(b"\r", b"").replace(b"\n", b"").replace(b"=", b"")

    out = list(normalize_base64(_chunked(encoded, size)))

    assert b"".join(out) == expected
    assert all(out)


def test_normalize_base64_skips_chunks_with_nothing_left() -> None:
    assert list(normalize_base64([b"\r\n", b"==", b"", b"QQ", b"\n"])) == [b"QQ"]
    assert list(normalize_base64([])) == []


def test_raw_base64_decodes_normalized_input() -> None:
    out = b"".join(decode_raw_base64(normalize_base64([b"Qm9uam91ciwgam95ZXV4IGxpb24="])))
    assert out == b"Bonjour, joyeux lion"


def test_raw_base64_rejects_a_single_trailing_character() -> None:
    with pytest.raises(ContentDecodeError):
        list(decode_raw_base64([b"QUJD", b"R"]))


def test_raw_base64_rejects_characters_outside_the_alphabet() -> None:
    with pytest.raises(ContentDecodeError):
        list(decode_raw_base64([b"QU JD"]))


def test_base64_to_raw_reader_strips_wrapping() -> None:
    reader = Base64ToRaw(io.BytesIO(b"Qm9u\r\nam91\r\nciwgam95ZXV4IGxpb24=\r\n"), chunk_size=3)
    assert reader.read() == b"Qm9uam91ciwgam95ZXV4IGxpb24"
