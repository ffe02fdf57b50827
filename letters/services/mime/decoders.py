from __future__ import annotations

import base64
import binascii
import codecs
from collections.abc import Iterable, Iterator

from letters.core.errors import ContentDecodeError
from letters.models.enums import TransferEncoding
from letters.services.mime.base64raw import normalize_base64
from letters.services.mime.charsets import lookup_charset
from letters.services.mime.types import ContentInfo


def _b64decode(data: bytes) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except binascii.Error as e:
        raise ContentDecodeError(f"illegal base64 data: {e}") from e


def decode_raw_base64(chunks: Iterable[bytes]) -> Iterator[bytes]:
    pending = b""
    for chunk in chunks:
        pending += chunk
        cut = len(pending) - len(pending) % 4
        if cut:
            yield _b64decode(pending[:cut])
            pending = pending[cut:]
    if len(pending) == 1:
        raise ContentDecodeError("illegal base64 data: truncated final quantum")
    if pending:
        yield _b64decode(pending + b"=" * (4 - len(pending)))


def _iter_lines(chunks: Iterable[bytes]) -> Iterator[bytes]:
    pending = bytearray()
    for chunk in chunks:
        # Only the new chunk can hold a line break not yet seen.
        scan_from = len(pending)
        pending += chunk
        start = 0
        end = pending.find(b"\n", scan_from)
        while end != -1:
            yield bytes(pending[start : end + 1])
            start = end + 1
            end = pending.find(b"\n", start)
        if start:
            del pending[:start]
    if pending:
        yield bytes(pending)


def decode_quoted_printable(chunks: Iterable[bytes]) -> Iterator[bytes]:
    for line in _iter_lines(chunks):
        decoded = binascii.a2b_qp(line)
        if decoded:
            yield decoded


def transcode(chunks: Iterable[bytes], encoding: codecs.CodecInfo) -> Iterator[bytes]:
    decoder = encoding.incrementaldecoder(errors="replace")
    for chunk in chunks:
        text = decoder.decode(chunk)
        if text:
            yield text.encode("utf-8")
    tail = decoder.decode(b"", final=True)
    if tail:
        yield tail.encode("utf-8")


def decode_content(
    chunks: Iterable[bytes], content_info: ContentInfo, *, transcode_charset: bool = True
) -> Iterator[bytes]:
    if content_info.transfer_encoding == TransferEncoding.base64:
        stream = decode_raw_base64(normalize_base64(chunks))
    elif content_info.transfer_encoding == TransferEncoding.quoted_printable:
        stream = decode_quoted_printable(chunks)
    else:
        stream = iter(chunks)

    if not transcode_charset:
        return stream
    encoding = content_info.encoding
    if encoding is None:
        encoding = lookup_charset(content_info.charset)
    if encoding is None:
        return stream
    return transcode(stream, encoding)
