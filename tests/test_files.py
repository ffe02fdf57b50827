from __future__ import annotations

import base64
import codecs
from collections.abc import Iterable, Iterator
from dataclasses import replace

import pytest

from letters.models.enums import Disposition, TransferEncoding
from letters.services.mime.files import (
    discard,
    extract_file,
    resolve_file_name,
    sanitize_file_name,
    store_in_blob_store,
)
from letters.services.mime.types import ContentInfo, File
from letters.storage.base import BlobStore, StoredBlob


class _RecordingStore(BlobStore):
    def __init__(self) -> None:
        self.objects: dict[str, tuple[bytes, str | None]] = {}

    def put_stream(self, *, key: str, chunks: Iterable[bytes], content_type: str | None) -> StoredBlob:
        data = b"".join(chunks)
        self.objects[key] = (data, content_type)
        return StoredBlob(storage_key=key, size_bytes=len(data))

    def get_bytes(self, *, key: str) -> bytes:
        return self.objects[key][0]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("/etc/ssh/sshd_config", "sshd_config"),
        ("..\\..\\boot.ini", "boot.ini"),
        ("reports/./q3.pdf", "q3.pdf"),
        ("report.pdf", "report.pdf"),
        ("../..", ""),
        ("", ""),
    ],
)
def test_sanitize_file_name(raw: str, expected: str) -> None:
    assert sanitize_file_name(raw) == expected


def test_resolve_file_name_order() -> None:
    both = ContentInfo(
        type="image/png",
        type_params={"name": "from-type.png"},
        disposition_params={"filename": "from-disposition.png"},
    )
    assert resolve_file_name(both, disposition=Disposition.attachment, index=0) == "from-disposition.png"

    type_only = ContentInfo(type="image/png", type_params={"name": "from-type.png"})
    assert resolve_file_name(type_only, disposition=Disposition.attachment, index=0) == "from-type.png"

    unnamed = ContentInfo(type="image/png")
    assert resolve_file_name(unnamed, disposition=Disposition.inline, index=2) == "attachment_2_inline"

    traversal_only = ContentInfo(type="image/png", disposition_params={"filename": "../"})
    assert resolve_file_name(traversal_only, disposition=Disposition.attachment, index=1) == "attachment_1_attachment"


def test_extract_file_decodes_into_memory() -> None:
    data = b"\x89PNG\r\n\x1a\n" + bytes(range(64))
    info = ContentInfo(
        type="image/png",
        disposition_params={"filename": "logo.png"},
        transfer_encoding=TransferEncoding.base64,
    )

    file = extract_file([base64.encodebytes(data)], info, disposition=Disposition.attachment, index=0)

    assert file == File(
        name="logo.png",
        disposition=Disposition.attachment,
        content_info=info,
        data=data,
        size=len(data),
    )


def test_extract_file_keeps_bytes_exact_despite_charset() -> None:
    info = ContentInfo(type="text/csv", charset="iso-8859-1", encoding=codecs.lookup("iso-8859-1"))
    file = extract_file([b"caf\xe9"], info, disposition=Disposition.attachment, index=0)
    assert file.data == b"caf\xe9"


def test_extract_file_drains_what_the_consumer_leaves() -> None:
    chunks = iter([b"first", b"second", b"third"])

    def read_one(file: File, stream: Iterator[bytes]) -> File:
        return replace(file, data=next(stream))

    info = ContentInfo(type="application/octet-stream")
    file = extract_file(chunks, info, disposition=Disposition.attachment, index=0, consumer=read_one)

    assert file.data == b"first"
    assert next(chunks, None) is None


def test_discard_records_only_the_size() -> None:
    info = ContentInfo(type="application/zip")
    file = extract_file([b"abc", b"de"], info, disposition=Disposition.attachment, index=3, consumer=discard)
    assert file.data is None
    assert file.size == 5
    assert file.name == "attachment_3_attachment"


def test_store_in_blob_store_streams_and_records_the_key() -> None:
    store = _RecordingStore()
    consumer = store_in_blob_store(store, key_prefix="/mail/files/")
    info = ContentInfo(type="application/pdf", disposition_params={"filename": "invoice.pdf"})

    file = extract_file([b"%PDF-", b"1.7"], info, disposition=Disposition.attachment, index=0, consumer=consumer)

    assert file.data is None
    assert file.size == 8
    assert file.storage_key is not None
    assert file.storage_key.startswith("mail/files/")
    assert file.storage_key.endswith("/invoice.pdf")
    assert store.objects[file.storage_key] == (b"%PDF-1.7", "application/pdf")
