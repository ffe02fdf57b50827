from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import replace
from uuid import uuid4

from letters.models.enums import Disposition
from letters.services.mime.decoders import decode_content
from letters.services.mime.types import ContentInfo, File
from letters.storage.base import BlobStore

# A consumer receives the file (without content) and its decoded byte stream
# and returns the File to record. It must finish reading before it returns:
# the stream is single-pass and is torn down as soon as the consumer is done.
FileConsumer = Callable[[File, Iterator[bytes]], File]


def read_into_memory(file: File, chunks: Iterator[bytes]) -> File:
    data = b"".join(chunks)
    return replace(file, data=data, size=len(data))


def discard(file: File, chunks: Iterator[bytes]) -> File:
    return replace(file, size=sum(len(chunk) for chunk in chunks))


def store_in_blob_store(store: BlobStore, *, key_prefix: str = "files") -> FileConsumer:
    prefix = key_prefix.strip("/")

    def consume(file: File, chunks: Iterator[bytes]) -> File:
        key = f"{prefix}/{uuid4().hex}/{file.name}" if prefix else f"{uuid4().hex}/{file.name}"
        stored = store.put_stream(key=key, chunks=chunks, content_type=file.content_info.type)
        return replace(file, storage_key=stored.storage_key, size=stored.size_bytes)

    return consume


def sanitize_file_name(name: str) -> str:
    segments = [s for s in name.replace("\\", "/").split("/") if s.strip() not in ("", ".", "..")]
    return segments[-1].strip() if segments else ""


def resolve_file_name(content_info: ContentInfo, *, disposition: Disposition, index: int) -> str:
    raw = content_info.disposition_params.get("filename") or content_info.type_params.get("name") or ""
    return sanitize_file_name(raw) or f"attachment_{index}_{disposition}"


def extract_file(
    chunks: Iterable[bytes],
    content_info: ContentInfo,
    *,
    disposition: Disposition,
    index: int,
    consumer: FileConsumer = read_into_memory,
) -> File:
    file = File(
        name=resolve_file_name(content_info, disposition=disposition, index=index),
        disposition=disposition,
        content_info=content_info,
    )
    # Attachments keep their bytes exactly; no charset conversion.
    stream = decode_content(chunks, content_info, transcode_charset=False)
    result = consumer(file, stream)
    for _ in stream:
        pass
    return result


def read_file_data(file: File, store: BlobStore | None = None) -> bytes:
    """Return a parsed file's bytes, held in memory or fetched from `store`."""
    if file.data is not None:
        return file.data
    if file.storage_key is None:
        raise ValueError(f"file {file.name!r} has no data and no storage key")
    if store is None:
        raise ValueError(f"file {file.name!r} is stored at {file.storage_key!r}; a blob store is required")
    return store.get_bytes(key=file.storage_key)
