from __future__ import annotations

import io
from collections.abc import Iterable
from dataclasses import dataclass

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from letters.storage.base import BlobStore, BlobStoreError, StoredBlob


@dataclass(frozen=True)
class S3Config:
    endpoint_url: str | None
    access_key_id: str
    secret_access_key: str
    bucket: str


class _ChunkReader(io.RawIOBase):
    """File-like view over an iterator of byte chunks, as upload_fileobj expects."""

    def __init__(self, chunks: Iterable[bytes]) -> None:
        self._chunks = iter(chunks)
        self._pending = b""
        self.bytes_read = 0

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[override]
        while not self._pending:
            chunk = next(self._chunks, None)
            if chunk is None:
                return 0
            self._pending = chunk
        n = min(len(buffer), len(self._pending))
        buffer[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        self.bytes_read += n
        return n


class S3BlobStore(BlobStore):
    def __init__(self, config: S3Config) -> None:
        self._bucket = config.bucket
        self._client = boto3.client(
            "s3",
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id or None,
            aws_secret_access_key=config.secret_access_key or None,
        )

    def put_stream(self, *, key: str, chunks: Iterable[bytes], content_type: str | None) -> StoredBlob:
        extra_args: dict[str, str] = {}
        if content_type:
            extra_args["ContentType"] = content_type
        reader = _ChunkReader(chunks)
        try:
            self._client.upload_fileobj(reader, self._bucket, key, ExtraArgs=extra_args or None)
        except (BotoCoreError, ClientError) as e:
            raise BlobStoreError(str(e)) from e
        return StoredBlob(storage_key=key, size_bytes=reader.bytes_read)

    def get_bytes(self, *, key: str) -> bytes:
        try:
            res = self._client.get_object(Bucket=self._bucket, Key=key)
            body = res["Body"].read()
            if not isinstance(body, (bytes, bytearray)):
                raise BlobStoreError("S3 returned non-bytes body")
            return bytes(body)
        except (BotoCoreError, ClientError) as e:
            raise BlobStoreError(str(e)) from e
