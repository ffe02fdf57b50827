from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class StoredBlob:
    storage_key: str
    size_bytes: int


class BlobStoreError(RuntimeError):
    pass


class BlobStore:
    def put_stream(
        self, *, key: str, chunks: Iterable[bytes], content_type: str | None
    ) -> StoredBlob:  # pragma: no cover
        raise NotImplementedError

    def get_bytes(self, *, key: str) -> bytes:  # pragma: no cover
        """Read back a blob written by put_stream; see read_file_data."""
        raise NotImplementedError
