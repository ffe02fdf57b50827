from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from letters.storage.base import BlobStore, BlobStoreError, StoredBlob


class LocalBlobStore(BlobStore):
    def __init__(self, root_dir: str) -> None:
        self._root = Path(root_dir)
        self._root.mkdir(parents=True, exist_ok=True)

    def _path_for_key(self, key: str) -> Path:
        path = (self._root / key.lstrip("/")).resolve()
        if not path.is_relative_to(self._root.resolve()):
            raise BlobStoreError(f"key escapes store root: {key!r}")
        return path

    def put_stream(self, *, key: str, chunks: Iterable[bytes], content_type: str | None) -> StoredBlob:
        _ = content_type
        path = self._path_for_key(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        size = 0
        try:
            try:
                with open(tmp_path, "wb") as f:
                    for chunk in chunks:
                        f.write(chunk)
                        size += len(chunk)
                os.replace(tmp_path, path)
            except BaseException:
                # The chunk iterator may fail mid-write with a decode error.
                tmp_path.unlink(missing_ok=True)
                raise
        except OSError as e:
            raise BlobStoreError(str(e)) from e
        return StoredBlob(storage_key=key, size_bytes=size)

    def get_bytes(self, *, key: str) -> bytes:
        path = self._path_for_key(key)
        try:
            return path.read_bytes()
        except OSError as e:
            raise BlobStoreError(str(e)) from e
