from __future__ import annotations

from letters.storage.base import BlobStore, BlobStoreError, StoredBlob  # noqa: F401
