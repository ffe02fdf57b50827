from __future__ import annotations

from letters.core.config import Settings, get_settings
from letters.models.enums import FileStoreKind
from letters.storage.base import BlobStore
from letters.storage.local import LocalBlobStore
from letters.storage.s3 import S3BlobStore, S3Config


def build_blob_store(settings: Settings | None = None) -> BlobStore | None:
    settings = settings or get_settings()
    if settings.FILE_STORE == FileStoreKind.memory:
        return None
    if settings.FILE_STORE == FileStoreKind.local:
        return LocalBlobStore(settings.LOCAL_FILE_DIR)
    if settings.FILE_STORE == FileStoreKind.s3:
        return S3BlobStore(
            S3Config(
                endpoint_url=settings.S3_ENDPOINT_URL,
                access_key_id=settings.S3_ACCESS_KEY_ID,
                secret_access_key=settings.S3_SECRET_ACCESS_KEY,
                bucket=settings.S3_BUCKET,
            )
        )
    raise ValueError(f"Unsupported FILE_STORE: {settings.FILE_STORE}")
