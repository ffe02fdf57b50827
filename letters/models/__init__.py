from __future__ import annotations

from letters.models.enums import (  # noqa: F401
    BODY_TYPES,
    MULTIPART_PREFIX,
    Disposition,
    FileStoreKind,
    ProcessingMode,
    TransferEncoding,
)
