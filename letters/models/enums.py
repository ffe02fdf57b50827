from __future__ import annotations

import enum


class Disposition(enum.StrEnum):
    none = "none"
    inline = "inline"
    attachment = "attachment"


class TransferEncoding(enum.StrEnum):
    bit7 = "7bit"
    bit8 = "8bit"
    binary = "binary"
    quoted_printable = "quoted-printable"
    base64 = "base64"


class ProcessingMode(enum.StrEnum):
    full = "full"
    headers_only = "headers-only"
    skip_attachments = "skip-attachments"


class FileStoreKind(enum.StrEnum):
    memory = "memory"
    local = "local"
    s3 = "s3"


BODY_TYPES = frozenset({"text/plain", "text/enriched", "text/html"})
MULTIPART_PREFIX = "multipart/"
