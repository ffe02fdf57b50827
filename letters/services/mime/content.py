from __future__ import annotations

import codecs
from typing import Protocol

from letters.core.errors import (
    MalformedMediaTypeError,
    UnknownDispositionError,
    UnknownTransferEncodingError,
)
from letters.models.enums import Disposition, TransferEncoding
from letters.services.mime.charsets import lookup_charset
from letters.services.mime.mediatype import parse_media_type
from letters.services.mime.types import ContentInfo

DEFAULT_CONTENT_TYPE = "text/plain"
_LOWERCASED_TYPE_PARAMS = ("charset", "micalg", "protocol")
_ID_TRIM = "<> \t\r\n"


class HeaderLookup(Protocol):
    def get(self, name: str, default: str = "") -> str: ...


def extract_type(value: str | None) -> tuple[str, dict[str, str]]:
    value = (value or "").strip()
    if not value:
        return DEFAULT_CONTENT_TYPE, {}
    try:
        media_type, params = parse_media_type(value)
    except MalformedMediaTypeError as e:
        raise MalformedMediaTypeError(f"cannot extract Content-Type {value!r}: {e}") from e
    for name in _LOWERCASED_TYPE_PARAMS:
        if name in params:
            params[name] = params[name].strip().lower()
    return media_type, params


def extract_disposition(value: str | None) -> tuple[Disposition, dict[str, str]]:
    value = (value or "").strip()
    if not value:
        return Disposition.none, {}
    try:
        label, params = parse_media_type(value)
    except MalformedMediaTypeError as e:
        raise MalformedMediaTypeError(f"cannot extract Content-Disposition {value!r}: {e}") from e
    if label not in (Disposition.inline, Disposition.attachment):
        raise UnknownDispositionError(f"unknown Content-Disposition {label!r}")
    return Disposition(label), params


def extract_transfer_encoding(value: str | None) -> TransferEncoding:
    label = (value or "").strip().lower()
    if not label:
        return TransferEncoding.bit7
    try:
        return TransferEncoding(label)
    except ValueError:
        raise UnknownTransferEncodingError(f"unknown Content-Transfer-Encoding {label!r}") from None


def extract_charset(
    type_params: dict[str, str], parent: ContentInfo | None
) -> tuple[str, codecs.CodecInfo | None]:
    charset = type_params.get("charset", "")
    if not charset and parent is not None:
        charset = parent.type_params.get("charset", "")
    if not charset:
        return "", None
    # An unknown label is kept so callers can see it; the body then passes
    # through undecoded.
    return charset, lookup_charset(charset)


def extract_id(value: str | None) -> str:
    return (value or "").strip(_ID_TRIM)


def extract_content_info(headers: HeaderLookup | None, parent: ContentInfo | None = None) -> ContentInfo:
    def get(name: str) -> str:
        if headers is None:
            return ""
        return headers.get(name, "")

    content_type, type_params = extract_type(get("Content-Type"))
    charset, encoding = extract_charset(type_params, parent)
    transfer_encoding = extract_transfer_encoding(get("Content-Transfer-Encoding"))
    disposition, disposition_params = extract_disposition(get("Content-Disposition"))
    return ContentInfo(
        type=content_type,
        type_params=type_params,
        disposition=disposition,
        disposition_params=disposition_params,
        transfer_encoding=transfer_encoding,
        id=extract_id(get("Content-ID")),
        charset=charset,
        encoding=encoding,
    )
