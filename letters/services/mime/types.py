from __future__ import annotations

import codecs
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import datetime
from types import MappingProxyType

from letters.models.enums import BODY_TYPES, MULTIPART_PREFIX, Disposition, TransferEncoding


def _freeze_params(params: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(params))


@dataclass(frozen=True)
class ContentInfo:
    type: str = "text/plain"
    type_params: Mapping[str, str] = field(default_factory=dict)
    disposition: Disposition = Disposition.none
    disposition_params: Mapping[str, str] = field(default_factory=dict)
    transfer_encoding: TransferEncoding = TransferEncoding.bit7
    id: str = ""
    charset: str = ""
    encoding: codecs.CodecInfo | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "type_params", _freeze_params(self.type_params))
        object.__setattr__(self, "disposition_params", _freeze_params(self.disposition_params))

    @property
    def boundary(self) -> str:
        return self.type_params.get("boundary", "")

    @property
    def is_multipart(self) -> bool:
        return self.type.startswith(MULTIPART_PREFIX)

    def is_inline_file(self, parent: ContentInfo | None) -> bool:
        if self.disposition == Disposition.inline:
            return True
        if self.type in BODY_TYPES:
            return False
        return parent is not None and parent.type == "multipart/related"

    def is_attached_file(self, parent: ContentInfo | None) -> bool:
        if self.disposition == Disposition.attachment:
            return True
        if self.type in BODY_TYPES:
            return False
        return parent is not None and parent.type in ("multipart/mixed", "multipart/parallel")


@dataclass(frozen=True)
class Address:
    name: str
    address: str


@dataclass(frozen=True)
class File:
    name: str
    disposition: Disposition
    content_info: ContentInfo
    data: bytes | None = None
    storage_key: str | None = None
    size: int = 0


@dataclass(frozen=True)
class Headers:
    date: datetime | None = None
    sender: Address | None = None
    from_: tuple[Address, ...] = ()
    reply_to: tuple[Address, ...] = ()
    to: tuple[Address, ...] = ()
    cc: tuple[Address, ...] = ()
    bcc: tuple[Address, ...] = ()
    message_id: str = ""
    in_reply_to: tuple[str, ...] = ()
    references: tuple[str, ...] = ()
    received: tuple[str, ...] = ()
    subject: str = ""
    comments: str = ""
    keywords: tuple[str, ...] = ()
    resent_date: datetime | None = None
    resent_from: tuple[Address, ...] = ()
    resent_sender: Address | None = None
    resent_to: tuple[Address, ...] = ()
    resent_cc: tuple[Address, ...] = ()
    resent_bcc: tuple[Address, ...] = ()
    resent_message_id: str = ""
    content_info: ContentInfo | None = None
    extra_headers: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Custom header parsers may hand back lists; the result stays read-only.
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, list):
                object.__setattr__(self, f.name, tuple(value))
        extra = {name: tuple(values) for name, values in self.extra_headers.items()}
        object.__setattr__(self, "extra_headers", MappingProxyType(extra))


@dataclass(frozen=True)
class Email:
    headers: Headers
    text: str
    enriched_text: str
    html: str
    files: tuple[File, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "files", tuple(self.files))
