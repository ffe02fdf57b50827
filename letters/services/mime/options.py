from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any

from letters.core.config import Settings
from letters.models.enums import ProcessingMode
from letters.services.mime.fields import (
    EXPLICIT_HEADERS,
    OVERRIDABLE_HEADERS,
    parse_address,
    parse_address_list,
    parse_date,
)
from letters.services.mime.files import FileConsumer, read_into_memory, store_in_blob_store
from letters.services.mime.reader import canonical_header_key
from letters.services.mime.types import Address, ContentInfo
from letters.storage.factory import build_blob_store

ContentFilter = Callable[[ContentInfo], bool]


def accept_all(_: ContentInfo) -> bool:
    return True


def accept_none(_: ContentInfo) -> bool:
    return False


def _canonical_keys(parsers: Mapping[str, Callable]) -> Mapping[str, Callable]:
    return MappingProxyType({canonical_header_key(name): func for name, func in parsers.items()})


@dataclass(frozen=True)
class ParserOptions:
    mode: ProcessingMode = ProcessingMode.full
    address_func: Callable[[str], Address] = parse_address
    address_list_func: Callable[[str], list[Address]] = parse_address_list
    date_func: Callable[[str], datetime] = parse_date
    file_consumer: FileConsumer = read_into_memory
    # Vetoed bodies and files are drained and left out of the result.
    body_filter: ContentFilter = accept_all
    file_filter: ContentFilter = accept_all
    emit_metrics: bool = True
    log_events: bool = True
    # Keyed by header name. See OVERRIDABLE_HEADERS for what each parser receives.
    header_parsers: Mapping[str, Callable[[str], Any]] = field(default_factory=dict)
    # Parsers for headers that land in Headers.extra_headers; each gets one raw value.
    extra_header_parsers: Mapping[str, Callable[[str], str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        header_parsers = _canonical_keys(self.header_parsers)
        unknown = sorted(set(header_parsers) - OVERRIDABLE_HEADERS)
        if unknown:
            raise ValueError(f"no replaceable parser for header(s): {', '.join(unknown)}")
        extra_header_parsers = _canonical_keys(self.extra_header_parsers)
        explicit = sorted(set(extra_header_parsers) & EXPLICIT_HEADERS)
        if explicit:
            raise ValueError(f"not an extra header: {', '.join(explicit)}")
        object.__setattr__(self, "header_parsers", header_parsers)
        object.__setattr__(self, "extra_header_parsers", extra_header_parsers)

    @classmethod
    def from_settings(cls, settings: Settings) -> ParserOptions:
        store = build_blob_store(settings)
        consumer: FileConsumer = read_into_memory
        if store is not None:
            consumer = store_in_blob_store(store, key_prefix=settings.FILE_KEY_PREFIX)
        return cls(
            mode=settings.PROCESSING_MODE,
            file_consumer=consumer,
            emit_metrics=settings.ENABLE_PROMETHEUS_METRICS,
            log_events=settings.LOG_PARSE_EVENTS,
        )
