from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from email.utils import getaddresses, parsedate_to_datetime
from typing import TYPE_CHECKING, TypeVar

from letters.core.errors import (
    EmptyAddressError,
    EmptyDateError,
    HeaderDecodeError,
    HeaderFieldError,
    LettersError,
)
from letters.services.mime.headers import decode_header
from letters.services.mime.reader import HeaderMap
from letters.services.mime.types import Address, ContentInfo, Headers

if TYPE_CHECKING:
    from letters.services.mime.options import ParserOptions

T = TypeVar("T")

# Headers with a field of their own on Headers; everything else lands in
# Headers.extra_headers.
EXPLICIT_HEADERS = frozenset(
    {
        "Date",
        "Sender",
        "From",
        "Reply-To",
        "To",
        "Cc",
        "Bcc",
        "Message-Id",
        "In-Reply-To",
        "References",
        "Received",
        "Subject",
        "Comments",
        "Keywords",
        "Resent-Date",
        "Resent-From",
        "Resent-Sender",
        "Resent-To",
        "Resent-Cc",
        "Resent-Bcc",
        "Resent-Message-Id",
        "Content-Transfer-Encoding",
        "Content-Type",
        "Content-Disposition",
    }
)

_ID_TRIM = "<> \r\n\t"

# Headers whose parsing can be replaced through ParserOptions.header_parsers.
# Address and date parsers stand in for address_func, address_list_func and
# date_func on their header; the others receive the raw header value.
OVERRIDABLE_HEADERS = EXPLICIT_HEADERS - {
    "Content-Transfer-Encoding",
    "Content-Type",
    "Content-Disposition",
}


def parse_address_list(value: str) -> list[Address]:
    out: list[Address] = []
    for name, addr in getaddresses([value]):
        addr = (addr or "").strip()
        if addr:
            out.append(Address(name=(name or "").strip(), address=addr))
    return out


def parse_address(value: str) -> Address:
    addresses = parse_address_list(value)
    if len(addresses) != 1:
        raise ValueError(f"expected a single address, found {len(addresses)} in {value!r}")
    return addresses[0]


def parse_date(value: str) -> datetime:
    dt = parsedate_to_datetime(value)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def _call(header: str, func: Callable[[str], T], value: str) -> T:
    try:
        return func(value)
    except LettersError as e:
        e.add_note(f"while parsing {header} header")
        raise
    except (ValueError, TypeError) as e:
        raise HeaderFieldError(header=header, message=str(e)) from e


def _decode_address_value(header: str, value: str) -> str:
    value = value.strip()
    if not value:
        raise EmptyAddressError(header)
    return _call(header, functools.partial(decode_header, quote_specials=True), value)


def _address(header_map: HeaderMap, header: str, func: Callable[[str], Address]) -> Address | None:
    try:
        decoded = _decode_address_value(header, header_map.get(header))
    except EmptyAddressError:
        return None
    return _call(header, func, decoded)


def _addresses(
    header_map: HeaderMap, header: str, func: Callable[[str], list[Address]]
) -> tuple[Address, ...]:
    try:
        decoded = _decode_address_value(header, header_map.get(header))
    except EmptyAddressError:
        return ()
    return tuple(_call(header, func, decoded))


def _date_value(header_map: HeaderMap, header: str) -> str:
    value = header_map.get(header).strip()
    if not value:
        raise EmptyDateError(header)
    return value


def _date(header_map: HeaderMap, header: str, func: Callable[[str], datetime]) -> datetime | None:
    try:
        value = _date_value(header_map, header)
    except EmptyDateError:
        return None
    return _call(header, func, value)


def _text(header_map: HeaderMap, header: str) -> str:
    return _call(header, decode_header, header_map.get(header).strip()).strip()


def _message_id(header_map: HeaderMap, header: str) -> str:
    return header_map.get(header).strip(_ID_TRIM)


def _message_ids(header_map: HeaderMap, header: str) -> tuple[str, ...]:
    ids = (token.strip(_ID_TRIM) for token in header_map.get(header).split())
    return tuple(i for i in ids if i)


def _received(header_map: HeaderMap, header: str) -> tuple[str, ...]:
    return tuple(header_map.get_all(header))


def _keywords(header_map: HeaderMap, header: str) -> tuple[str, ...]:
    keywords = (
        _call(header, decode_header, kw.strip()).strip()
        for kw in header_map.get(header).split(",")
    )
    return tuple(kw for kw in keywords if kw)


def _extra_headers(
    header_map: HeaderMap, parsers: Mapping[str, Callable[[str], str]]
) -> dict[str, list[str]]:
    extra: dict[str, list[str]] = {}
    for name, values in header_map.items():
        if name in EXPLICIT_HEADERS:
            continue
        parser = parsers.get(name)
        decoded: list[str] = []
        for value in values:
            if parser is not None:
                decoded.append(_call(name, parser, value))
                continue
            try:
                decoded.append(decode_header(value))
            except HeaderDecodeError:
                decoded.append(value)
        extra[name] = decoded
    return extra


def assemble_headers(
    header_map: HeaderMap, content_info: ContentInfo | None, options: ParserOptions
) -> Headers:
    overrides = options.header_parsers

    def address(header: str) -> Address | None:
        return _address(header_map, header, overrides.get(header, options.address_func))

    def addresses(header: str) -> tuple[Address, ...]:
        return _addresses(header_map, header, overrides.get(header, options.address_list_func))

    def date(header: str) -> datetime | None:
        return _date(header_map, header, overrides.get(header, options.date_func))

    def other(header: str, default: Callable[[HeaderMap, str], T]) -> T:
        parser = overrides.get(header)
        if parser is None:
            return default(header_map, header)
        return _call(header, parser, header_map.get(header))

    return Headers(
        date=date("Date"),
        sender=address("Sender"),
        from_=addresses("From"),
        reply_to=addresses("Reply-To"),
        to=addresses("To"),
        cc=addresses("Cc"),
        bcc=addresses("Bcc"),
        message_id=other("Message-Id", _message_id),
        in_reply_to=other("In-Reply-To", _message_ids),
        references=other("References", _message_ids),
        received=other("Received", _received),
        subject=other("Subject", _text),
        comments=other("Comments", _text),
        keywords=other("Keywords", _keywords),
        resent_date=date("Resent-Date"),
        resent_from=addresses("Resent-From"),
        resent_sender=address("Resent-Sender"),
        resent_to=addresses("Resent-To"),
        resent_cc=addresses("Resent-Cc"),
        resent_bcc=addresses("Resent-Bcc"),
        resent_message_id=other("Resent-Message-Id", _message_id),
        content_info=content_info,
        extra_headers=_extra_headers(header_map, options.extra_header_parsers),
    )
