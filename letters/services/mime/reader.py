"""Single-pass readers for RFC 822 header blocks and multipart bodies.

Everything here reads line by line from a binary source. A part body must
be consumed before the next part can be read; `MultipartReader` drains
whatever a caller leaves behind before it advances.
"""

from __future__ import annotations

import functools
import io
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import BinaryIO, Protocol

from letters.core.errors import MalformedHeaderError, MalformedMultipartError, MissingBoundaryError

CHUNK_SIZE = 64 * 1024
_MAX_LINE = 64 * 1024


class LineSource(Protocol):
    def readline(self, size: int = -1, /) -> bytes: ...


def canonical_header_key(name: str) -> str:
    return "-".join(word[:1].upper() + word[1:].lower() for word in name.split("-"))


class HeaderMap:
    def __init__(self, items: Iterable[tuple[str, str]] = ()) -> None:
        self._values: dict[str, list[str]] = {}
        for name, value in items:
            self.add(name, value)

    def add(self, name: str, value: str) -> None:
        self._values.setdefault(canonical_header_key(name), []).append(value)

    def get(self, name: str, default: str = "") -> str:
        values = self._values.get(canonical_header_key(name))
        return values[0] if values else default

    def get_all(self, name: str) -> list[str]:
        return list(self._values.get(canonical_header_key(name), []))

    def items(self) -> Iterator[tuple[str, list[str]]]:
        for name, values in self._values.items():
            yield name, list(values)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and canonical_header_key(name) in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"HeaderMap({self._values!r})"


def _read_full_line(readline: Callable[[], bytes]) -> bytes:
    line = readline()
    while line and not line.endswith(b"\n"):
        more = readline()
        if not more:
            break
        line += more
    return line


def read_header_block(readline: Callable[[], bytes], *, require_headers: bool = False) -> HeaderMap:
    headers = HeaderMap()
    name: str | None = None
    value_parts: list[str] = []
    saw_line = False

    def flush() -> None:
        if name is not None:
            headers.add(name, " ".join(p for p in value_parts if p))

    while True:
        line = _read_full_line(readline)
        if not line:
            if require_headers and not saw_line:
                raise MalformedHeaderError("cannot read message: empty input")
            break
        saw_line = True
        stripped = line.rstrip(b"\r\n")
        if not stripped:
            break

        text = stripped.decode("utf-8", errors="replace")
        if text[0] in " \t":
            if name is None:
                raise MalformedHeaderError(f"malformed MIME header initial line: {text!r}")
            value_parts.append(text.strip())
            continue

        key, sep, value = text.partition(":")
        if not sep or not key or any(c.isspace() for c in key):
            raise MalformedHeaderError(f"malformed MIME header line: {text!r}")
        flush()
        name = key
        value_parts = [value.strip()]

    flush()
    return headers


def read_message(source: bytes | BinaryIO) -> tuple[HeaderMap, BinaryIO]:
    stream: BinaryIO = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    headers = read_header_block(stream.readline, require_headers=True)
    return headers, stream


def iter_chunks(stream: BinaryIO, size: int = CHUNK_SIZE) -> Iterator[bytes]:
    return iter(functools.partial(stream.read, size), b"")


def _strip_eol(line: bytes) -> bytes:
    if line.endswith(b"\r\n"):
        return line[:-2]
    if line.endswith(b"\n"):
        return line[:-1]
    return line


class PartBody:
    """The body of one part, ending just before the next delimiter line.

    One line is held back so the line break preceding the delimiter, which
    belongs to the delimiter, can be dropped.
    """

    def __init__(self, reader: MultipartReader) -> None:
        self._reader = reader
        self._held: bytes | None = None
        self._done = False

    def readline(self, size: int = -1, /) -> bytes:
        _ = size
        if self._done:
            return b""
        while True:
            line, at_line_start = self._reader._read_line()
            if not line:
                raise MalformedMultipartError("unexpected end of stream before closing boundary")
            if at_line_start and self._reader._match_delimiter(line):
                self._done = True
                held, self._held = self._held, None
                return _strip_eol(held) if held is not None else b""
            held, self._held = self._held, line
            if held is not None:
                return held

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.readline, b"")

    def drain(self) -> None:
        for _ in self:
            pass


@dataclass(frozen=True)
class Part:
    headers: HeaderMap
    body: PartBody


class MultipartReader:
    def __init__(self, source: LineSource, boundary: str) -> None:
        if not boundary:
            raise MissingBoundaryError("multipart body has no boundary parameter")
        self._source = source
        self._dash_boundary = b"--" + boundary.encode("utf-8")
        self._close_delimiter = self._dash_boundary + b"--"
        self._at_line_start = True
        self._closed = False

    def _read_line(self) -> tuple[bytes, bool]:
        at_line_start = self._at_line_start
        line = self._source.readline(_MAX_LINE)
        self._at_line_start = line.endswith(b"\n")
        return line, at_line_start

    def _match_delimiter(self, line: bytes) -> bool:
        if not line.startswith(self._dash_boundary):
            return False
        # Transport padding after the boundary is allowed.
        stripped = line.rstrip(b" \t\r\n")
        if stripped == self._close_delimiter:
            self._closed = True
            return True
        return stripped == self._dash_boundary

    def _skip_preamble(self) -> None:
        while True:
            line, at_line_start = self._read_line()
            if not line:
                raise MalformedMultipartError(
                    f"no boundary {self._dash_boundary.decode('utf-8', 'replace')!r} found"
                )
            if at_line_start and self._match_delimiter(line):
                return

    def parts(self) -> Iterator[Part]:
        self._skip_preamble()
        while not self._closed:
            headers = read_header_block(lambda: self._read_line()[0])
            if not self._at_line_start:
                raise MalformedMultipartError("unexpected end of stream in part headers")
            part = Part(headers=headers, body=PartBody(self))
            yield part
            part.body.drain()

    def __iter__(self) -> Iterator[Part]:
        return self.parts()
