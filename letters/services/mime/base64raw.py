"""Translate padded, line-wrapped base64 into the unpadded raw form.

The filter works chunk by chunk so it can sit in front of a streaming
decoder without ever holding a whole attachment in memory.
"""

from __future__ import annotations

import io
from collections.abc import Iterable, Iterator

_DROPPED = b"\r\n="


def normalize_base64(chunks: Iterable[bytes]) -> Iterator[bytes]:
    for chunk in chunks:
        kept = chunk.translate(None, _DROPPED)
        # A chunk made only of line breaks or padding is skipped rather than
        # yielded empty: consumers treat an empty read as end of stream.
        if kept:
            yield kept


class Base64ToRaw(io.RawIOBase):
    def __init__(self, raw: io.RawIOBase | io.BufferedIOBase, *, chunk_size: int = 8192) -> None:
        self._chunks = normalize_base64(iter(lambda: raw.read(chunk_size), b""))
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[override]
        if not self._pending:
            self._pending = next(self._chunks, b"")
        n = min(len(buffer), len(self._pending))
        buffer[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n
