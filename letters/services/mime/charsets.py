from __future__ import annotations

import codecs


def lookup_charset(label: str) -> codecs.CodecInfo | None:
    label = (label or "").strip().lower()
    if not label:
        return None
    try:
        info = codecs.lookup(label)
    except LookupError:
        return None
    # The codec registry also holds bytes-to-bytes transforms such as
    # "base64", "zlib" and "rot13"; those are not character sets.
    try:
        decoded = info.decode(b"")[0]
    except TypeError:
        return None
    if not isinstance(decoded, str):
        return None
    return info


def lookup_charset_lenient(label: str) -> codecs.CodecInfo | None:
    info = lookup_charset(label)
    if info is None and "windows-" in (label or "").lower():
        info = lookup_charset(label.lower().replace("windows-", "cp"))
    return info
