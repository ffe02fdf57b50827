from __future__ import annotations

import base64
import binascii
import codecs
import re

from letters.core.errors import HeaderDecodeError
from letters.services.mime.charsets import lookup_charset_lenient

# Encoded text may carry spaces; a Q word decodes them literally and a B
# word rejects them.
_ENCODED_WORD_RE = re.compile(r"=\?([^?\s]*)\?([^?\s]*)\?([^?]*)\?=")
# Anything of this shape left between decoded words is a malformed word.
_WORD_SHAPE_RE = re.compile(r"=\?[^?]*\?[^?]*\?[^?]*\?=")
# RFC 5322 specials; a decoded phrase holding one must be quoted before it
# goes back into an address list.
_ADDRESS_SPECIALS_RE = re.compile(r'[()<>\[\]:;@\\,."]')


def _decode_word(raw: str, charset: str, encoding: str, text: str) -> tuple[codecs.CodecInfo, bytes]:
    # RFC 2231 allows a language suffix: =?utf-8*en?Q?...?=
    label = charset.split("*", 1)[0]
    if not label:
        raise HeaderDecodeError(raw=raw, reason="empty charset")
    info = lookup_charset_lenient(label)
    if info is None:
        raise HeaderDecodeError(raw=raw, reason=f"encoding lookup failed {label}")

    try:
        encoded = text.encode("ascii")
    except UnicodeEncodeError:
        raise HeaderDecodeError(raw=raw, reason="non-ASCII encoded text") from None

    encoding = encoding.upper()
    if encoding == "B":
        try:
            return info, base64.b64decode(encoded + b"=" * (-len(encoded) % 4), validate=True)
        except binascii.Error as e:
            raise HeaderDecodeError(raw=raw, reason=f"illegal base64 data: {e}") from e
    if encoding == "Q":
        return info, binascii.a2b_qp(encoded, header=True)
    raise HeaderDecodeError(raw=raw, reason=f"invalid RFC 2047 encoding {encoding!r}")


def _literal(raw: str, text: str) -> str:
    if _WORD_SHAPE_RE.search(text):
        raise HeaderDecodeError(raw=raw, reason="malformed encoded-word")
    return text


def _quote_phrase(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def decode_header(raw: str, *, quote_specials: bool = False) -> str:
    """Decode the RFC 2047 encoded-words in a header value.

    With quote_specials, a decoded run containing address specials (a comma
    in a display name, say) is emitted as a quoted string, so the result
    still splits correctly as an address list.
    """
    if "=?" not in raw:
        return raw

    out: list[str] = []
    run = bytearray()
    run_info: codecs.CodecInfo | None = None
    pos = 0

    def flush() -> None:
        nonlocal run_info
        if run_info is not None:
            text = run_info.decode(bytes(run), "replace")[0]
            in_quotes = "".join(out).count('"') % 2 == 1
            if quote_specials and not in_quotes and _ADDRESS_SPECIALS_RE.search(text):
                text = _quote_phrase(text)
            out.append(text)
            run.clear()
            run_info = None

    for m in _ENCODED_WORD_RE.finditer(raw):
        gap = _literal(raw, raw[pos : m.start()])
        info, decoded = _decode_word(raw, *m.groups())
        # Whitespace between adjacent encoded-words is folding, not content.
        if gap and (run_info is None or gap.strip()):
            flush()
            out.append(gap)
        if run_info is not None and run_info.name != info.name:
            flush()
        run_info = info
        run.extend(decoded)
        pos = m.end()

    flush()
    out.append(_literal(raw, raw[pos:]))
    return "".join(out)
