"""RFC 2045 media-type grammar, shared by Content-Type and Content-Disposition.

    value     := token ["/" token] *(";" parameter)
    parameter := attribute "=" (token / quoted-string)

Extended (RFC 2231) parameters such as ``filename*=utf-8''na%C3%AFve.txt``
and continuations such as ``name*0``/``name*1*`` are decoded and folded
back into the plain parameter name.
"""

from __future__ import annotations

import re
from urllib.parse import unquote_to_bytes

from letters.core.errors import MalformedMediaTypeError
from letters.services.mime.charsets import lookup_charset

_TSPECIALS = frozenset('()<>@,;:\\"/[]?=')
_CONTINUATION_RE = re.compile(r"^(?P<base>[^*]+)\*(?P<index>\d+)(?P<ext>\*)?$")


def _is_token_char(c: str) -> bool:
    return " " < c < "\x7f" and c not in _TSPECIALS


def _consume_token(v: str) -> tuple[str, str]:
    i = 0
    while i < len(v) and _is_token_char(v[i]):
        i += 1
    return v[:i], v[i:]


def _consume_value(v: str) -> tuple[str, str] | None:
    if not v:
        return None
    if v[0] != '"':
        token, rest = _consume_token(v)
        return (token, rest) if token else None

    buf: list[str] = []
    i = 1
    while i < len(v):
        c = v[i]
        if c == '"':
            return "".join(buf), v[i + 1 :]
        # Unescaped backslashes are kept: some clients send raw Windows paths.
        if c == "\\" and i + 1 < len(v) and v[i + 1] in _TSPECIALS:
            buf.append(v[i + 1])
            i += 2
            continue
        if c in "\r\n":
            return None
        buf.append(c)
        i += 1
    return None


def _consume_param(v: str) -> tuple[str, str, str] | None:
    rest = v.lstrip()
    if not rest.startswith(";"):
        return None
    rest = rest[1:].lstrip()
    name, rest = _consume_token(rest)
    if not name:
        return None
    rest = rest.lstrip()
    if not rest.startswith("="):
        return None
    consumed = _consume_value(rest[1:].lstrip())
    if consumed is None:
        return None
    value, rest = consumed
    return name.lower(), value, rest


def _check_media_type(media_type: str) -> None:
    if not media_type:
        raise MalformedMediaTypeError("no media type")
    major, rest = _consume_token(media_type)
    if not major:
        raise MalformedMediaTypeError(f"expected token in media type {media_type!r}")
    if not rest:
        return
    if not rest.startswith("/"):
        raise MalformedMediaTypeError(f"expected slash after first token in {media_type!r}")
    minor, rest = _consume_token(rest[1:])
    if not minor:
        raise MalformedMediaTypeError(f"expected token after slash in {media_type!r}")
    if rest:
        raise MalformedMediaTypeError(f"unexpected content after media subtype in {media_type!r}")


def _decode_rfc2231(value: str) -> str | None:
    parts = value.split("'", 2)
    if len(parts) != 3 or not parts[0]:
        return None
    info = lookup_charset(parts[0])
    if info is None:
        return None
    try:
        return info.decode(unquote_to_bytes(parts[2]), "strict")[0]
    except UnicodeDecodeError:
        return None


def _stitch_extended(params: dict[str, str], extended: dict[str, dict[str, str]]) -> None:
    for base, pieces in extended.items():
        single = pieces.get(f"{base}*")
        if single is not None:
            decoded = _decode_rfc2231(single)
            if decoded is not None:
                params[base] = decoded
            continue

        indexed: dict[int, tuple[str, bool]] = {}
        for key, value in pieces.items():
            m = _CONTINUATION_RE.match(key)
            if m:
                indexed[int(m.group("index"))] = (value, bool(m.group("ext")))

        out: list[str] = []
        n = 0
        while n in indexed:
            value, is_ext = indexed[n]
            if not is_ext:
                out.append(value)
            elif n == 0:
                out.append(_decode_rfc2231(value) or "")
            else:
                out.append(unquote_to_bytes(value).decode("utf-8", errors="replace"))
            n += 1
        if n:
            params[base] = "".join(out)


def parse_media_type(value: str) -> tuple[str, dict[str, str]]:
    base, _, _ = value.partition(";")
    media_type = base.strip().lower()
    _check_media_type(media_type)

    params: dict[str, str] = {}
    extended: dict[str, dict[str, str]] = {}
    rest = value[len(base) :]
    while rest:
        rest = rest.lstrip()
        if not rest:
            break
        consumed = _consume_param(rest)
        if consumed is None:
            if rest.strip() == ";":
                break
            raise MalformedMediaTypeError(f"invalid media parameter in {value!r}")
        name, param_value, rest = consumed

        target = params
        if "*" in name:
            target = extended.setdefault(name.split("*", 1)[0], {})
        if name in target and target[name] != param_value:
            raise MalformedMediaTypeError(f"duplicate parameter name {name!r} in {value!r}")
        target[name] = param_value

    _stitch_extended(params, extended)
    return media_type, params
