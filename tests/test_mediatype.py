from __future__ import annotations

import pytest

from letters.core.errors import MalformedMediaTypeError
from letters.services.mime.mediatype import parse_media_type


def test_parse_media_type_lowercases_type_and_parameter_names() -> None:
    media_type, params = parse_media_type('Text/HTML; CharSet="UTF-8"; format=flowed')
    assert media_type == "text/html"
    assert params == {"charset": "UTF-8", "format": "flowed"}


def test_parse_media_type_accepts_a_bare_disposition() -> None:
    assert parse_media_type("attachment; filename=x.txt") == ("attachment", {"filename": "x.txt"})


def test_parse_media_type_unescapes_quoted_strings() -> None:
    _, params = parse_media_type(r'attachment; filename="a \"b\".txt"')
    assert params["filename"] == 'a "b".txt'


def test_parse_media_type_keeps_quoted_path_separators() -> None:
    _, params = parse_media_type('attachment; filename="/etc/ssh/sshd_config"')
    assert params["filename"] == "/etc/ssh/sshd_config"


def test_parse_media_type_tolerates_trailing_semicolon() -> None:
    assert parse_media_type("text/plain;") == ("text/plain", {})


def test_parse_media_type_decodes_extended_parameter() -> None:
    _, params = parse_media_type("attachment; filename*=utf-8''na%C3%AFve.txt")
    assert params == {"filename": "naïve.txt"}


def test_parse_media_type_stitches_continuations() -> None:
    _, params = parse_media_type('attachment; filename*0="long"; filename*1="name.txt"')
    assert params == {"filename": "longname.txt"}


def test_parse_media_type_stitches_extended_continuations() -> None:
    _, params = parse_media_type("attachment; filename*0*=utf-8''caf%C3%A9; filename*1*=%20menu.txt")
    assert params == {"filename": "café menu.txt"}


def test_parse_media_type_rejects_duplicate_parameters() -> None:
    with pytest.raises(MalformedMediaTypeError, match="duplicate"):
        parse_media_type("text/plain; charset=utf-8; charset=latin1")


@pytest.mark.parametrize(
    "value",
    ["", "/plain", "text/", "text/plain/extra", "text/plain; charset", 'text/plain; name="unterminated'],
)
def test_parse_media_type_rejects_malformed_values(value: str) -> None:
    with pytest.raises(MalformedMediaTypeError):
        parse_media_type(value)
