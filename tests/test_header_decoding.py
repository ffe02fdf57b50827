from __future__ import annotations

import pytest

from letters.core.errors import HeaderDecodeError
from letters.services.mime.charsets import lookup_charset, lookup_charset_lenient
from letters.services.mime.headers import decode_header


def test_decode_header_q_encoding() -> None:
    assert decode_header("=?utf-8?Q?Andreas_Birkeb=C3=A6k?=") == "Andreas Birkebæk"


def test_decode_header_b_encoding() -> None:
    assert decode_header("=?UTF-8?B?QmrDtnJr?=") == "Björk"


def test_decode_header_without_encoded_words_is_unchanged() -> None:
    raw = "Some One <someone@example.com>"
    assert decode_header(raw) == raw


def test_decode_header_keeps_surrounding_text() -> None:
    assert decode_header("Re: =?iso-8859-1?Q?caf=E9?= menu") == "Re: café menu"


def test_decode_header_drops_whitespace_between_adjacent_words() -> None:
    raw = "=?utf-8?Q?Andreas_?=\r\n =?utf-8?Q?Birkeb=C3=A6k?="
    assert decode_header(raw) == "Andreas Birkebæk"


def test_decode_header_joins_bytes_split_across_words() -> None:
    assert decode_header("=?utf-8?Q?Birkeb=C3?= =?utf-8?Q?=A6k?=") == "Birkebæk"


def test_decode_header_mixed_charsets() -> None:
    assert decode_header("=?iso-8859-1?Q?caf=E9?= =?utf-8?Q?_na=C3=AFve?=") == "café naïve"


def test_decode_header_ignores_language_suffix() -> None:
    assert decode_header("=?utf-8*en?Q?hello?=") == "hello"


def test_decode_header_retries_windows_labels_as_code_pages() -> None:
    assert lookup_charset("windows-437") is None
    assert lookup_charset_lenient("windows-437").name == "cp437"
    assert decode_header("=?windows-437?Q?=82?=") == "é"


def test_lookup_charset_rejects_byte_transforms() -> None:
    assert lookup_charset("base64") is None
    assert lookup_charset("") is None


@pytest.mark.parametrize(
    "raw",
    [
        "=?utf-8?X?abc?=",
        "=?no-such-charset?Q?abc?=",
        "=??Q?abc?=",
        "=?utf-8?B?!!!!?=",
        "Subject =?utf-8?Q?caf=C3=A9?= and =?utf-8?Z?x?=",
        "=?utf 8?Q?x?=",
        "=?utf-8?B?QmrD tnJr?=",
    ],
)
def test_decode_header_rejects_malformed_words(raw: str) -> None:
    with pytest.raises(HeaderDecodeError) as exc:
        decode_header(raw)
    assert exc.value.raw == raw


def test_decode_header_q_word_keeps_literal_spaces() -> None:
    assert decode_header("=?utf-8?Q?caf=C3=A9 noir?=") == "café noir"
    assert decode_header("Re: =?utf-8?Q?caf=C3=A9 noir?= menu") == "Re: café noir menu"


def test_decode_header_quotes_specials_for_address_lists() -> None:
    raw = "=?utf-8?Q?Doe=2C_John?= <john@example.com>"
    assert decode_header(raw) == "Doe, John <john@example.com>"
    assert decode_header(raw, quote_specials=True) == '"Doe, John" <john@example.com>'


def test_decode_header_escapes_quotes_inside_quoted_phrase() -> None:
    raw = "=?utf-8?Q?=22Big=22_Al=2C_Jr?= <al@example.com>"
    assert decode_header(raw, quote_specials=True) == '"\\"Big\\" Al, Jr" <al@example.com>'


def test_decode_header_leaves_already_quoted_words_alone() -> None:
    raw = '"=?utf-8?Q?Doe=2C_John?=" <john@example.com>'
    assert decode_header(raw, quote_specials=True) == '"Doe, John" <john@example.com>'
