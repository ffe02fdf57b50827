from __future__ import annotations


class LettersError(ValueError):
    pass


class MalformedHeaderError(LettersError):
    pass


class MalformedMediaTypeError(LettersError):
    pass


class UnknownDispositionError(LettersError):
    pass


class UnknownTransferEncodingError(LettersError):
    pass


class MissingBoundaryError(LettersError):
    pass


class MalformedMultipartError(LettersError):
    pass


class ContentDecodeError(LettersError):
    pass


class UnknownContentTypeError(LettersError):
    def __init__(self, *, content_type: str, part_type: str | None = None) -> None:
        super().__init__(f"unknown Content-Type {content_type!r}")
        self.content_type = content_type
        self.part_type = part_type


class HeaderDecodeError(LettersError):
    def __init__(self, *, raw: str, reason: str) -> None:
        super().__init__(f"cannot decode MIME-word-encoded header {raw!r}: {reason}")
        self.raw = raw
        self.reason = reason


class HeaderFieldError(LettersError):
    def __init__(self, *, header: str, message: str) -> None:
        super().__init__(f"cannot parse {header} header: {message}")
        self.header = header


# Expected "no value" outcomes; field assembly catches these and leaves the
# field at its zero value.
class EmptyAddressError(LettersError):
    pass


class EmptyDateError(LettersError):
    pass
