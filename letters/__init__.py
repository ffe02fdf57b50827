from __future__ import annotations

from letters.core.errors import (  # noqa: F401
    ContentDecodeError,
    HeaderDecodeError,
    HeaderFieldError,
    LettersError,
    MalformedHeaderError,
    MalformedMediaTypeError,
    MalformedMultipartError,
    MissingBoundaryError,
    UnknownContentTypeError,
    UnknownDispositionError,
    UnknownTransferEncodingError,
)
from letters.models.enums import Disposition, ProcessingMode, TransferEncoding  # noqa: F401
from letters.services.mime import (  # noqa: F401
    Address,
    ContentInfo,
    Email,
    File,
    Headers,
    Parser,
    ParserOptions,
    decode_header,
    discard,
    parse_email,
    read_file_data,
    read_into_memory,
    store_in_blob_store,
)
