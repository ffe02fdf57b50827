from __future__ import annotations

from letters.services.mime.files import (  # noqa: F401
    FileConsumer,
    discard,
    extract_file,
    read_file_data,
    read_into_memory,
    store_in_blob_store,
)
from letters.services.mime.headers import decode_header  # noqa: F401
from letters.services.mime.options import ContentFilter, ParserOptions, accept_all, accept_none  # noqa: F401
from letters.services.mime.parser import Parser, parse_email  # noqa: F401
from letters.services.mime.types import Address, ContentInfo, Email, File, Headers  # noqa: F401
