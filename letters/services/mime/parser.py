from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import Any, BinaryIO

from letters.core.errors import LettersError, MalformedMultipartError, UnknownContentTypeError
from letters.core.logs import log_parse_completion, log_part_skipped, now_ms
from letters.core.metrics import observe_file, observe_parse
from letters.models.enums import Disposition, ProcessingMode
from letters.services.mime.content import extract_content_info
from letters.services.mime.decoders import decode_content
from letters.services.mime.fields import assemble_headers
from letters.services.mime.files import extract_file
from letters.services.mime.options import ParserOptions
from letters.services.mime.reader import LineSource, MultipartReader, Part, iter_chunks, read_message
from letters.services.mime.types import ContentInfo, Email, File

# Multipart bodies nested deeper than this are rejected.
MAX_MULTIPART_DEPTH = 100


@dataclass
class _ParseState:
    text: str = ""
    enriched_text: str = ""
    html: str = ""
    files: list[File] = field(default_factory=list)


class Parser:
    def __init__(self, options: ParserOptions | None = None) -> None:
        self.options = options or ParserOptions()

    def parse(self, source: bytes | BinaryIO) -> Email:
        started = now_ms()
        try:
            email = self._parse(source)
        except Exception as e:
            self._record(outcome="error", started=started, content_type=None, files=0, error=f"{type(e).__name__}: {e}")
            raise
        content_info = email.headers.content_info
        self._record(
            outcome="ok",
            started=started,
            content_type=content_info.type if content_info else None,
            files=len(email.files),
        )
        return email

    def _record(
        self, *, outcome: str, started: int, content_type: str | None, files: int, error: str | None = None
    ) -> None:
        duration_ms = now_ms() - started
        if self.options.emit_metrics:
            observe_parse(outcome=outcome, mode=self.options.mode, duration_ms=duration_ms)
        if self.options.log_events:
            log_parse_completion(
                outcome=outcome,
                mode=self.options.mode,
                content_type=content_type,
                files=files,
                duration_ms=duration_ms,
                error=error,
            )

    def _parse(self, source: bytes | BinaryIO) -> Email:
        header_map, stream = read_message(source)
        content_info = extract_content_info(header_map)
        headers = assemble_headers(header_map, content_info, self.options)
        state = _ParseState()
        if self.options.mode == ProcessingMode.headers_only:
            return Email(headers=headers, text="", enriched_text="", html="", files=())

        if content_info.type in _TEXT_FIELDS:
            self._parse_text(iter_chunks(stream), content_info, state)
        elif content_info.is_multipart:
            self._parse_parts(stream, content_info, state, depth=1)
        else:
            disposition = Disposition.inline if content_info.disposition == Disposition.inline else Disposition.attachment
            self._parse_classified_file(iter_chunks(stream), content_info, disposition, state)

        return Email(
            headers=headers,
            text=state.text,
            enriched_text=state.enriched_text,
            html=state.html,
            files=tuple(state.files),
        )

    def _parse_parts(self, source: LineSource, parent: ContentInfo, state: _ParseState, *, depth: int) -> None:
        if depth > MAX_MULTIPART_DEPTH:
            raise MalformedMultipartError(f"multipart nesting too deep (limit {MAX_MULTIPART_DEPTH})")
        for index, part in enumerate(MultipartReader(source, parent.boundary)):
            try:
                self._parse_part(part, parent, state, depth=depth)
            except LettersError as e:
                e.add_note(f"in part {index} of {parent.type}")
                raise

    def _parse_part(self, part: Part, parent: ContentInfo, state: _ParseState, *, depth: int) -> None:
        content_info = extract_content_info(part.headers, parent)

        # An explicit attachment wins over type routing, even for text/plain,
        # and is extracted in every processing mode.
        if content_info.disposition == Disposition.attachment:
            self._parse_file(part.body, content_info, Disposition.attachment, state)
        elif content_info.type in _TEXT_FIELDS:
            self._parse_text(part.body, content_info, state)
        elif content_info.is_multipart:
            self._parse_parts(part.body, content_info, state, depth=depth + 1)
        elif content_info.is_inline_file(parent):
            self._parse_classified_file(part.body, content_info, Disposition.inline, state)
        elif content_info.is_attached_file(parent):
            self._parse_classified_file(part.body, content_info, Disposition.attachment, state)
        else:
            # Reports the enclosing multipart type; the leaf's own type rides
            # along as part_type.
            raise UnknownContentTypeError(content_type=parent.type, part_type=content_info.type)

    def _parse_text(self, chunks: Iterable[bytes], content_info: ContentInfo, state: _ParseState) -> None:
        if not self.options.body_filter(content_info):
            log_part_skipped(reason="body_filter", content_type=content_info.type)
            return
        data = b"".join(decode_content(chunks, content_info))
        text = data.decode("utf-8", errors="replace").replace("\r\n", "\n").strip()

        name = _TEXT_FIELDS[content_info.type]
        if name == "text" and state.text:
            state.text += "\n\n"
        setattr(state, name, getattr(state, name) + text)

    def _parse_classified_file(
        self, chunks: Iterable[bytes], content_info: ContentInfo, disposition: Disposition, state: _ParseState
    ) -> None:
        if self.options.mode == ProcessingMode.skip_attachments:
            log_part_skipped(reason="skip_attachments", content_type=content_info.type)
            return
        self._parse_file(chunks, content_info, disposition, state)

    def _parse_file(
        self, chunks: Iterable[bytes], content_info: ContentInfo, disposition: Disposition, state: _ParseState
    ) -> None:
        if not self.options.file_filter(content_info):
            log_part_skipped(reason="file_filter", content_type=content_info.type)
            return
        file = extract_file(
            chunks,
            content_info,
            disposition=disposition,
            index=len(state.files),
            consumer=self.options.file_consumer,
        )
        state.files.append(file)
        if self.options.emit_metrics:
            observe_file(disposition=file.disposition)


_TEXT_FIELDS = {
    "text/plain": "text",
    "text/enriched": "enriched_text",
    "text/html": "html",
}


def parse_email(source: bytes | BinaryIO, options: ParserOptions | None = None, **overrides: Any) -> Email:
    options = options or ParserOptions()
    if overrides:
        options = replace(options, **overrides)
    return Parser(options).parse(source)
