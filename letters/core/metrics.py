from __future__ import annotations

from prometheus_client import Counter, Histogram

_MESSAGES_PARSED_TOTAL = Counter(
    "letters_messages_parsed_total",
    "Total messages handed to the parser.",
    labelnames=("outcome", "mode"),
)
_PARSE_DURATION_SECONDS = Histogram(
    "letters_parse_duration_seconds",
    "Message parse duration in seconds.",
    labelnames=("mode",),
)
_FILES_EXTRACTED_TOTAL = Counter(
    "letters_files_extracted_total",
    "Total inline and attached files extracted from messages.",
    labelnames=("disposition",),
)


def observe_parse(*, outcome: str, mode: str, duration_ms: int) -> None:
    safe_mode = mode or "unknown"
    _MESSAGES_PARSED_TOTAL.labels(outcome=outcome or "unknown", mode=safe_mode).inc()
    _PARSE_DURATION_SECONDS.labels(mode=safe_mode).observe(max(0.0, duration_ms / 1000.0))


def observe_file(*, disposition: str) -> None:
    _FILES_EXTRACTED_TOTAL.labels(disposition=disposition or "none").inc()
