from __future__ import annotations

import json
import logging
import time

logger = logging.getLogger("letters")


def log_parse_completion(
    *,
    outcome: str,
    mode: str,
    content_type: str | None,
    files: int,
    duration_ms: int,
    error: str | None = None,
) -> None:
    level = logging.INFO if outcome == "ok" else logging.WARNING
    logger.log(
        level,
        json.dumps(
            {
                "event": "letters.parse.completed",
                "outcome": outcome,
                "mode": mode,
                "content_type": content_type,
                "files": files,
                "duration_ms": duration_ms,
                "error": error,
            },
            separators=(",", ":"),
            sort_keys=True,
        ),
    )


def log_part_skipped(*, reason: str, content_type: str, name: str | None = None) -> None:
    logger.debug(
        json.dumps(
            {"event": "letters.part.skipped", "reason": reason, "content_type": content_type, "name": name},
            separators=(",", ":"),
            sort_keys=True,
        )
    )


def now_ms() -> int:
    return int(time.monotonic() * 1000)
