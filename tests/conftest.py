from __future__ import annotations

import os

import pytest

from letters.core.config import get_settings


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch) -> None:
    # Settings are cached per process; a developer's LETTERS_* env must not leak in.
    for name in list(os.environ):
        if name.startswith("LETTERS_"):
            monkeypatch.delenv(name)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
