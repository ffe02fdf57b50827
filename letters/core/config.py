from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from letters.models.enums import FileStoreKind, ProcessingMode


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LETTERS_", env_file=".env", extra="ignore")

    PROCESSING_MODE: ProcessingMode = ProcessingMode.full

    # Where inline and attached files go: kept in memory on File.data, or
    # streamed into a blob store and referenced by File.storage_key.
    FILE_STORE: FileStoreKind = FileStoreKind.memory
    FILE_KEY_PREFIX: str = "files"
    LOCAL_FILE_DIR: str = "var/files"

    S3_ENDPOINT_URL: str | None = None
    S3_ACCESS_KEY_ID: str = ""
    S3_SECRET_ACCESS_KEY: str = ""
    S3_BUCKET: str = "letters-files"

    ENABLE_PROMETHEUS_METRICS: bool = True
    LOG_PARSE_EVENTS: bool = True

    @field_validator("S3_ENDPOINT_URL", mode="before")
    @classmethod
    def _empty_endpoint_to_none(cls, v: object) -> object:
        if v == "":
            return None
        return v

    @field_validator("FILE_KEY_PREFIX")
    @classmethod
    def _strip_key_prefix(cls, v: str) -> str:
        return v.strip().strip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
