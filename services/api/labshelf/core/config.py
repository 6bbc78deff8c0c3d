from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from labshelf.domain.normalize import IsbnFallback
from labshelf.services.merge import MergePolicy

# services/api/labshelf/core/config.py -> BASE_DIR == services/api
BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        extra="ignore",
        env_prefix="",
        case_sensitive=False,
    )

    # Environment
    env: str = Field(default="dev", validation_alias="ENV")

    # Application
    api_name: str = Field(default="labshelf-api", validation_alias="API_NAME")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    user_agent: str = Field(default="labshelf/0.1", validation_alias="USER_AGENT")

    # Storage
    database_url: str = Field(
        default="sqlite+pysqlite:///./labshelf.db",
        validation_alias="DATABASE_URL",
    )
    catalog_storage_key: str = Field(
        default="books.catalog", validation_alias="CATALOG_STORAGE_KEY"
    )
    columns_storage_key: str = Field(
        default="books.columns", validation_alias="COLUMNS_STORAGE_KEY"
    )

    # CSV import / export
    merge_policy: MergePolicy = Field(
        default=MergePolicy.FILL_BLANKS, validation_alias="MERGE_POLICY"
    )
    isbn_fallback: IsbnFallback = Field(
        default=IsbnFallback.KEEP, validation_alias="ISBN_FALLBACK"
    )
    export_filename_prefix: str = Field(
        default="Books", validation_alias="EXPORT_FILENAME_PREFIX"
    )

    @field_validator("merge_policy", mode="before")
    @classmethod
    def normalize_merge_policy(cls, v: Any) -> MergePolicy:
        if v is None:
            return MergePolicy.FILL_BLANKS
        if isinstance(v, MergePolicy):
            return v
        if not isinstance(v, str):
            raise TypeError("MERGE_POLICY must be a string")
        s = v.strip().lower().replace("-", "_")
        try:
            return MergePolicy(s)
        except ValueError:
            raise ValueError("MERGE_POLICY must be one of: fill_blanks, overwrite")

    @field_validator("isbn_fallback", mode="before")
    @classmethod
    def normalize_isbn_fallback(cls, v: Any) -> IsbnFallback:
        if v is None:
            return IsbnFallback.KEEP
        if isinstance(v, IsbnFallback):
            return v
        if not isinstance(v, str):
            raise TypeError("ISBN_FALLBACK must be a string")
        s = v.strip().lower()
        try:
            return IsbnFallback(s)
        except ValueError:
            raise ValueError("ISBN_FALLBACK must be one of: keep, discard")

    # Bibliographic lookups
    lookup_timeout_secs: float = Field(
        default=8.0, validation_alias="LOOKUP_TIMEOUT_SECS"
    )
    openbd_base_url: str = Field(
        default="https://api.openbd.jp/v1/get", validation_alias="OPENBD_BASE_URL"
    )
    google_books_base_url: str = Field(
        default="https://www.googleapis.com/books/v1/volumes",
        validation_alias="GOOGLE_BOOKS_BASE_URL",
    )
    google_books_api_key: str | None = Field(
        default=None, validation_alias="GOOGLE_BOOKS_API_KEY"
    )

    # CORS
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        validation_alias="CORS_ORIGINS",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """
        Supported env formats:
          - JSON list: '["http://localhost:5173"]'
          - Bracket list (no quotes): '[http://localhost:5173, http://127.0.0.1:5173]'
          - Comma-separated: 'http://localhost:5173, http://127.0.0.1:5173'
          - '*' wildcard
        """
        if v is None:
            return []
        if isinstance(v, list):
            return [str(x).strip() for x in v if str(x).strip()]
        if not isinstance(v, str):
            raise TypeError("cors_origins must be a string or list of strings")

        s = v.strip()
        if not s:
            return []
        if s == "*":
            return ["*"]

        if s.startswith("[") and s.endswith("]"):
            try:
                parsed = json.loads(s)
                if isinstance(parsed, list):
                    return [str(x).strip() for x in parsed if str(x).strip()]
            except json.JSONDecodeError:
                inner = s[1:-1].strip()
                if not inner:
                    return []
                parts = [p.strip().strip('"').strip("'") for p in inner.split(",")]
                return [p for p in parts if p]

        parts = [p.strip() for p in s.split(",")]
        return [p for p in parts if p]

    # OpenTelemetry
    otel_enabled: bool = Field(default=False, validation_alias="OTEL_ENABLED")
    otel_otlp_endpoint: str = Field(
        default="http://localhost:4318/v1/traces",
        validation_alias="OTEL_OTLP_ENDPOINT",
    )


settings = Settings()
