"""
Configuration settings for ShopWatch.

Uses Pydantic Settings to load environment variables (or a `.env` file) for the
service switch, the caller allow-list, database connectivity, query timeout,
logging and the HTTP listener. Settings are read once per process; the allow-list
is validated and frozen into an immutable snapshot by `load_allow_list`.
"""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from shopwatch.domain.errors import ConfigurationError
from shopwatch.domain.models import AllowList, AllowListEntry


class Settings(BaseSettings):
    # Service
    enabled: bool = Field(False, alias="SHOPWATCH_ENABLED")
    allowed_hosts: List[Dict[str, Any]] = Field(
        default_factory=list, alias="SHOPWATCH_ALLOWED_HOSTS"
    )
    allowed_hosts_file: Optional[Path] = Field(None, alias="SHOPWATCH_ALLOWED_HOSTS_FILE")
    query_timeout_ms: int = Field(5_000, alias="SHOPWATCH_QUERY_TIMEOUT_MS", gt=0)
    trust_forwarded_headers: bool = Field(False, alias="SHOPWATCH_TRUST_FORWARDED_HEADERS")

    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD", repr=False)
    db_name: str = Field("shop", alias="DB_NAME")
    db_pool_min_size: int = Field(1, alias="DB_POOL_MIN_SIZE", ge=0)
    db_pool_max_size: int = Field(5, alias="DB_POOL_MAX_SIZE", ge=1)

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # HTTP
    http_host: str = Field("127.0.0.1", alias="HTTP_HOST")
    http_port: int = Field(8080, alias="HTTP_PORT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def dsn(self) -> str:
        return (
            f"postgresql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def query_timeout_seconds(self) -> float:
        return self.query_timeout_ms / 1000.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


def _read_hosts_file(path: Path) -> List[Dict[str, Any]]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read allowed hosts file {path}: {exc}") from exc
    if not isinstance(raw, list):
        raise ConfigurationError(f"Allowed hosts file {path} must contain a JSON list")
    return raw


def load_allow_list(settings: Optional[Settings] = None) -> AllowList:
    """
    Validate the configured hosts and freeze them into an AllowList snapshot.

    Entries from SHOPWATCH_ALLOWED_HOSTS come first, followed by entries from
    SHOPWATCH_ALLOWED_HOSTS_FILE.

    Raises
    ------
    ConfigurationError
        If any entry has an invalid address, credential or shape.
    """
    settings = settings or get_settings()
    raw_entries = list(settings.allowed_hosts)
    if settings.allowed_hosts_file is not None:
        raw_entries.extend(_read_hosts_file(settings.allowed_hosts_file))

    entries: List[AllowListEntry] = []
    for position, raw in enumerate(raw_entries):
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Allowed host #{position} must be an object")
        try:
            entries.append(AllowListEntry.model_validate(raw))
        except PydanticValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or 'entry'}: {err['msg']}"
                for err in exc.errors(include_input=False)
            )
            raise ConfigurationError(f"Allowed host #{position} is invalid: {problems}") from exc
    return AllowList(entries=tuple(entries))


__all__ = ["Settings", "get_settings", "load_allow_list"]
