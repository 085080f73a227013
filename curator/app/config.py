from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_SERVER_URL = "http://localhost:8080"
CONFIG_FILE_ENV = "CURATOR_CONFIG_FILE"
DEFAULT_CONFIG_FILE = Path("~/.config/curator/config.yaml")


def _resolve_path(value: str | Path) -> Path:
    return Path(value).expanduser().resolve()


def _parse_bool_with_default(value: Any, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value == 1:
            return True
        if value == 0:
            return False
        return default
    if not isinstance(value, str):
        return default

    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _normalize_optional_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    normalized = value.strip()
    if normalized:
        return normalized
    return None


def resolve_config_file() -> Path:
    override = _normalize_optional_text(os.environ.get(CONFIG_FILE_ENV))
    if override is not None:
        return _resolve_path(override)
    return _resolve_path(DEFAULT_CONFIG_FILE)


class AppSettings(BaseSettings):
    """
    Runtime configuration for the curator client.

    Values come from (highest precedence first) explicit init arguments,
    `CURATOR_*` environment variables, a `.env` file and finally the YAML
    config file (`~/.config/curator/config.yaml` or `$CURATOR_CONFIG_FILE`).
    """

    model_config = SettingsConfigDict(
        env_prefix="CURATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Remote service.
    server_url: str = Field(
        default=DEFAULT_SERVER_URL,
        description="Base URL of the content-tracking server. Trailing slashes are dropped.",
    )
    http_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=300,
        description="Timeout applied to every request against the server or fetched pages.",
    )
    user_agent: str = Field(
        default="curator-client/0.1",
        description="User-Agent header sent with every request.",
    )
    tags_page_size: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Page size used when walking the `/tags` catalog.",
    )

    # Presentation.
    content_preview_chars: int = Field(
        default=1000,
        ge=0,
        description="Characters of markdown printed by `curator content` (0 disables truncation).",
    )

    # Logging.
    log_level: str = Field(
        default="WARNING",
        description="Console log level.",
    )
    log_dir: Path | None = Field(
        default=None,
        description="Directory for the JSON log file. File logging is off when unset.",
    )

    # Telemetry.
    telemetry_enabled: bool = Field(
        default=False,
        description="Enable lightweight internal telemetry events.",
    )
    telemetry_sink: Literal["none", "log"] = Field(
        default="log",
        description=(
            "Telemetry sink backend. `log` emits structured telemetry through the "
            "`curator.telemetry` logger; `none` disables sink output."
        ),
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=resolve_config_file()),
            file_secret_settings,
        )

    @field_validator("server_url", mode="before")
    @classmethod
    def _normalize_server_url(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("CURATOR_SERVER_URL must be a string.")
        normalized = value.strip().rstrip("/")
        if not normalized:
            raise ValueError("CURATOR_SERVER_URL must not be empty.")
        if not normalized.startswith(("http://", "https://")):
            raise ValueError("CURATOR_SERVER_URL must be an absolute http/https URL.")
        return normalized

    @field_validator("user_agent", mode="before")
    @classmethod
    def _normalize_user_agent(cls, value: Any) -> str:
        normalized = _normalize_optional_text(value)
        if normalized is None:
            raise ValueError("CURATOR_USER_AGENT must not be empty.")
        return normalized

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        normalized = _normalize_optional_text(value)
        if normalized is None:
            return "WARNING"
        return normalized.upper()

    @field_validator("telemetry_sink", mode="before")
    @classmethod
    def _normalize_telemetry_sink(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("CURATOR_TELEMETRY_SINK must be a string.")
        normalized = value.strip().lower()
        if normalized in {"none", "log"}:
            return normalized
        raise ValueError("CURATOR_TELEMETRY_SINK must be set to: none, log.")

    @field_validator("log_dir", mode="before")
    @classmethod
    def _normalize_log_dir(cls, value: Any) -> Path | None:
        if value is None:
            return None
        if isinstance(value, str) and not value.strip():
            return None
        return _resolve_path(value)

    @field_validator("telemetry_enabled", mode="before")
    @classmethod
    def _coerce_telemetry_enabled(cls, value: Any) -> bool:
        # Unrecognised values keep telemetry off rather than failing startup.
        return _parse_bool_with_default(value, default=False)


def load_settings(**overrides: Any) -> AppSettings:
    return AppSettings(**overrides)
