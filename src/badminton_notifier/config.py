"""Configuration objects and helpers for the badminton notifier."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_URLS = (
    "https://www.tuni.fi/sportuni/omasivu/?page=selection&lang=en&type=3&area=2&week=0",
    "https://www.tuni.fi/sportuni/omasivu/?page=selection&lang=en&type=3&area=2&week=1",
)

DEFAULT_SEARCH_TEXTS = tuple(
    f"{hour}:{minute} Badminton" for hour in range(16, 22) for minute in ("00", "30")
)

DEFAULT_WEEKEND_SLOT_TIMES = frozenset({"16:00", "16:30", "17:00", "18:00"})

LIST_SEPARATOR = re.compile(r"[,;]+")


class ConfigurationError(RuntimeError):
    """Raised when required environment variables are missing or invalid."""

    def __init__(self, variables: list[str]):
        self.variables = variables
        super().__init__(f"Missing or invalid environment variables: {', '.join(variables)}")


class Settings(BaseSettings):
    """Runtime configuration sourced from environment variables."""

    email_from: str = Field(..., alias="EMAIL_FROM", min_length=1)
    email_to: Annotated[tuple[str, ...], NoDecode] = Field(..., alias="EMAIL_TO", min_length=1)
    smtp_host: str = Field(..., alias="SMTP_SERVER", min_length=1)
    smtp_port: int = Field(..., alias="SMTP_PORT", gt=0)
    smtp_user: str = Field(..., alias="SMTP_USER", min_length=1)
    smtp_password: SecretStr = Field(..., alias="SMTP_PASS")

    urls: Annotated[tuple[str, ...], NoDecode] = Field(DEFAULT_URLS, alias="SCRAPE_URLS")
    search_texts: Annotated[tuple[str, ...], NoDecode] = Field(DEFAULT_SEARCH_TEXTS, alias="SEARCH_TEXTS")
    weekend_slot_times: Annotated[frozenset[str], NoDecode] = Field(
        DEFAULT_WEEKEND_SLOT_TIMES, alias="WEEKEND_SLOT_TIMES"
    )
    state_file: Path = Field(Path("notification-state.json"), alias="STATE_FILE")

    headless: bool = Field(True, alias="HEADLESS")
    page_timeout_seconds: float = Field(12.0, alias="PAGE_TIMEOUT_SECONDS", gt=0)
    element_timeout_seconds: float = Field(8.0, alias="ELEMENT_TIMEOUT_SECONDS", gt=0)
    navigation_timeout_seconds: float = Field(8.0, alias="NAVIGATION_TIMEOUT_SECONDS", gt=0)
    visibility_timeout_seconds: float = Field(5.0, alias="VISIBILITY_TIMEOUT_SECONDS", gt=0)
    scrape_budget_seconds: float = Field(8 * 60, alias="SCRAPE_BUDGET_SECONDS", gt=0)
    poll_interval_seconds: float = Field(5 * 60, alias="POLL_INTERVAL_SECONDS", gt=0)

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    @field_validator("email_to", "urls", "search_texts", "weekend_slot_times", mode="before")
    @classmethod
    def split_list(cls, value: Any) -> Any:
        """Accept comma or semicolon separated strings for list-valued variables."""
        if isinstance(value, str):
            return [part.strip() for part in LIST_SEPARATOR.split(value) if part.strip()]
        return value

    @field_validator("smtp_password")
    @classmethod
    def password_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("SMTP password must not be empty")
        return value


def load_settings(**overrides: Any) -> Settings:
    """Build ``Settings``, reporting every missing or invalid variable at once."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(_invalid_variables(exc)) from exc


def _invalid_variables(exc: ValidationError) -> list[str]:
    """Map validation errors back to their environment variable names."""
    lookup: dict[str, str] = {}
    for name, field in Settings.model_fields.items():
        env_name = field.alias or name.upper()
        lookup[name.lower()] = env_name
        lookup[env_name.lower()] = env_name

    names: list[str] = []
    for error in exc.errors():
        key = str(error["loc"][0]) if error["loc"] else ""
        env_name = lookup.get(key.lower(), key)
        if env_name not in names:
            names.append(env_name)
    return names
