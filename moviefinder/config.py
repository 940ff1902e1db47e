"""Runtime configuration based on environment variables."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, HttpUrl, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TMDBSettings(BaseModel):
    api_token: SecretStr | None = Field(
        default=None,
        description="TMDB v4 read access token sent as a bearer token.",
    )
    base_url: HttpUrl = Field(default="https://api.themoviedb.org/3")
    image_base_url: HttpUrl = Field(default="https://image.tmdb.org/t/p/w500")
    request_timeout_seconds: float = Field(default=10.0, gt=0, le=120)

    @field_validator("api_token", mode="before")
    @classmethod
    def _empty_token_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class SearchSettings(BaseModel):
    debounce_seconds: float = Field(default=0.5, ge=0, le=10)
    max_results_shown: int = Field(default=10, ge=1, le=20)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MOVIES_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    environment: Literal["dev", "staging", "prod"] = "dev"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    telegram_token: SecretStr
    telegram_proxy: str | None = None
    admin_telegram_id: int | None = None

    tmdb: TMDBSettings = Field(default_factory=TMDBSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)


@lru_cache
def get_settings() -> AppSettings:
    """Return cached settings instance."""

    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "SearchSettings",
    "TMDBSettings",
    "get_settings",
]
