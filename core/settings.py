import logging
from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.coinpaprika.com/v1"
DEFAULT_PORTFOLIO_KEY = "crypto-portfolio"
DEFAULT_DARK_MODE_KEY = "crypto-portfolio-dark-mode"

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseSettings):
    """Application settings sourced from environment variables."""

    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        validation_alias=AliasChoices("api_base_url", "COINPAPRIKA_BASE_URL", "API_BASE_URL"),
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        validation_alias=AliasChoices("request_timeout_seconds", "REQUEST_TIMEOUT_SECONDS"),
    )
    storage_path: Path = Field(
        default=Path("./data/local_storage.json"),
        validation_alias=AliasChoices("storage_path", "PORTFOLIO_STORAGE_PATH"),
    )
    portfolio_key: str = Field(
        default=DEFAULT_PORTFOLIO_KEY,
        validation_alias=AliasChoices("portfolio_key", "PORTFOLIO_STORAGE_KEY"),
    )
    dark_mode_key: str = Field(
        default=DEFAULT_DARK_MODE_KEY,
        validation_alias=AliasChoices("dark_mode_key", "DARK_MODE_STORAGE_KEY"),
    )
    catalog_limit: int = Field(
        default=100,
        ge=1,
        validation_alias=AliasChoices("catalog_limit", "CATALOG_LIMIT"),
    )
    suggestion_limit: int = Field(
        default=10,
        ge=1,
        le=10,
        validation_alias=AliasChoices("suggestion_limit", "SUGGESTION_LIMIT"),
    )
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("log_level", "LOG_LEVEL"))

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            logger.warning("LOG_LEVEL=%s is unknown; falling back to INFO", value)
            return "INFO"
        return level

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Cached accessor so we only load settings once per process."""
    return Settings()
