"""Application configuration and settings management."""
from functools import lru_cache
from pathlib import Path
from typing import Annotated, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables or .env."""

    model_config = SettingsConfigDict(
        env_file=(Path(__file__).resolve().parent.parent / ".." / ".." / ".env"),
        env_file_encoding="utf-8",
        env_prefix="AGRIINSIGHT_",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = "AgriInsight"
    secret_key: str = "change-me"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Database
    database_url: str = "sqlite+aiosqlite:///./agriinsight.db"
    db_pool_size: int = 10
    db_pool_timeout: float = 30.0

    # Security
    access_token_expire_minutes: int = 60
    password_hash_rounds: int = 10
    session_cookie_name: str = "auth_token"
    session_cookie_secure: bool = True
    allowed_origins: Annotated[List[str], NoDecode] = ["http://localhost:8080"]

    # Dashboard
    max_forecast_days: int = 365

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: List[str] | str) -> List[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @property
    def session_max_age_seconds(self) -> int:
        return self.access_token_expire_minutes * 60


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings instance."""

    return Settings()
