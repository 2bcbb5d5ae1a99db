from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from .cache import CACHE_TTL_MS

load_dotenv()

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_url: str = Field("http://localhost:5000", alias="FLIGHTS_API_URL")
    store_path: str = Field("flight_dashboard.db", alias="FLIGHTS_STORE")
    cache_ttl_ms: int = Field(CACHE_TTL_MS, alias="FLIGHTS_CACHE_TTL_MS")
    http_timeout_s: float = Field(15, alias="FLIGHTS_HTTP_TIMEOUT")
    airport_limit: int = Field(10, alias="FLIGHTS_AIRPORT_LIMIT")
    log_level: str = Field("INFO", alias="FLIGHTS_LOG_LEVEL")
    log_file: Optional[str] = Field(None, alias="FLIGHTS_LOG_FILE")

    @field_validator("api_url")
    @classmethod
    def _url_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("FLIGHTS_API_URL must be a non-empty string")
        return v.strip().rstrip("/")

    @field_validator("cache_ttl_ms", "http_timeout_s", "airport_limit")
    @classmethod
    def _positive(cls, v):
        if v <= 0:
            raise ValueError("must be greater than 0")
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        if v.upper() not in LOG_LEVELS:
            raise ValueError(f"FLIGHTS_LOG_LEVEL must be one of {LOG_LEVELS}")
        return v.upper()


@lru_cache()
def get_settings() -> Settings:
    """Return application settings loaded from the environment."""
    return Settings()  # type: ignore[call-arg]


__all__ = ["Settings", "get_settings"]
