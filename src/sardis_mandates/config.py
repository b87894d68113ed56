"""Configuration surface for the mandate library."""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_SPECS_BASE_URL


class MandateSettings(BaseSettings):
    """Mandate library configuration, read from ``MANDATE_*`` env vars."""

    model_config = SettingsConfigDict(
        env_prefix="MANDATE_",
        env_file=".env",
        extra="ignore",
    )

    # Primitive registry (mandate-specs)
    specs_base_url: str = DEFAULT_SPECS_BASE_URL
    registry_timeout: float = 30.0

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_json: bool = True

    @field_validator("specs_base_url")
    @classmethod
    def validate_specs_base_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("MANDATE_SPECS_BASE_URL must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("registry_timeout")
    @classmethod
    def validate_registry_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("MANDATE_REGISTRY_TIMEOUT must be positive")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v


@lru_cache
def get_settings() -> MandateSettings:
    return MandateSettings()
