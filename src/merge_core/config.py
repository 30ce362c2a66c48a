"""Process configuration via pydantic-settings (``MERGE_*`` environment variables)."""

from __future__ import annotations

import math
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the merge process; CLI flags override these."""

    model_config = SettingsConfigDict(env_prefix="MERGE_", env_file=".env", extra="ignore")

    # Format, e.g. "(/foo:o[3,1] /bar:o[2,3][1-4] (/baz:o))"
    format: str | None = None

    # Sampling
    frequency: float = 10.0

    # Ports: sources connect as <port_prefix>/source<n>:i
    port_prefix: str = "/lm/merge"

    # Observability
    log_level: str = "INFO"
    log_format: str = "text"

    @field_validator("frequency")
    @classmethod
    def positive_frequency(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0:
            raise ValueError("frequency must be a finite number larger than 0")
        return v

    @field_validator("log_format")
    @classmethod
    def known_log_format(cls, v: str) -> str:
        if v not in ("text", "json"):
            raise ValueError("log_format must be 'text' or 'json'")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
