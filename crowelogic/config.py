"""
Configuration and settings for the Crowe Logic service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    # Hosted key-value store (KV_REST_API_URL / KV_REST_API_TOKEN)
    kv_rest_api_url: Optional[str] = Field(default=None)
    kv_rest_api_token: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "use_in_memory_backends", "CROWE_USE_IN_MEMORY_BACKENDS"
        ),
    )

    # LLM / Gemini (GEMINI_API_KEY / GEMINI_MODEL)
    gemini_api_key: Optional[str] = Field(default=None)
    gemini_model: str = Field(default="gemini-2.5-flash")

    # Record limits
    env_history_cap: int = Field(default=1000, ge=1)
    env_history_default_limit: int = Field(default=100, ge=1)
    analyses_default_limit: int = Field(default=10, ge=1)
    chat_title_max_length: int = Field(default=100, ge=1)

    @property
    def use_remote_store(self) -> bool:
        """True when both remote store credentials are present and non-empty."""
        if self.use_in_memory_backends:
            return False
        url = (self.kv_rest_api_url or "").strip()
        token = (self.kv_rest_api_token or "").strip()
        return bool(url and token)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
