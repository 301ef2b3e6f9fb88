"""Application configuration."""

import os
from uuid import UUID

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    storage_bucket: str = "food-images"
    inference_backend: str = "openai"
    inference_function_url: str | None = None
    inference_timeout_seconds: float = 30.0
    openai_api_key: str | None = None
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str = "high"
    openai_store: bool = False
    preview_dir: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def function_url(self) -> str:
        """Return the analysis function URL, defaulting to the Supabase function."""
        if self.inference_function_url:
            return self.inference_function_url
        return f"{self.supabase_url.rstrip('/')}/functions/v1/analyze-food-image"


def parse_user_id(raw: str | None) -> UUID | None:
    """Parse a user id header value."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if not cleaned:
        return None
    try:
        return UUID(cleaned)
    except ValueError:
        return None
