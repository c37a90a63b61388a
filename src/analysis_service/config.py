"""Runtime configuration for the analysis service."""

from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the analysis service."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Gemini
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY", "GOOGLE_GENERATIVE_AI_API_KEY"),
    )
    gemini_model: str = Field(default="gemini-2.5-flash", alias="GEMINI_MODEL")
    # Comma-separated list of models tried, in order, when the previous one fails
    # before producing any output. Empty means a single invocation per request.
    gemini_fallback_models: str | None = Field(default=None, alias="GEMINI_FALLBACK_MODELS")
    gemini_temperature: float | None = Field(default=None, alias="GEMINI_TEMPERATURE", ge=0.0, le=2.0)

    # Upper bound on a whole streamed generation (seconds)
    stream_timeout_seconds: float = Field(default=60.0, alias="STREAM_TIMEOUT_SECONDS", gt=0)
    # Per-HTTP-call timeout handed to the Gemini client
    request_timeout_seconds: float = Field(default=30.0, alias="REQUEST_TIMEOUT_SECONDS", gt=0)

    # FastAPI
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8080, alias="APP_PORT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    cors_allow_origins: str = Field(default="*", alias="CORS_ALLOW_ORIGINS")

    @property
    def model_ids(self) -> list[str]:
        """Primary model followed by any fallbacks, without duplicates."""
        ids = [self.gemini_model.strip()]
        if self.gemini_fallback_models and self.gemini_fallback_models.strip():
            for model_id in self.gemini_fallback_models.split(","):
                model_id = model_id.strip()
                if model_id and model_id not in ids:
                    ids.append(model_id)
        return ids

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return memoized settings so multiple imports share a single instance."""

    return Settings()  # type: ignore[call-arg]
