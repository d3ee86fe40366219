"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Built once at startup by ``create_app()`` and handed to each component.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "SpeechRelay"
    app_env: str = "development"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 5000

    # Logging
    log_level: str = "INFO"
    log_format: str = "auto"  # auto (based on app_env), console, or json
    logs_dir: str = "./logs"
    log_to_file: bool = False
    log_file_max_bytes: int = 10 * 1024 * 1024  # 10MB
    log_file_backup_count: int = 5

    # Speech-to-text provider (required)
    assemblyai_api_key: str
    assemblyai_base_url: str = "https://api.assemblyai.com"

    # Polling
    poll_interval_seconds: float = 5.0
    poll_max_attempts: int = 20

    # Transcription store (required)
    supabase_url: str
    supabase_anon_key: str
    supabase_table: str = "transcriptions"

    # Outbound HTTP; None keeps httpx's default timeout
    http_timeout_seconds: float | None = None

    # Rate limiting (per client IP)
    rate_limit_max_requests: int = 100
    rate_limit_window_seconds: int = 15 * 60

    # CORS
    cors_origins: Annotated[list[str], NoDecode] = ["*"]

    @field_validator("assemblyai_api_key", "supabase_url", "supabase_anon_key")
    @classmethod
    def require_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must be set in the environment or .env")
        return v.strip()

    @field_validator("supabase_url", "assemblyai_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            import json
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("poll_max_attempts", "rate_limit_max_requests", "rate_limit_window_seconds")
    @classmethod
    def require_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
