"""
Application settings and configuration management.

Uses pydantic-settings for environment variable loading.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "CampusPrep"
    app_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Session settings
    session_ttl_hours: float = 24.0
    practice_target_size: int = Field(default=15, ge=1)
    question_time_limit_seconds: int = 300  # 5 minutes per question
    clock_tick_seconds: float = 1.0

    # Engagement sampling
    engagement_sample_interval_seconds: float = 2.0
    advisory_clear_seconds: float = 3.0
    advisory_trigger_threshold: float = 0.7  # advisory fires when rng > threshold
    simulated_face_probability: float = 0.9
    simulated_speaking_probability: float = 0.5

    # Persistence
    storage_backend: str = "memory"  # Options: memory, file
    storage_dir: Path = Path(".campusprep/sessions")
    persistence_key_prefix: str = "mockInterviewSession"

    # Report sink
    report_sink_url: str = ""  # Empty keeps reports in memory
    report_sink_token: str = ""
    report_sink_timeout_seconds: float = 10.0
    transcript_preview_chars: int = 100

    # CORS - stored as comma-separated string in env
    # Uses validation_alias to read from CORS_ORIGINS env var
    cors_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        validation_alias="cors_origins"
    )

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @property
    def session_ttl_ms(self) -> int:
        """Snapshot time-to-live in milliseconds."""
        return int(self.session_ttl_hours * 60 * 60 * 1000)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
