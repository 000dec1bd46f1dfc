# app/core/config.py
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Mini Drive"
    environment: str = "development"
    port: int = 8000
    log_level: str = "INFO"

    database_url: str = "sqlite:///./drive.db"

    # blob store (S3 or anything speaking its API)
    aws_access_key_id: str
    aws_secret_access_key: str
    aws_region: str
    aws_s3_bucket_name: str
    aws_s3_endpoint_url: str | None = None
    public_base_url: str | None = None

    session_cookie_name: str = "session_token"
    session_max_age_days: int = 30
    session_sweep_seconds: int = 120

    max_upload_mb: int = 50
    upload_timeout_seconds: float = 60.0

    # Tell pydantic-settings to load from .env at project root
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # ignore any extra stuff in .env
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_max_age_days * 24 * 60 * 60


@lru_cache
def get_settings() -> Settings:
    return Settings()
