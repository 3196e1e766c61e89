"""Application configuration management."""

from pydantic import AnyUrl, ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: AnyUrl

    # Security
    jwt_secret: str
    jwt_algorithm: str = "HS256"

    # Email delivery (transactional email HTTP API)
    email_api_url: str | None = None
    email_api_key: str | None = None
    email_from: str = "LifeMate <no-reply@lifemate.app>"
    email_timeout: float = Field(default=10.0, gt=0)

    # Object storage (Cloudinary-compatible upload API)
    storage_cloud_name: str | None = None
    storage_api_key: str | None = None
    storage_api_secret: str | None = None
    storage_folder: str = "lifemate/applications"
    upload_max_bytes: int = Field(default=10 * 1024 * 1024, ge=1)

    # Best-effort side effects
    side_effect_max_retries: int = Field(default=3, ge=0, le=10)
    side_effect_base_delay: float = Field(default=0.5, ge=0)

    # Stats resync scheduler
    scheduler_enabled: bool = True
    stats_resync_hour: int = Field(default=3, ge=0, le=23)
    stats_resync_minute: int = Field(default=0, ge=0, le=59)
    scheduler_timezone: str = "UTC"

    # Background queue
    redis_url: str = "redis://localhost:6379/0"

    cors_origins: list[str] = ["*"]

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
