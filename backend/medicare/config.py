from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # Database
    database_url: str = Field(...)
    database_echo: bool = Field(default=False)

    # Auth
    jwt_secret_key: str = Field(default="dev-secret-key-change-in-production")
    token_expire_seconds: int = Field(default=86400)

    # CORS
    cors_origins: list[str] = Field(default=["*"])

    # Logging
    log_level: str = Field(default="INFO")
    log_dir: Optional[str] = Field(default=None)

    # Worker identifiers
    worker_id_prefix: str = Field(default="WKR")
    worker_id_attempts: int = Field(default=3)

    # QR rendering
    qr_default_size: int = Field(default=200)
    qr_fill_color: str = Field(default="#0d9488")
    qr_back_color: str = Field(default="#ffffff")

    # Camera scanner
    scanner_fps: int = Field(default=10)
    scanner_max_probe: int = Field(default=4)
    scanner_retry_delay: float = Field(default=0.12)
    scan_max_upload_bytes: int = Field(default=5 * 1024 * 1024)

    # Manual worker-ID entry
    manual_id_min_length: int = Field(default=3)
    manual_id_max_length: int = Field(default=64)

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
