"""
Configuration and settings for the floorplan backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    # Database: SQLAlchemy URL (Postgres expected), or Firestore.
    database_url: Optional[str] = Field(default=None)
    use_firestore: bool = Field(default=False)

    # S3-compatible storage (Tencent COS)
    cos_endpoint: Optional[str] = Field(default=None)
    cos_region: Optional[str] = Field(default=None)
    cos_bucket: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)

    # Firebase Storage bucket, e.g. "planit-sdp.appspot.com"
    firebase_storage_bucket: Optional[str] = Field(default=None)

    # Lifetime of presigned download urls for S3-compatible storage.
    download_url_expires_in: int = Field(default=7 * 24 * 3600)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
