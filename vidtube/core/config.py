"""
VidTube Core Settings.

Everything is read from the environment (prefix ``VIDTUBE_``) or a local
``.env`` file. Secrets default to development values and must be overridden
in any real deployment.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8",
        env_prefix="VIDTUBE_", case_sensitive=False,
    )

    # ── App ──────────────────────────────────────────────────────────────
    app_name: str = "VidTube"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api/v1"
    cors_origins: List[str] = ["http://localhost:3001"]

    # ── PostgreSQL ───────────────────────────────────────────────────────
    db_host: str = "postgres"
    db_port: int = 5432
    db_user: str = "vidtube"
    db_password: str = "vidtube_secret"
    db_name: str = "vidtube"
    db_echo: bool = False
    # Full SQLAlchemy URL; wins over the discrete fields above when set.
    database_dsn: Optional[str] = None

    @property
    def database_url(self) -> str:
        if self.database_dsn:
            return self.database_dsn
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # ── Tokens ───────────────────────────────────────────────────────────
    access_token_secret: str = "change-me-access-secret"
    refresh_token_secret: str = "change-me-refresh-secret"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 7

    # ── Cookies ──────────────────────────────────────────────────────────
    access_cookie_name: str = "accessToken"
    refresh_cookie_name: str = "refreshToken"
    cookie_secure: bool = True
    refresh_cookie_max_age_days: int = 7

    # ── Passwords ────────────────────────────────────────────────────────
    bcrypt_rounds: int = 10
    password_min_length: int = 7

    # ── MinIO / S3 (avatars, cover images) ──────────────────────────────
    minio_endpoint: str = "minio:9000"
    minio_access_key: str = "vidtube_minio"
    minio_secret_key: str = "vidtube_minio_secret"
    minio_bucket: str = "vidtube-media"
    minio_secure: bool = False
    media_public_url: str = "http://localhost:9000"
    max_upload_bytes: int = 10 * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    return Settings()
