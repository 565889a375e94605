from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production", "test"] = "local"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "Asia/Almaty"
    PUBLIC_BASE_URL: str = "http://localhost:5000"
    CORS_ORIGINS: list[str] = ["*"]

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Auth
    JWT_SECRET: str = "dev-jwt-secret"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24 * 7
    PASSWORD_RESET_TTL_MINUTES: int = 10

    # Uploads
    UPLOAD_DIR: str = "uploads"
    UPLOAD_MAX_BYTES: int = 5 * 1024 * 1024
    UPLOAD_MAX_FILES: int = 5

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    REDIS_URL: str = "memory://"

    # Yandex
    YANDEX_MAPS_API_KEY: Optional[str] = None
    YANDEX_SUGGEST_URL: str = "https://suggest-maps.yandex.ru/v1/suggest"
    YANDEX_DELIVERY_TOKEN: Optional[str] = None
    YANDEX_DELIVERY_URL: str = (
        "https://b2b.taxi.yandex.net/b2b/cargo/integration/v2"
    )

    # Email (Resend)
    RESEND_API_KEY: Optional[str] = None
    RESEND_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM: str = "Tapp <noreply@tapp.kz>"

    # WhatsApp Business (360dialog)
    WABA_API_URL: str = "https://waba-v2.360dialog.io/messages"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
