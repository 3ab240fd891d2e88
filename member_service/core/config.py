# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration: all env-driven, read once at import time.
"""
import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "member-service")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "8005"))

    # memory | sql
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "memory").lower()
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./members.db")
    POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "300"))

    MAX_DOWNLINES: int = int(os.getenv("MAX_DOWNLINES", "2"))
    SEARCH_LIMIT: int = int(os.getenv("SEARCH_LIMIT", "10"))
    PLACEMENT_MAX_RETRIES: int = int(os.getenv("PLACEMENT_MAX_RETRIES", "5"))

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
