# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration: all env-driven, read once at import.
Services never read these directly; dependencies.py injects the values.
"""

import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "member-access")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "3000"))

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./member_access.db")
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "sql").lower()
    POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "300"))

    # Minutes that must pass between two granted accesses of one member
    ACCESS_LOG_THRESHOLD: int = int(os.getenv("ACCESS_LOG_THRESHOLD", "30"))
    PARKING_SPACES: int = int(os.getenv("PARKING_SPACES", "50"))
    IMPORT_CHUNK_SIZE: int = int(os.getenv("IMPORT_CHUNK_SIZE", "500"))
    MAX_IMPORT_ROWS: int = int(os.getenv("MAX_IMPORT_ROWS", "10000"))

    DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "200"))

    CORS_ORIGINS: list[str] = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
    ]
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
