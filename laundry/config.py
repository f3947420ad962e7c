from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./laundry.db"

    # Database Connection Pool Settings
    DB_POOL_SIZE: int = 10  # Base number of connections in pool
    DB_MAX_OVERFLOW: int = 20  # Extra connections allowed beyond pool_size
    DB_POOL_TIMEOUT: int = 30  # Seconds to wait for connection from pool
    DB_POOL_RECYCLE: int = 1800  # Recycle connections after 30 minutes
    DB_STATEMENT_TIMEOUT_MS: int = 15000  # Upper bound for any single statement / lock wait

    # JWT Settings (verification only, tokens are issued by the auth service)
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"

    # App Settings
    APP_NAME: str = "Laundry Order Engine"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - accepts JSON string, comma-separated, or list
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Order numbering: ORD + YYYY + MM + zero padded monthly sequence
    ORDER_NUMBER_PREFIX: str = "ORD"
    ORDER_NUMBER_PADDING: int = 4
    ORDER_NUMBER_MAX_RETRIES: int = 3  # Attempts after a uniqueness conflict

    # Snapshot name used when a service no longer exists in the catalog
    UNKNOWN_SERVICE_NAME: str = "Unknown Service"

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(',')]
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
