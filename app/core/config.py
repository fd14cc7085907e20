# app/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List


class Settings(BaseSettings):
    """Application settings read from environment variables"""

    # Database
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./bookshelf.db",
        description="Database connection URL"
    )
    DB_ECHO: bool = Field(
        default=False,
        description="Log every SQL statement"
    )
    CREATE_TABLES_ON_STARTUP: bool = Field(
        default=True,
        description="Run metadata.create_all when the app starts"
    )

    # Security
    SECRET_KEY: str = Field(
        ...,  # required
        min_length=32,
        description="Secret key used to sign JWT"
    )
    ALGORITHM: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=10080,  # 7 days
        description="Access token lifetime in minutes"
    )

    # CORS
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed CORS origins"
    )

    # App
    APP_NAME: str = Field(
        default="Bookshelf",
        description="Application name"
    )
    APP_VERSION: str = Field(
        default="1.0.0",
        description="Version reported by /health"
    )
    DEBUG: bool = Field(
        default=False,
        description="Debug mode"
    )

    # Google Books
    GOOGLE_BOOKS_API_KEY: str | None = Field(
        default=None,
        description="Google Books API key, the free tier is used without it"
    )
    GOOGLE_BOOKS_BASE_URL: str = Field(
        default="https://www.googleapis.com/books/v1",
        description="Google Books API base URL"
    )
    GOOGLE_BOOKS_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        description="Google Books request timeout in seconds"
    )
    CATALOG_SEARCH_CACHE_TTL: int = Field(
        default=300,
        description="Seconds a search response stays cached"
    )
    CATALOG_VOLUME_CACHE_TTL: int = Field(
        default=600,
        description="Seconds a single volume stays cached"
    )
    CATALOG_CACHE_MAX_ENTRIES: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of cached catalog responses"
    )

    # Rate limits
    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Enable slowapi rate limiting"
    )
    RATE_LIMIT_DEFAULT: List[str] = Field(
        default=["200/day", "50/hour"],
        description="Limits applied to every route"
    )
    RATE_LIMIT_AUTH: str = Field(
        default="10/minute",
        description="Limit for register and login"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
