"""
TourStack Backend — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the app factory, the database module, and the service
       singletons (which receive their values as constructor arguments).
When:  Loaded once at module import time.

Environment variable names match the ones the deployed TourStack server
already uses (NODE_ENV, PORT, DATABASE_URL, GOOGLE_VISION_API_KEY, ...),
so an existing .env keeps working.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for local development.
    Attributes are grouped by concern for readability.
    """

    # ── Environment ───────────────────────────────────────────────────────
    # What: "production" switches the DB fallback path and enables the SPA bundle
    node_env: str = Field(default="development")

    @property
    def is_production(self) -> bool:
        return self.node_env == "production"

    # ── Database ──────────────────────────────────────────────────────────
    # What: SQLAlchemy async URL, or a "file:./data/dev.db" path shorthand
    # The file gets this project's own snake_case schema; a database
    # written by another ORM under the same path is not readable.
    # Unset: ./data/prod.db in production, ./data/dev.db otherwise
    database_url: Optional[str] = Field(default=None)

    # Pool sizing only applies to server databases (PostgreSQL via asyncpg)
    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    @property
    def sqlalchemy_url(self) -> str:
        """
        What: The resolved async SQLAlchemy URL.
        How:  "file:" paths become sqlite+aiosqlite URLs; anything else is used as-is.
        """
        url = self.database_url
        if not url:
            name = "prod.db" if self.is_production else "dev.db"
            return f"sqlite+aiosqlite:///{Path('data') / name}"
        if url.startswith("file:"):
            return f"sqlite+aiosqlite:///{url[len('file:'):]}"
        return url

    @property
    def is_sqlite(self) -> bool:
        return self.sqlalchemy_url.startswith("sqlite")

    # ── Google APIs ───────────────────────────────────────────────────────
    # What: One key shared by Translate, Text-to-Speech and Vision
    # Empty: requests still go out and the upstream auth error is relayed
    google_vision_api_key: str = Field(default="")

    # What: Referer header sent with every Google REST call
    # Why: Browser-restricted API keys check the referrer
    google_api_referer: str = Field(default="http://localhost:3000")

    # ── Google Gemini ─────────────────────────────────────────────────────
    gemini_api_key: str = Field(default="")
    gemini_model: str = Field(default="gemini-2.0-flash")

    # ── Text-to-Speech ────────────────────────────────────────────────────
    # What: How long the voice list is kept in memory (seconds)
    tts_voice_cache_ttl: int = Field(default=3600, ge=0)

    # ── File Storage ──────────────────────────────────────────────────────
    uploads_dir: str = Field(default="./uploads")
    dist_dir: str = Field(default="./dist")

    # Default: 100MB
    max_upload_size: int = Field(default=104_857_600, ge=1_048_576)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: comma-separated origins, "*" allows all
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("node_env")
    @classmethod
    def normalize_node_env(cls, v: str) -> str:
        return v.strip().lower()

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def missing_optional_keys(self) -> List[str]:
        """
        What:  Lists unset API keys so startup can warn about them.
        Why:   Missing keys are not fatal; the affected endpoints relay
               the upstream auth error instead.
        """
        missing = []
        if not self.google_vision_api_key:
            missing.append("GOOGLE_VISION_API_KEY")
        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        return missing


# Singleton instance imported throughout the application
settings = Settings()
