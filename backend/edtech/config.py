"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Edtech AI"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Remote store
    # Leave unset to run entirely on the local fallback store
    database_url: str | None = None

    @computed_field
    @property
    def database_url_async(self) -> str | None:
        """Get async database URL, rewriting bare Postgres schemes for asyncpg."""
        if not self.database_url:
            return None
        url = self.database_url.strip()
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+asyncpg://", 1)
        # asyncpg doesn't accept query params via URL; SSL goes through connect_args
        if url.startswith("postgresql+asyncpg://") and "?" in url:
            url = url.split("?")[0]
        return url

    @computed_field
    @property
    def database_requires_ssl(self) -> bool:
        """Check if the database connection requires SSL (for Neon, etc.)."""
        if self.database_url:
            return "sslmode=require" in self.database_url or "ssl=require" in self.database_url
        return False

    @computed_field
    @property
    def database_url_sync(self) -> str | None:
        """Get sync database URL (for Alembic)."""
        if not self.database_url:
            return None
        url = self.database_url.strip()
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        elif url.startswith("postgresql+asyncpg://"):
            url = url.replace("postgresql+asyncpg://", "postgresql://", 1)
        elif url.startswith("sqlite+aiosqlite://"):
            url = url.replace("sqlite+aiosqlite://", "sqlite://", 1)
        return url

    # Local fallback store (JSON key-value file)
    local_store_path: Path = Path(".edtech/local_store.json")

    # Auth / JWT
    jwt_secret_key: str  # Required - no default, must be set in .env
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7  # 7 days

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Anthropic API
    # Optional at boot; chat turns short-circuit with "setup required" when unset
    anthropic_api_key: str | None = None

    # LLM Configuration
    llm_model: str = "claude-sonnet-4-20250514"
    llm_max_tokens: int = 4000
    llm_thinking_budget: int = 2048

    # Context limits (characters)
    document_context_max_chars: int = 30000

    # Document upload (hard ceiling; plan limits are usually lower)
    max_upload_size_bytes: int = 50 * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def sanitize_error(error: Exception, *, generic_message: str = "An internal error occurred.") -> str:
    """
    Return a user-safe error message.

    In development, returns the full exception string for debugging.
    In staging/production, returns a generic message to avoid leaking internals.
    """
    settings = get_settings()
    if settings.environment == "development":
        return str(error)
    return generic_message
