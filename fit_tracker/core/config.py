"""Application configuration from environment variables."""

from functools import lru_cache
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment (and .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Fit Tracker API"
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # Storage: "auto" tries PostgreSQL and falls back to memory, "postgres" or "memory" force one
    storage_backend: str = "auto"
    create_tables: bool = True
    seed_defaults: bool = True

    # Database. database_url wins when set (e.g. sqlite+aiosqlite:///./fit.db)
    database_url: str = ""
    database_host: str = ""
    database_port: int = 5432
    database_user: str = "postgres"
    database_password: str = ""  # Set in .env - never commit
    database_name: str = "fit_tracker"
    database_ssl_mode: str = "prefer"

    # Pool (PostgreSQL only)
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Identity provider (Supabase-compatible). Empty url = trust decoded token claims.
    auth_provider_url: str = ""
    auth_provider_api_key: str = ""
    auth_timeout_seconds: float = 10.0

    # Community feed windows
    community_feed_hours: int = 24
    community_active_minutes: int = 5

    # CORS: comma-separated list of allowed origins in production
    cors_origins: str = ""

    def _build_db_url(self, scheme: str = "postgresql", ssl_query: str = "sslmode=prefer") -> str:
        user = quote_plus(self.database_user)
        password = quote_plus(self.database_password)
        return (
            f"{scheme}://{user}:{password}@{self.database_host}:{self.database_port}"
            f"/{self.database_name}?{ssl_query}"
        )

    @property
    def database_configured(self) -> bool:
        return bool(self.database_url or self.database_host)

    @property
    def database_url_sync(self) -> str:
        """Synchronous URL for Alembic and tooling."""
        if self.database_url:
            url = self.database_url.replace("+asyncpg", "").replace("+aiosqlite", "")
            if url.startswith("postgres://"):
                url = "postgresql://" + url[len("postgres://"):]
            return url
        return self._build_db_url(scheme="postgresql", ssl_query=f"sslmode={self.database_ssl_mode}")

    @property
    def async_database_url(self) -> str:
        """Async URL for FastAPI (asyncpg driver)."""
        if self.database_url:
            url = self.database_url
            if url.startswith("postgres://"):
                url = "postgresql://" + url[len("postgres://"):]
            if url.startswith("postgresql://"):
                url = "postgresql+asyncpg://" + url[len("postgresql://"):]
            return url
        return self._build_db_url(scheme="postgresql+asyncpg", ssl_query=f"ssl={self.database_ssl_mode}")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
