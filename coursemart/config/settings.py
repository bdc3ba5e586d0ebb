from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings - only define what needs validation."""

    DEBUG: bool = False
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8080
    ENVIRONMENT: str = "development"  # "development", "production", "test"
    LOG_LEVEL: str = "INFO"

    # Supabase (PostgREST + Auth)
    SUPABASE_URL: str = ""
    SUPABASE_PUBLISHABLE_KEY: str = ""  # Safe for client-side
    SUPABASE_SECRET_KEY: str = ""  # Backend only

    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # Views
    RECENT_COURSES_LIMIT: int = 3
    CATALOG_DEFAULT_LIMIT: int | None = None
    EXPORT_FILENAME: str = "enrollment-details.csv"

    # Writes are never retried server-side; throttle repeated submits instead
    MUTATION_RATE_LIMIT: str = "10/minute"

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="allow",
        case_sensitive=False,
    )

    @property
    def is_test(self) -> bool:
        """Check if running under the test environment."""
        return self.ENVIRONMENT == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    if not settings.is_test and (not settings.SUPABASE_URL or not settings.SUPABASE_PUBLISHABLE_KEY):
        msg = "SUPABASE_URL and SUPABASE_PUBLISHABLE_KEY environment variables must be set"
        raise ValueError(msg)
    return settings
