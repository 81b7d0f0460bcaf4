from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "content_user"
    postgres_password: str = "changeme"
    postgres_db: str = "content_gateway"

    # Full SQLAlchemy URL override (e.g. sqlite+aiosqlite:///./dev.db)
    database_url: str = ""

    @property
    def postgres_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Create ai_responses on startup if missing
    db_create_tables: bool = False

    # Response cache: "sql" (ai_responses table) or "memory" (process-local)
    cache_backend: str = "sql"

    # Gateway limits
    rate_limit_window_seconds: float = 60.0
    rate_limit_max_requests: int = 10
    max_concurrent_requests: int = 3
    provider_timeout_seconds: float = 60.0

    # Prompt template
    brand_name: str = "QueerLuxe Travel"
    brand_location: str = "San Diego"

    # External analysis function used by cross-checks; empty → LLM judge
    analysis_function_url: str = ""
    analysis_function_key: str = ""
    analysis_provider: str = "anthropic"

    # App
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # CORS
    allowed_origins: str = "*"  # comma-separated

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    # Sentry
    sentry_dsn: str = ""  # leave empty to disable


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup."""
    errors: list[str] = []

    if settings.cache_backend not in ("sql", "memory"):
        errors.append("CACHE_BACKEND must be 'sql' or 'memory'")

    if settings.rate_limit_max_requests < 1:
        errors.append("RATE_LIMIT_MAX_REQUESTS must be at least 1")

    if settings.max_concurrent_requests < 1:
        errors.append("MAX_CONCURRENT_REQUESTS must be at least 1")

    if settings.app_env == "production":
        if settings.app_debug:
            errors.append("APP_DEBUG must be false in production")
        if settings.postgres_password == "changeme" and not settings.database_url:
            errors.append("POSTGRES_PASSWORD must be set in production")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
