from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./jobboard.db"

    # Email
    email_mode: str = "dev"  # dev | prod

    # Auth
    secret_key: str = "change-me-in-production-please-32b"
    jwt_algorithm: str = "HS256"
    access_token_ttl_minutes: int = 15
    session_ttl_days: int = 30
    recovery_token_ttl_minutes: int = 20

    # Paths that skip the authentication gateway (exact match)
    public_paths: list[str] = [
        "/",
        "/health",
        "/api/auth/login",
        "/api/auth/renewAccessToken",
        "/api/users/signup",
        "/api/users/recovery/initiate",
        "/api/users/recovery/complete",
    ]

    # Jobs
    repost_cooldown_days: int = 7

    # App
    debug: bool = False
    allowed_origins: str = ""  # comma-separated, added to the local dev origin


settings = Settings()
