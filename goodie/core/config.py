# goodie/core/config.py
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres connection string)
      - SESSION_SECRET (HS256 signing secret for session tokens)

    Optional (checked when first used):
      - SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY (product image storage)
      - SMTP_* (password reset emails)
      - GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET / GOOGLE_REDIRECT_URI
    """

    PROJECT_NAME: str = "Goodie Storefront API"
    API_V1_STR: str = "/api/v1"

    # Public site, used to build reset links and OAuth redirects
    FRONTEND_URL: str = "http://localhost:3000"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    DATABASE_URL: str

    # Session tokens
    SESSION_SECRET: str
    SESSION_ALG: str = "HS256"
    SESSION_COOKIE_NAME: str = "goodie_session"
    SESSION_COOKIE_SECURE: bool = False
    OAUTH_STATE_COOKIE_NAME: str = "goodie_oauth_state"
    SESSION_MAX_AGE_SECONDS: int = 30 * 24 * 60 * 60
    SESSION_UPDATE_AGE_SECONDS: int = 24 * 60 * 60

    # Route guard
    ADMIN_PATH_PREFIXES: list[str] = ["/admin", "/api/v1/admin"]
    ACCESS_DENIED_REDIRECT_PATH: str = "/"

    # Credentials
    PASSWORD_HASH_ROUNDS: int = 10
    PASSWORD_MIN_LENGTH: int = 6
    RESET_TOKEN_TTL_MINUTES: int = 60

    # Supabase Storage (image host)
    SUPABASE_URL: str | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_STORAGE_BUCKET: str = "goodie_products"

    # SMTP
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_FROM_EMAIL: str | None = None
    SMTP_FROM_NAME: str = "Goodie"
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False

    # Google OAuth
    GOOGLE_CLIENT_ID: str | None = None
    GOOGLE_CLIENT_SECRET: str | None = None
    GOOGLE_REDIRECT_URI: str | None = None

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
