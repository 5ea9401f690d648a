# teashop/core/config.py
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - JWT_SECRET (HS256 signing secret for access tokens)

    Database selection (first match wins):
      - DATABASE_URL: any SQLAlchemy URL
      - DB_HOST (+ DB_PORT, DB_USER, DB_PASSWORD, DB_NAME, DB_SSLMODE): Postgres
      - SQLITE_PATH: local SQLite file (default)

    Email (verification codes):
      - EMAIL_HOST, EMAIL_PORT, EMAIL_USER, EMAIL_PASS
    """

    PROJECT_NAME: str = "Tea Shop API"
    LOG_LEVEL: str = "INFO"

    # Comma-separated list of allowed browser origins
    CORS_ORIGINS: str = (
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173"
    )

    # Database
    DATABASE_URL: str | None = None
    DB_HOST: str | None = None
    DB_PORT: int = 5432
    DB_USER: str | None = None
    DB_PASSWORD: str | None = None
    DB_NAME: str = "teashop"
    DB_SSLMODE: str | None = None
    SQLITE_PATH: str = "./teashop.db"

    # JWT
    JWT_SECRET: str
    JWT_ALG: str = "HS256"
    JWT_EXPIRE_DAYS: int = 7

    # SMTP
    EMAIL_HOST: str | None = None
    EMAIL_PORT: int = 587
    EMAIL_USER: str | None = None
    EMAIL_PASS: str | None = None
    EMAIL_FROM_NAME: str = "Tea Shop"
    EMAIL_USE_TLS: bool = True
    EMAIL_USE_SSL: bool = False

    # Verification codes
    CODE_TTL_MINUTES: int = 5
    CODE_RESEND_SECONDS: int = 60

    # Accounts
    PASSWORD_MIN_LENGTH: int = 6
    GUEST_EMAIL: str = "guest@shop.com"
    MANAGER_EMAILS: str = ""
    MANAGER_UPGRADE_CODE: str | None = None

    # Cached per-user order aggregates
    STATS_CACHE_MINUTES: int = 5

    SEED_SAMPLE_DATA: bool = True

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def manager_emails(self) -> set[str]:
        return {
            e.strip().lower() for e in self.MANAGER_EMAILS.split(",") if e.strip()
        }


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
