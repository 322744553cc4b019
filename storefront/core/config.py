# storefront/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

# Fallback used when JWT_SECRET is not configured. Only acceptable for local
# development; startup logs a warning when it is in effect.
DEV_JWT_SECRET = "your-secret-key"


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Env vars (.env):
      - DATABASE_URL (Postgres connection string; sqlite:// works for tests)
      - JWT_SECRET (HS256 signing secret for access tokens)

    Optional:
      - JWT_EXPIRE_DAYS, BCRYPT_ROUNDS, ENVIRONMENT, CORS_ORIGINS
    """

    PROJECT_NAME: str = "Storefront API"
    API_PREFIX: str = "/api"

    DATABASE_URL: str = "sqlite:///./storefront.db"

    # Token signing
    JWT_SECRET: str = DEV_JWT_SECRET
    JWT_ALG: str = "HS256"
    JWT_EXPIRE_DAYS: int = 7

    # bcrypt cost factor for stored password hashes
    BCRYPT_ROUNDS: int = 12

    # "production" hides internal error details from 500 responses
    ENVIRONMENT: str = "development"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def uses_dev_secret(self) -> bool:
        return self.JWT_SECRET == DEV_JWT_SECRET


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
