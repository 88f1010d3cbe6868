# marketplace/core/config.py
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)
      - SUPABASE_JWT_SECRET (JWT signing secret from the identity provider)

    Optional:
      - SUPABASE_SERVICE_ROLE_KEY (document store access, backend only)
      - ADMIN_EMAIL (accounts created with this email become ADMIN)
      - IDENTITY_WEBHOOK_SECRET ("whsec_..." secret for identity webhooks)
      - STORE_BACKEND ("supabase" or "memory" for local development)
    """

    PROJECT_NAME: str = "Marketplace Backend"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Supabase config
    SUPABASE_URL: str
    SUPABASE_KEY: str
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_ALG: str = "HS256"

    # Document store backend
    STORE_BACKEND: Literal["supabase", "memory"] = "supabase"

    # Roles & identity sync
    ADMIN_EMAIL: str | None = None
    IDENTITY_WEBHOOK_SECRET: str | None = None
    WEBHOOK_TOLERANCE_SECONDS: int = 300

    # Business rules
    MAX_STORES_PER_USER: int = 3

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def is_admin_email(self, email: str | None) -> bool:
        """Case-insensitive match against the configured administrator email."""
        if not email or not self.ADMIN_EMAIL:
            return False
        return email.strip().lower() == self.ADMIN_EMAIL.strip().lower()


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
