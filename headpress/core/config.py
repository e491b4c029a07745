# headpress/core/config.py
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import PostgresDsn, computed_field


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables (and `.env`).
    Pydantic validates the types.
    """
    model_config = SettingsConfigDict(
        env_file=".env", env_ignore_case=True, extra="ignore"
    )

    # --- Database ---
    # Full SQLAlchemy URL; when unset the PostgreSQL DSN below is used.
    DATABASE_URL: Optional[str] = None
    POSTGRES_USER: str = "headpress"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_DB: str = "headpress"
    POSTGRES_PORT: int = 5432

    # --- JWT Settings ---
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    AUTH_COOKIE_NAME: str = "auth_token"
    BCRYPT_ROUNDS: int = 10

    # --- Site defaults ---
    SITE_NAME: str = "My Blog"
    SITE_DESCRIPTION: str = "Just another WordPress-like blog"
    SITE_URL: str = "http://localhost:8000"
    ADMIN_EMAIL: str = "admin@example.com"

    # --- Object storage (S3 / Cloudflare R2) ---
    STORAGE_BACKEND: str = "local"
    MEDIA_BUCKET: str = "headpress-media"
    S3_ENDPOINT_URL: Optional[str] = None
    S3_ACCESS_KEY_ID: Optional[str] = None
    S3_SECRET_ACCESS_KEY: Optional[str] = None
    S3_REGION: str = "auto"
    MEDIA_LOCAL_DIR: str = "media"

    # --- AI assist (OpenAI-compatible chat completions) ---
    AI_API_URL: str = "https://openrouter.ai/api/v1/chat/completions"
    AI_API_KEY: Optional[str] = None
    AI_MODEL: str = "openai/gpt-4o-mini"
    AI_TIMEOUT_SECONDS: float = 15.0

    # --- Webhooks & settings cache ---
    WEBHOOK_TIMEOUT_SECONDS: float = 10.0
    SETTINGS_CACHE_TTL_SECONDS: float = 60.0

    CORS_ORIGINS: List[str] = ["*"]

    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    @computed_field
    @property
    def DATABASE_URI(self) -> str:
        """
        SQLAlchemy connection URI. `DATABASE_URL` wins when it is set.
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        dsn = PostgresDsn.build(
            scheme="postgresql+psycopg2",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD or None,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )
        return str(dsn)


# Single configuration instance shared by the whole application.
settings = Settings()
