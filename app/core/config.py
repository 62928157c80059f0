# app/core/config.py

from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo
import urllib.parse

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from .env; ignore unknown keys so extra lines don't crash startup
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Postgres ---
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "ai_receptionist"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    DB_SSL: bool = False
    # Full async URL override (e.g. sqlite+aiosqlite:///./data/voice.db)
    DATABASE_URL: Optional[str] = None

    # --- Connection pool ---
    DB_POOL_MIN: int = 5
    DB_POOL_MAX: int = 20
    DB_POOL_IDLE_TIMEOUT: int = 30     # seconds before an idle connection is recycled
    DB_POOL_TIMEOUT: int = 10          # seconds to wait for a free connection
    SLOW_QUERY_THRESHOLD_MS: int = 100

    # --- Vapi webhooks ---
    VAPI_WEBHOOK_SECRET: str = ""
    WEBHOOK_TOLERANCE_SECONDS: int = 300
    # None -> verify only when APP_ENV is production
    VERIFY_WEBHOOK_SIGNATURES: Optional[bool] = None
    API_BASE_URL: str = "http://localhost:8000"

    # --- Assistant ---
    ASSISTANT_MODEL_PROVIDER: str = "openai"
    ASSISTANT_MODEL: str = "gpt-4"
    ASSISTANT_TEMPERATURE: float = 0.7
    ASSISTANT_VOICE_PROVIDER: str = "elevenlabs"
    ASSISTANT_VOICE_ID: str = "rachel"

    # --- Booking notifications ---
    BOOKING_SERVICE_URL: str = ""
    NOTIFY_TIMEOUT_SECONDS: float = 5.0

    # --- Scheduling ---
    WORKSHOP_TIMEZONE: str = "UTC"

    # --- Monitoring & Logging ---
    APP_ENV: str = "production"
    LOG_LEVEL: str = "INFO"
    LOG_REQUESTS: bool = False
    LOG_RESPONSES: bool = False
    MAX_LOG_LENGTH: int = 200
    SLOW_REQUEST_THRESHOLD: float = 2.0

    # Sync URI (Alembic)
    @property
    def sync_db_uri(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL.replace("+asyncpg", "").replace("+aiosqlite", "")
        pwd = urllib.parse.quote_plus(self.POSTGRES_PASSWORD)
        return f"postgresql://{self.POSTGRES_USER}:{pwd}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Async URI (SQLAlchemy engine)
    @property
    def async_db_uri(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        pwd = urllib.parse.quote_plus(self.POSTGRES_PASSWORD)
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{pwd}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() in ("production", "prod")

    @property
    def verify_signatures(self) -> bool:
        if self.VERIFY_WEBHOOK_SIGNATURES is not None:
            return self.VERIFY_WEBHOOK_SIGNATURES
        return self.is_production

    @property
    def local_tz(self) -> ZoneInfo:
        return ZoneInfo(self.WORKSHOP_TIMEZONE)

    @model_validator(mode="after")
    def _require_webhook_secret(self) -> "Settings":
        # An empty HMAC key would accept signatures anyone can compute
        if self.verify_signatures and not self.VAPI_WEBHOOK_SECRET:
            raise ValueError(
                "VAPI_WEBHOOK_SECRET must be set when webhook signatures are verified "
                "(set VERIFY_WEBHOOK_SIGNATURES=false to disable verification)"
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# Singleton
settings = get_settings()
