from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    ENV: str = Field(default="dev")  # dev|prod
    TZ: str = Field(default="America/Sao_Paulo")

    # DB
    DATABASE_URL: str = Field(default="postgresql+psycopg://app:app@db:5432/app")

    # CORS
    CORS_ORIGINS: str = Field(default="http://localhost:3000,http://localhost")

    # Celery / Redis
    REDIS_URL: str = Field(default="redis://redis:6379/0")
    WORKER_CONCURRENCY: int = Field(default=1)

    # Upstream (legacy ERP API)
    UPSTREAM_BASE_URL: str = Field(default="http://legacy-api:8081/api/legacy")
    UPSTREAM_TOKEN: str | None = Field(default=None)
    UPSTREAM_TIMEOUT_SEC: float = Field(default=60.0)

    # Sync
    SYNC_BATCH_SIZE: int = Field(default=1000)
    MAX_SYNC_DAYS: int = Field(default=366)
    CATALOG_REFRESH_DESCRIPTIONS: bool = Field(default=False)

    # Schedule (cron: minute hour day-of-month month day-of-week)
    SCHEDULE_ENABLED: bool = Field(default=True)
    DAILY_SYNC_CRON: str = Field(default="0 1 * * *")
    WEEKLY_SYNC_ENABLED: bool = Field(default=True)
    WEEKLY_SYNC_CRON: str = Field(default="0 2 * * 0")

    # Seed (dev)
    SEED_DEMO: bool = Field(default=True)
    DEMO_STORE_CODES: str = Field(default="000001,000002")


settings = Settings()
