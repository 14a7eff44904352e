"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "LifePilot Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://lifepilot@localhost:5432/lifepilot"
    auto_create_tables: bool = False

    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    generation_temperature: float = 0.7
    generation_max_tokens: int = 2000
    generation_timeout_seconds: float = 30.0
    generation_ticket_ttl_seconds: int = 120
    use_default_focus_areas: bool = True

    schedule_timezone: str = "UTC"
    recurrence_max_instances: int = 10
    default_reminder_minutes: int = 15

    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "lifepilot"

    scheduler_enabled: bool = False
    scheduler_timezone: str = "UTC"
    ticket_sweep_interval_minutes: int = 5
    jobs_run_on_startup: bool = False

    notifications_enabled: bool = False
    notifications_provider: str = "noop"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
