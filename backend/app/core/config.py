"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Goal Planner Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "sqlite:///./goal_planner.db"
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "goal-planner"
    planning_strategy: str = "rule_based"
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_timeout_seconds: float = 60.0
    openai_temperature: float = 0.7
    openai_max_tokens: int = 4000
    default_weekly_hours: float = 10.0
    minimum_adjustment_days: int = 7
    reminder_hour: int = 9
    notifications_enabled: bool = False
    notifications_provider: str = "noop"
    scheduler_enabled: bool = False
    scheduler_timezone: str = "UTC"
    adjustment_job_hour: int = 6
    adjustment_job_minute: int = 0
    jobs_run_on_startup: bool = False


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
