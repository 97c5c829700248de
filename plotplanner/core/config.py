"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "plot-planner"
    app_version: str = "0.1.0"
    api_prefix: str = "/api"
    host: str = "0.0.0.0"
    port: int = 8000
    database_url: str = "postgresql+psycopg://plots:plots@db:5432/plots"
    # Open-Meteo historical archive
    open_meteo_archive_url: str = "https://archive-api.open-meteo.com/v1/archive"
    weather_fetch_timeout_ms: int = 1200
    weather_archive_lag_days: int = 5  # archive data trails real time
    weather_stale_after_days: int = 30
    weather_refresh_window_seconds: int = 15 * 60
    weather_limiter_cleanup_seconds: int = 60 * 60
    # OpenRouter reasoning provider
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_search_model: str = "openai/gpt-4o-mini"
    openrouter_fit_model: str = "openai/gpt-4o-mini"
    openrouter_app_name: str = "PlotPlanner"
    openrouter_site_url: str = ""
    ai_timeout_seconds: float = 10.0
    ai_max_retries: int = 1
    ai_retry_backoff_seconds: float = 1.0
    ai_temperature: float = 0.7
    ai_top_p: float = 1.0
    ai_max_tokens: int = 1000
    ai_use_mock: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

__all__ = ["settings", "Settings"]
