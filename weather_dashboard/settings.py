from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized configuration.

    Loaded from:
    - environment variables
    - .env file (if present)
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # OpenWeather credentials and endpoint
    openweather_api_key: str = ""
    openweather_base_url: str = "https://api.openweathermap.org"
    http_timeout_s: float = 10.0

    # Any SQLAlchemy URL; SQLite file by default
    database_url: str = "sqlite:///weather_records.sqlite3"

    # Bounded connection pool. Waiting longer than the timeout is a store failure.
    db_pool_size: int = 10
    db_max_overflow: int = 0
    db_pool_timeout_s: float = 30.0

    # Inclusive span cap for a requested date window
    max_range_days: int = 5

    log_level: str = "INFO"
    app_name: str = "Weather Dashboard"


@lru_cache
def get_settings() -> Settings:
    return Settings()
