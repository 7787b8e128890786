from pydantic_settings import BaseSettings, SettingsConfigDict

from .schemas import Unit


class Settings(BaseSettings):
    """
    Centralized configuration.

    Loaded from:
    - environment variables
    - .env file (if present)
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Required key (the app should fail fast if missing)
    openweather_api_key: str
    openweather_base_url: str = "https://api.openweathermap.org"
    request_timeout_s: float = 10.0

    # Looked up once at startup; empty string disables the initial search
    default_city: str = "New York"
    default_units: Unit = Unit.METRIC

    # SQLite file holding the recent-search list
    sqlite_path: str = "weather_widget.sqlite3"
    recent_searches_key: str = "recentSearches"

    app_name: str = "Weather"
    log_level: str = "INFO"


settings = Settings()
