from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # Database – SQLite for local development
    DATABASE_URL: str = "sqlite+aiosqlite:///./workhours.db"

    # Redis (Celery broker for the payroll sweep)
    REDIS_URL: str = "redis://localhost:6379/0"

    # Calendar
    # All day-of-week / time-of-day rules are evaluated in this zone.
    TIMEZONE: str = "UTC"
    # Python weekday numbering: 0 = Monday ... 6 = Sunday
    WEEK_STARTS_ON: int = 6
    # ISO code understood by the workalendar registry, e.g. "ZA" or "DE-BW".
    # Empty means no public holidays are known.
    HOLIDAY_CALENDAR: str = ""

    # Rule engine
    CONSECUTIVE_DAY_LOOKBACK_DAYS: int = 14
    STORE_TIMEOUT_SECONDS: float = 5.0

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",")]

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
