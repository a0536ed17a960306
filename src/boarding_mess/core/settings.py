"""Application settings and configuration.

This module defines all configuration options for the Boarding Mess service.
Settings are loaded from environment variables with sensible defaults.
"""

from zoneinfo import ZoneInfo

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

HOURS_PER_DAY = 24


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Boarding Mess", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Database configuration
    database_url: str = Field(default="sqlite:///./boarding_mess.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Household clock and meal cutoffs
    household_timezone: str = Field(default="Asia/Dhaka", alias="HOUSEHOLD_TIMEZONE")
    morning_cutoff_hour: int = Field(default=7, alias="MORNING_CUTOFF_HOUR")
    night_cutoff_hour: int = Field(default=18, alias="NIGHT_CUTOFF_HOUR")
    max_meal_quantity: int = Field(default=10, alias="MAX_MEAL_QUANTITY")

    # Background materialization and retention
    scheduler_enabled: bool = Field(default=True, alias="SCHEDULER_ENABLED")
    scheduler_catchup_days: int = Field(default=2, alias="SCHEDULER_CATCHUP_DAYS")
    scheduler_max_sleep_seconds: float = Field(default=300.0, alias="SCHEDULER_MAX_SLEEP_SECONDS")
    backfill_max_days: int = Field(default=366, alias="BACKFILL_MAX_DAYS")
    chat_retention_days: int = Field(default=30, alias="CHAT_RETENTION_DAYS")
    chat_purge_hour: int = Field(default=2, alias="CHAT_PURGE_HOUR")

    # Client-side clock synchronization
    clock_sync_interval_seconds: float = Field(default=300.0, alias="CLOCK_SYNC_INTERVAL_SECONDS")
    clock_sync_max_cache_age_seconds: float = Field(
        default=86_400.0,
        alias="CLOCK_SYNC_MAX_CACHE_AGE_SECONDS",
    )
    clock_sync_stale_after_seconds: float = Field(
        default=3_600.0,
        alias="CLOCK_SYNC_STALE_AFTER_SECONDS",
    )
    clock_sync_timeout_seconds: float = Field(default=10.0, alias="CLOCK_SYNC_TIMEOUT_SECONDS")

    # Change notification feed
    change_feed_capacity: int = Field(default=1_000, alias="CHANGE_FEED_CAPACITY")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("morning_cutoff_hour", "night_cutoff_hour", "chat_purge_hour")
    @classmethod
    def _validate_hour(cls, value: int) -> int:
        if not 0 <= value < HOURS_PER_DAY:
            raise ValueError("hour must be between 0 and 23")
        return value

    @field_validator("household_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        # Raises ZoneInfoNotFoundError (a KeyError) for unknown zones.
        try:
            ZoneInfo(value)
        except KeyError as err:
            raise ValueError(f"Unknown timezone: {value}") from err
        return value

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def tzinfo(self) -> ZoneInfo:
        """Return the household timezone as a tzinfo object."""
        return ZoneInfo(self.household_timezone)


settings = Settings()  # type: ignore[call-arg]
