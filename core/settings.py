"""
Application settings and configuration management using Pydantic Settings.
"""
from pathlib import Path
from typing import List, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
ENVIRONMENTS = ("development", "staging", "production")
STORAGE_BACKENDS = ("csv", "memory", "sql", "http")


def _one_of(name: str, value: str, allowed: Tuple[str, ...]) -> str:
    if value not in allowed:
        raise ValueError(f"{name} must be one of {list(allowed)}")
    return value


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    app_name: str = Field(default="Desk Booking", description="Application name")
    app_env: str = Field(default="development", description="Environment (development, staging, production)")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # Storage Configuration
    storage_backend: str = Field(default="csv", description="Reservation store backend (csv, memory, sql, http)")
    data_dir: str = Field(default="data", description="Directory holding the CSV data files")
    reservations_csv_file: str = Field(default="reservations.csv", description="Reservations CSV file name")
    users_csv_file: str = Field(default="users.csv", description="Users CSV file name")
    database_url: str = Field(default="sqlite:///./desk_booking.db", description="Database connection URL")
    reservations_api_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of a remote reservations API (http backend)"
    )
    http_timeout_seconds: float = Field(default=10.0, gt=0, description="Timeout for remote store calls")
    seed_default_users: bool = Field(
        default=True,
        description="Seed the built-in user list when no users file is present"
    )

    # Booking Configuration
    timezone: str = Field(default="Asia/Ho_Chi_Minh", description="Office timezone")
    booking_window_weeks: int = Field(default=2, ge=1, le=8, description="Number of weeks offered for booking")
    booking_cutoff_weekday: int = Field(default=4, ge=0, le=6, description="Weekday after which the window rolls over")
    booking_cutoff_hour: int = Field(default=15, ge=0, le=23, description="Hour on the cutoff weekday")
    min_user_id_length: int = Field(default=3, ge=1, description="Minimum user ID length at login")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")
    api_reload: bool = Field(default=False, description="Enable auto-reload")

    # CORS Settings
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="Allowed CORS origins (comma-separated)"
    )
    cors_allow_credentials: bool = Field(default=True, description="Allow credentials in CORS")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return _one_of("log_level", v.upper(), LOG_LEVELS)

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        return _one_of("app_env", v.lower(), ENVIRONMENTS)

    @field_validator("storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        return _one_of("storage_backend", v.lower(), STORAGE_BACKENDS)

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string to list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    @property
    def reservations_csv_path(self) -> Path:
        return Path(self.data_dir) / self.reservations_csv_file

    @property
    def users_csv_path(self) -> Path:
        return Path(self.data_dir) / self.users_csv_file


# Global settings instance
settings = Settings()
