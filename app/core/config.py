"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "PlanTogether"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"  # Bind to all interfaces for external access
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all
    public_base_url: str = "http://localhost:8000"  # Used for links in .ics files

    # Database
    database_url: str = "sqlite:///./plantogether.db"

    # Planning rules
    voting_cutoff_hours: int = 1
    rsvp_cutoff_hours: int = 6
    event_duration_hours: int = 2
    calendar_uid_domain: str = "plantogether.app"

    # Reminder job
    scheduler_enabled: bool = True
    reminder_interval_minutes: int = 15
    vote_reminder_hours: int = 24


settings = Settings()
