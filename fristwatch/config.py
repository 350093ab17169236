"""Configuration management for Fristwatch."""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

# Runtime settings keys (stored in the app_settings table, override env defaults)
EMAIL_REMINDERS_ENABLED_KEY = "fristen.email_reminders_enabled"
CATCH_UP_MAX_AGE_DAYS_KEY = "fristen.catch_up_max_age_days"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_file: str = Field(default="fristwatch.db")

    # Calendar
    timezone: str = Field(
        default="Europe/Berlin",
        description="Defines local calendar-day boundaries for reminders",
    )
    default_jurisdiction: str = Field(
        default="NW",
        description="Holiday jurisdiction for deadlines without one",
    )

    # Email Configuration (SMTP provider, e.g., SendGrid/SES/Gmail)
    smtp_host: Optional[str] = Field(default=None)
    smtp_port: int = Field(default=587)
    smtp_username: Optional[str] = Field(default=None)
    smtp_password: Optional[str] = Field(default=None)
    smtp_use_tls: bool = Field(default=True)
    email_from_address: Optional[str] = Field(default=None)
    email_subject_prefix: str = Field(default="Fristwatch")

    # Reminder defaults (runtime settings store may override)
    email_reminders_enabled: bool = Field(default=True)
    catch_up_max_age_days: int = Field(default=3, ge=0)

    # Scheduler
    sweep_hour: int = Field(default=6, ge=0, le=23)
    sweep_minute: int = Field(default=0, ge=0, le=59)

    # Production Settings
    environment: str = Field(default="development")

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False, description="Emit logs as JSON lines")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def email_configured(self) -> bool:
        """Whether enough SMTP configuration exists to send email."""
        return bool(self.smtp_host and self.email_from_address)

    def missing_email_config(self) -> List[str]:
        """Return the env var names required for email that are unset."""
        return [
            key
            for key, value in {
                "SMTP_HOST": self.smtp_host,
                "EMAIL_FROM_ADDRESS": self.email_from_address,
            }.items()
            if not value
        ]

    def validate_email_config(self) -> None:
        """Validate that the SMTP email channel is properly configured."""
        missing = self.missing_email_config()
        if missing:
            raise ValueError(
                "Email channel misconfigured; missing: " + ", ".join(missing)
            )

    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment.lower() == "production"


# Global settings instance
settings = Settings()
