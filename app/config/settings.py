"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.config.business_constants import (
    CODE_GENERATION_MAX_ATTEMPTS,
    SEAT_EXPANSION_MULTIPLIER,
    TRIAL_DAYS,
    TRIAL_GRACE_DAYS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Stripe
    stripe_secret_key: str | None = None
    stripe_webhook_secret: str = ""
    stripe_webhook_tolerance: int = Field(
        default=300, ge=0, description="Max age of a signed webhook payload in seconds"
    )

    # Email (Resend HTTP API)
    resend_api_key: str | None = None
    resend_api_url: str = "https://api.resend.com/emails"
    email_from: str = "Mind and Muscle <noreply@mindandmuscle.ai>"
    admin_email: str = "admin@mindandmuscle.ai"
    email_timeout_seconds: float = Field(default=15.0, gt=0)

    # Partner conversion tracking (Tolt)
    tolt_api_key: str | None = None
    tolt_api_url: str = "https://api.tolt.com/v1/transactions"

    # Admin dashboard
    admin_dashboard_password: str = ""
    finder_fee_action_secret: str = Field(
        default="",
        description="Signs one-click links in finder fee emails, unset disables them",
    )

    # Public site
    site_url: str = "https://mindandmuscle.ai"

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/ledger.log"
    http_host: str = "0.0.0.0"
    http_port: int = Field(
        default=8080, ge=1, le=65535, description="HTTP server port"
    )

    # Ledger rules
    code_generation_max_attempts: int = Field(
        default=CODE_GENERATION_MAX_ATTEMPTS,
        ge=1,
        description="Attempts to draw an unused redemption code before giving up",
    )
    trial_days: int = Field(default=TRIAL_DAYS, gt=0)
    trial_grace_days: int = Field(default=TRIAL_GRACE_DAYS, ge=0)
    seat_expansion_multiplier: int = Field(
        default=SEAT_EXPANSION_MULTIPLIER,
        ge=1,
        description="Max team size as a multiple of the originally purchased seats",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        """Loguru expects upper-case level names."""
        return value.upper()

    @field_validator("site_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Links are built as f"{site_url}/path"."""
        return value.rstrip("/")

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.environment == 'production':
            if self.debug:
                raise ValueError(
                    'DEBUG must be False in production environment. '
                    'Set DEBUG=false in your .env file.'
                )

            if not self.stripe_webhook_secret:
                raise ValueError(
                    'STRIPE_WEBHOOK_SECRET is required in production. '
                    'Copy the signing secret from the Stripe dashboard.'
                )

            if len(self.admin_dashboard_password) < 12:
                raise ValueError(
                    'ADMIN_DASHBOARD_PASSWORD must be at least 12 characters '
                    'in production.'
                )

            if not self.resend_api_key:
                raise ValueError(
                    'RESEND_API_KEY is required in production. '
                    'License codes are delivered by email.'
                )

        if not self.tolt_api_key:
            logger.debug("TOLT_API_KEY not set, partner conversion tracking disabled")

        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


settings = Settings()
