# backend/marketplace/core/config.py
from decimal import Decimal
import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    BRAND_NAME,
    DEFAULT_CURRENCY,
    DEFAULT_PAGE_SIZE,
    DEFAULT_TAX_RATE,
    MAX_PAGE_SIZE,
    SUPPORTED_CURRENCIES,
)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug("[CONFIG] Looking for .env at: %s (exists=%s)", env_path, env_path.exists())
    load_dotenv(env_path)

_DEV_SECRET_KEY = "dev-secret-key-change-me"


class Settings(BaseSettings):
    # Identity (tokens are verified here, issued by the identity provider)
    secret_key: SecretStr = Field(
        default=SecretStr(_DEV_SECRET_KEY),
        description="Secret key for JWT tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 720  # 12 hours

    environment: str = Field(
        default="development",
        description="Deployment environment (development|staging|production)",
    )
    is_testing: bool = False  # Set to True when running tests
    app_name: str = f"{BRAND_NAME} API"

    # Database
    database_url: str = Field(
        default="sqlite:///./marketplace.db",
        description="SQLAlchemy URL for the primary database",
    )
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 10
    db_pool_recycle: int = 300
    db_echo: bool = False

    # Bookings
    booking_tax_rate: Decimal = Field(
        default=DEFAULT_TAX_RATE,
        description="Tax rate applied to booking subtotals (0.125 == 12.5%)",
    )
    default_currency: str = DEFAULT_CURRENCY
    bookings_default_page_size: int = DEFAULT_PAGE_SIZE
    bookings_max_page_size: int = MAX_PAGE_SIZE

    # Notifications
    notifications_enabled: bool = Field(
        default=True,
        description="When false, booking confirmations are not dispatched",
    )

    # Logging
    log_level: str = "INFO"

    # Use ConfigDict instead of Config class (Pydantic V2 style)
    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("booking_tax_rate")
    @classmethod
    def _validate_tax_rate(cls, v: Decimal) -> Decimal:
        if v < 0 or v >= 1:
            raise ValueError("booking_tax_rate must be between 0 and 1")
        return v

    @field_validator("default_currency")
    @classmethod
    def _validate_currency(cls, v: str) -> str:
        normalized = v.strip().upper()
        if normalized not in SUPPORTED_CURRENCIES:
            raise ValueError(f"default_currency must be one of {', '.join(SUPPORTED_CURRENCIES)}")
        return normalized

    @model_validator(mode="after")
    def _refuse_dev_secret_in_production(self) -> "Settings":
        if (
            self.environment.lower() == "production"
            and self.secret_key.get_secret_value() == _DEV_SECRET_KEY
        ):
            raise ValueError("SECRET_KEY must be set in production")
        if self.bookings_default_page_size > self.bookings_max_page_size:
            raise ValueError("bookings_default_page_size cannot exceed bookings_max_page_size")
        return self

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
