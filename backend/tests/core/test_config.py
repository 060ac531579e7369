"""Tests for Settings validation."""

from decimal import Decimal

from pydantic import SecretStr, ValidationError
import pytest

from marketplace.core.config import Settings


def test_defaults():
    config = Settings(_env_file=None)

    assert config.booking_tax_rate == Decimal("0.125")
    assert config.default_currency == "JMD"
    assert config.algorithm == "HS256"
    assert config.bookings_default_page_size <= config.bookings_max_page_size


def test_currency_normalized():
    assert Settings(_env_file=None, default_currency=" usd ").default_currency == "USD"


def test_unsupported_currency_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, default_currency="EUR")


@pytest.mark.parametrize("rate", ["-0.01", "1", "1.5"])
def test_tax_rate_bounds(rate):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, booking_tax_rate=Decimal(rate))


def test_dev_secret_refused_in_production():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, environment="production")


def test_production_with_real_secret():
    config = Settings(
        _env_file=None, environment="production", secret_key=SecretStr("a-real-secret")
    )

    assert config.environment == "production"


def test_page_size_consistency():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, bookings_default_page_size=50, bookings_max_page_size=10)


def test_is_sqlite():
    assert Settings(_env_file=None, database_url="sqlite://").is_sqlite is True
    assert (
        Settings(_env_file=None, database_url="postgresql://localhost/marketplace").is_sqlite
        is False
    )
