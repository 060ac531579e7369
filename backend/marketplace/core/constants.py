"""Application-wide constants for the service marketplace."""

from __future__ import annotations

from decimal import Decimal

BRAND_NAME = "Marketplace"
API_VERSION = "1.0.0"

# Pricing
DEFAULT_TAX_RATE = Decimal("0.125")  # General Consumption Tax
MONEY_QUANTUM = Decimal("0.01")
SUPPORTED_CURRENCIES = ("JMD", "USD")
DEFAULT_CURRENCY = "JMD"

# Booking listings
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Text constraints
MAX_NOTES_LENGTH = 2000
MAX_NAME_LENGTH = 100

# E.164-ish phone numbers accepted for guest contacts
GUEST_PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"

# Operations slower than this are logged as warnings
SLOW_OPERATION_THRESHOLD_SECONDS = 1.0
