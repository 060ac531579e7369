"""
ULID helpers.

Every primary key is a 26-character Crockford base32 ULID string.
"""

from datetime import datetime
from typing import Optional

import ulid

# Crockford alphabet (no I, L, O, U), upper case only
ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


def generate_ulid() -> str:
    return str(ulid.ULID())


def parse_ulid(value: str) -> Optional[ulid.ULID]:
    """``value`` as a ULID, or None when it is not one."""
    try:
        return ulid.ULID.from_str(value)
    except (ValueError, TypeError):
        return None


def get_timestamp_from_ulid(value: str) -> Optional[datetime]:
    """Creation time encoded in the first 48 bits of ``value``."""
    parsed = parse_ulid(value)
    if parsed is None:
        return None
    return parsed.datetime


def is_valid_ulid(value: str) -> bool:
    return parse_ulid(value) is not None
