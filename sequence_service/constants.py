"""
Sequence Service Global Constants

Centralized location for system-wide constants used across the application.
"""

from datetime import datetime, timezone

# Pagination defaults when the query string is absent or unparsable
DEFAULT_PAGE_SIZE = 50
DEFAULT_PAGE = 0

# Largest value a BIGINT LIMIT/OFFSET can carry
MAX_SQL_INTEGER = 2**63 - 1

# Cache key families
SEQUENCE_LIST_KEY_PREFIX = "sequences"
SEQUENCE_DETAIL_KEY_PREFIX = "sequence"


# Timestamp Functions
def get_current_timestamp() -> datetime:
    """Get current timestamp with UTC timezone.

    Returns:
        datetime: Current UTC timestamp

    Note: Use this function instead of a constant to get real-time timestamps.
    """
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as RFC 3339 in UTC with second precision.

    Naive values are treated as UTC (SQLite drops the offset).
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# Application Constants
APP_NAME = "Sequence Service"
APP_VERSION = "0.1.0"
