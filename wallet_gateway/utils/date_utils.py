"""Date manipulation utilities"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware current time in UTC"""
    return datetime.now(timezone.utc)
