from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime"""
    # Use timezone.utc instead of utcnow() (deprecated in Python 3.12+)
    return datetime.now(timezone.utc)
