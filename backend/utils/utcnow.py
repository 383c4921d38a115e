"""UTC clock helpers.

Scores and log records are stamped with **naive** UTC datetimes, matching the
``DateTime`` columns in the registry store.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC time as a naive (tzinfo=None) datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
