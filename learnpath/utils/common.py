"""
Common utility functions used across services and routes.
"""

import math
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC now; every timestamp in the database is naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def round_half_up(value: float) -> int:
    """Round .5 up (Math.round semantics) instead of Python's round-half-to-even."""
    return int(math.floor(value + 0.5))
