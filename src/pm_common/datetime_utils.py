"""UTC datetime utilities and the injectable market clock."""

import time
from collections.abc import Callable
from datetime import datetime, timezone

# Seconds since the Unix epoch. Markets compare deadlines against this.
Clock = Callable[[], int]


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def unix_now() -> int:
    """Default market clock: whole seconds since the epoch."""
    return int(time.time())
