"""Shared pieces for the in-memory stores."""

import itertools
from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryStore:
    """
    Base for stores that own their records in process memory.

    Attributes:
        clock: Returns the timestamp stamped on new records (UTC now by default)
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or utc_now
        self._ids = itertools.count(1)

    def _next_id(self, prefix: str) -> str:
        """Sequential ids, unique within one store instance."""
        return f"{prefix}-{next(self._ids)}"
