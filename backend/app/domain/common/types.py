"""Common domain types."""
import time
from datetime import datetime, timezone
from typing import Protocol
from uuid import uuid4


def generate_id() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


class Clock(Protocol):
    """Time source used for timestamp-window checks and row timestamps."""

    def now(self) -> float:
        """Current time as epoch seconds."""
        ...

    def utcnow(self) -> datetime:
        """Current time as a naive UTC datetime (the form stored in the DB)."""
        ...


class SystemClock:
    """Wall clock."""

    def now(self) -> float:
        return time.time()

    def utcnow(self) -> datetime:
        return datetime.fromtimestamp(self.now(), tz=timezone.utc).replace(tzinfo=None)
