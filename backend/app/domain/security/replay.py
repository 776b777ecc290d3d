"""Nonce replay protection."""
import enum
import logging
from datetime import datetime, timedelta
from typing import Protocol

from app.domain.common.types import Clock, SystemClock

logger = logging.getLogger(__name__)


class NonceCheck(str, enum.Enum):
    """Outcome of a nonce check-and-record."""
    FRESH = "fresh"
    REPLAY = "replay"


class NonceRepository(Protocol):
    """Nonce store protocol. The nonce column must be unique."""

    async def insert_if_absent(self, nonce: str, device_id: str, seen_at: datetime) -> bool:
        """Insert the nonce; False if it already exists. Must be a single atomic write."""
        ...

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Delete nonces seen before cutoff; return number removed."""
        ...


class ReplayGuard:
    """Tracks used nonces.

    Atomicity comes from the store's uniqueness constraint: concurrent callers
    with the same nonce race on one INSERT and exactly one of them wins.
    """

    def __init__(self, nonce_repo: NonceRepository, clock: Clock | None = None):
        self.nonce_repo = nonce_repo
        self.clock = clock or SystemClock()

    async def check_and_record(self, nonce: str, device_id: str = "") -> NonceCheck:
        inserted = await self.nonce_repo.insert_if_absent(nonce, device_id, self.clock.utcnow())
        if inserted:
            return NonceCheck.FRESH
        logger.warning(f"🔁 [NONCE] Replay of nonce from device {device_id or '?'}")
        return NonceCheck.REPLAY

    async def prune(self, retention_seconds: int) -> int:
        """Drop nonces older than retention_seconds.

        retention_seconds must be at least the timestamp window, otherwise a
        pruned nonce could be replayed while its timestamp is still accepted.
        """
        cutoff = self.clock.utcnow() - timedelta(seconds=retention_seconds)
        removed = await self.nonce_repo.delete_older_than(cutoff)
        if removed:
            logger.info(f"🧹 [NONCE] Pruned {removed} nonces older than {cutoff.isoformat()}")
        return removed
