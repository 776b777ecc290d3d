"""Background job tasks."""
import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.domain.common.errors import StorageFailureError
from app.domain.common.types import Clock
from app.domain.security.replay import ReplayGuard
from app.infra.db.repositories.nonce_repo import NonceRepositoryImpl

logger = logging.getLogger(__name__)


async def process_prune_nonces_job(
    session_factory: async_sessionmaker[AsyncSession],
    clock: Clock,
    retention_seconds: int,
) -> int:
    """Delete nonces older than the retention period once."""
    async with session_factory() as db:
        guard = ReplayGuard(NonceRepositoryImpl(db), clock)
        return await guard.prune(retention_seconds)


async def nonce_pruner_loop(
    session_factory: async_sessionmaker[AsyncSession],
    clock: Clock,
    retention_seconds: int,
    interval_seconds: int,
) -> None:
    """Prune the nonce table every interval_seconds until cancelled."""
    logger.info(
        f"🧹 [NONCE] Pruner started (every {interval_seconds}s, retention {retention_seconds}s)"
    )
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await process_prune_nonces_job(session_factory, clock, retention_seconds)
        except StorageFailureError as e:
            logger.warning(f"🧹 [NONCE] Prune failed, retrying next interval: {e}")
        except Exception:
            logger.exception("🧹 [NONCE] Prune crashed, retrying next interval")
