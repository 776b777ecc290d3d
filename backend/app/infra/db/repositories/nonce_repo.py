"""Nonce repository."""
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.common.errors import StorageFailureError
from app.domain.security.replay import NonceRepository
from app.infra.db.models.nonce import NonceModel


class NonceRepositoryImpl(NonceRepository):
    """Nonce repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert_if_absent(self, nonce: str, device_id: str, seen_at: datetime) -> bool:
        """Plain INSERT; a primary-key violation means the nonce was already spent.

        Committed immediately so the nonce stays spent whatever happens later
        in the request.
        """
        self.session.add(NonceModel(nonce=nonce, device_id=device_id or None, seen_at=seen_at))
        try:
            await self.session.commit()
            return True
        except IntegrityError as e:
            await self.session.rollback()
            if await self.exists(nonce):
                return False
            raise StorageFailureError() from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageFailureError() from e

    async def exists(self, nonce: str) -> bool:
        try:
            result = await self.session.execute(
                select(NonceModel.nonce).where(NonceModel.nonce == nonce)
            )
        except SQLAlchemyError as e:
            raise StorageFailureError() from e
        return result.scalar_one_or_none() is not None

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Delete nonces seen before cutoff."""
        try:
            result = await self.session.execute(
                delete(NonceModel).where(NonceModel.seen_at < cutoff)
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageFailureError() from e
        return result.rowcount or 0
