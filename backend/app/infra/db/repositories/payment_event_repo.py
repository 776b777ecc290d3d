"""Payment event repository."""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.common.errors import StorageFailureError
from app.domain.payments.models import PaymentEvent
from app.domain.payments.services import PaymentEventRepository
from app.infra.db.models.payment_event import PaymentEventModel

logger = logging.getLogger(__name__)


class PaymentEventRepositoryImpl(PaymentEventRepository):
    """Payment event repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def insert_if_absent(self, event: PaymentEvent) -> bool:
        """INSERT keyed on client_txn_id; a unique violation on that key is a duplicate, not an error."""
        self.session.add(PaymentEventModel.from_entity(event))
        try:
            await self.session.commit()
            return True
        except IntegrityError as e:
            await self.session.rollback()
            if await self.get_by_client_txn_id(event.client_txn_id) is not None:
                return False
            logger.error(f"❌ [NOTIFY] Integrity error for txn {event.client_txn_id}: {e.orig}")
            raise StorageFailureError() from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"❌ [NOTIFY] Insert failed for txn {event.client_txn_id}: {type(e).__name__}")
            raise StorageFailureError() from e

    async def get_by_client_txn_id(self, client_txn_id: str) -> Optional[PaymentEvent]:
        """Get event by idempotency key."""
        try:
            result = await self.session.execute(
                select(PaymentEventModel).where(PaymentEventModel.client_txn_id == client_txn_id)
            )
        except SQLAlchemyError as e:
            raise StorageFailureError() from e
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None
