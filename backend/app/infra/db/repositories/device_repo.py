"""Device repository."""
import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.common.errors import StorageFailureError
from app.domain.common.types import Clock, SystemClock
from app.domain.devices.models import Device, DeviceStatus
from app.domain.devices.services import DeviceRepository
from app.infra.db.models.device import DeviceModel

logger = logging.getLogger(__name__)


def dialect_insert(session: AsyncSession, table):
    """INSERT construct with ON CONFLICT support for the session's backend."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    raise StorageFailureError(f"Unsupported database dialect: {dialect}")


class DeviceRepositoryImpl(DeviceRepository):
    """Device repository implementation."""

    def __init__(self, session: AsyncSession, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()

    async def upsert(self, device_id: str, device_name: str, device_token: str) -> Device:
        """Insert or replace by device_id in one statement (token rotation on re-register)."""
        now = self.clock.utcnow()
        stmt = dialect_insert(self.session, DeviceModel).values(
            device_id=device_id,
            device_name=device_name,
            device_token=device_token,
            status=DeviceStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[DeviceModel.device_id],
            set_={
                "device_name": stmt.excluded.device_name,
                "device_token": stmt.excluded.device_token,
                "status": stmt.excluded.status,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        try:
            await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"❌ [DEVICE] Upsert failed for {device_id}: {type(e).__name__}")
            raise StorageFailureError() from e
        device = await self.get_by_id(device_id)
        if device is None:
            raise StorageFailureError()
        return device

    async def get_by_token(self, device_token: str) -> Optional[Device]:
        """Get device by token."""
        try:
            result = await self.session.execute(
                select(DeviceModel)
                .where(DeviceModel.device_token == device_token)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as e:
            raise StorageFailureError() from e
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def get_by_id(self, device_id: str) -> Optional[Device]:
        """Get device by device_id."""
        try:
            result = await self.session.execute(
                select(DeviceModel)
                .where(DeviceModel.device_id == device_id)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as e:
            raise StorageFailureError() from e
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def set_status(self, device_id: str, status: DeviceStatus) -> Optional[Device]:
        """Update device status."""
        try:
            await self.session.execute(
                update(DeviceModel)
                .where(DeviceModel.device_id == device_id)
                .values(status=status, updated_at=self.clock.utcnow())
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StorageFailureError() from e
        return await self.get_by_id(device_id)
