"""Device database model."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum

from app.domain.devices.models import Device, DeviceStatus
from app.infra.db.base import Base


class DeviceModel(Base):
    """Registered reporting device and its credential."""

    __tablename__ = "devices"

    device_id = Column(String(128), primary_key=True)
    device_name = Column(String(255), nullable=False)
    device_token = Column(String(128), nullable=False, unique=True, index=True)
    status = Column(
        SQLEnum(DeviceStatus, name="device_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=DeviceStatus.ACTIVE,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_entity(self) -> Device:
        return Device(
            device_id=self.device_id,
            device_name=self.device_name,
            device_token=self.device_token,
            status=self.status,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
