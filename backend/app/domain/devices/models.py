"""Device domain models."""
import enum
from datetime import datetime

from pydantic import BaseModel, Field


class DeviceStatus(str, enum.Enum):
    """Device lifecycle status."""
    ACTIVE = "active"
    DISABLED = "disabled"


class Device(BaseModel):
    """Registered reporting device.

    device_token is both the bearer credential and the HMAC key; it is only
    returned to the client once, at registration, and is kept out of repr.
    """

    device_id: str
    device_name: str
    device_token: str = Field(repr=False)
    status: DeviceStatus = DeviceStatus.ACTIVE
    created_at: datetime
    updated_at: datetime

    @property
    def is_active(self) -> bool:
        return self.status == DeviceStatus.ACTIVE
