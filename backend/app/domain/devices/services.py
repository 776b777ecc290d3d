"""Device domain services."""
import logging
from typing import Optional, Protocol

from app.domain.common.errors import (
    DeviceDisabledError,
    InvalidDeviceError,
    InvalidInputError,
    NotFoundError,
)
from app.domain.devices.models import Device, DeviceStatus
from app.domain.devices.tokens import TokenIssuer

logger = logging.getLogger(__name__)


class DeviceRepository(Protocol):
    """Device repository protocol."""

    async def upsert(self, device_id: str, device_name: str, device_token: str) -> Device:
        """Create the device, or replace name/token/status of an existing one, atomically."""
        ...

    async def get_by_token(self, device_token: str) -> Optional[Device]:
        """Get device by its token."""
        ...

    async def get_by_id(self, device_id: str) -> Optional[Device]:
        """Get device by device_id."""
        ...

    async def set_status(self, device_id: str, status: DeviceStatus) -> Optional[Device]:
        """Update status; None if the device does not exist."""
        ...


class DeviceRegistry:
    """Owns device identity records and their credentials."""

    def __init__(self, device_repo: DeviceRepository, token_issuer: Optional[TokenIssuer] = None):
        self.device_repo = device_repo
        self.token_issuer = token_issuer or TokenIssuer()

    async def register(self, device_id: str, device_name: str) -> str:
        """Register or re-register a device and return its freshly issued token.

        Re-registration rotates the token (the old one stops authenticating)
        and resets status to active.
        """
        device_id = (device_id or "").strip()
        device_name = (device_name or "").strip()
        if not device_id or not device_name:
            raise InvalidInputError("device_id and device_name are required")

        token = self.token_issuer.issue()
        device = await self.device_repo.upsert(device_id, device_name, token)
        logger.info(f"📱 [DEVICE] Registered device {device.device_id} ({device.device_name})")
        return token

    async def authenticate(self, device_token: str) -> Device:
        """Resolve a token to an active device."""
        if not device_token:
            raise InvalidDeviceError("Unknown device credential")
        device = await self.device_repo.get_by_token(device_token)
        if device is None:
            raise InvalidDeviceError("Unknown device credential")
        if not device.is_active:
            raise DeviceDisabledError(f"Device {device.device_id} is disabled")
        return device

    async def get_status(self, device_token: str) -> Device:
        """Look up a device by token regardless of status."""
        device = await self.device_repo.get_by_token(device_token)
        if device is None:
            raise NotFoundError("Device")
        return device

    async def set_status(self, device_id: str, status: DeviceStatus) -> Device:
        """Administrative status change (enable/disable)."""
        device = await self.device_repo.set_status(device_id, status)
        if device is None:
            raise NotFoundError("Device", device_id)
        logger.info(f"📱 [DEVICE] Device {device_id} status -> {status.value}")
        return device
