"""Device status routes."""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.api.deps import get_device_registry, get_device_token
from app.domain.common.errors import MissingCredentialsError
from app.domain.devices.models import DeviceStatus
from app.domain.devices.services import DeviceRegistry

router = APIRouter()


class DeviceStatusResponse(BaseModel):
    device_id: str
    device_name: str
    status: DeviceStatus


@router.get("/device-status", response_model=DeviceStatusResponse)
async def device_status(
    device_token: Optional[str] = Depends(get_device_token),
    registry: DeviceRegistry = Depends(get_device_registry),
):
    """Report the status of the calling device (works for disabled devices too)."""
    if not device_token:
        raise MissingCredentialsError("Device token required")
    device = await registry.get_status(device_token)
    return DeviceStatusResponse(
        device_id=device.device_id,
        device_name=device.device_name,
        status=device.status,
    )
