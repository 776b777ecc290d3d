"""Device registration routes."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, Field

from app.api.deps import get_device_registry, get_registration_gate
from app.domain.devices.services import DeviceRegistry
from app.domain.security.registration_gate import RegistrationGate

logger = logging.getLogger(__name__)

router = APIRouter()


class RegisterRequest(BaseModel):
    """Register request. Fields are checked by the registry so that missing ones map to 400."""
    device_id: Optional[str] = Field(default=None, max_length=128)
    device_name: Optional[str] = Field(default=None, max_length=255)


class RegisterResponse(BaseModel):
    """Issued credential; the only time the token leaves the server."""
    device_id: str
    device_token: str


@router.post("/register", response_model=RegisterResponse)
async def register_device(
    request: RegisterRequest,
    x_secret_key: Optional[str] = Header(default=None),
    x_device_fingerprint: Optional[str] = Header(default=None),
    gate: RegistrationGate = Depends(get_registration_gate),
    registry: DeviceRegistry = Depends(get_device_registry),
):
    """Register a device (or rotate its token) and return the new token."""
    gate.check(x_secret_key, x_device_fingerprint)
    token = await registry.register(request.device_id, request.device_name)
    return RegisterResponse(device_id=request.device_id.strip(), device_token=token)
