"""API dependencies.

Components are built per request from the Settings, clock and session
factory that create_app() puts on app.state.
"""
from typing import AsyncIterator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.common.types import Clock
from app.domain.devices.services import DeviceRegistry
from app.domain.payments.services import EventIngestor
from app.domain.security.authenticator import RequestAuthenticator, SecurityHeaders
from app.domain.security.registration_gate import RegistrationGate
from app.domain.security.replay import ReplayGuard
from app.infra.db.repositories.device_repo import DeviceRepositoryImpl
from app.infra.db.repositories.nonce_repo import NonceRepositoryImpl
from app.infra.db.repositories.payment_event_repo import PaymentEventRepositoryImpl
from app.settings import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """One session per request."""
    async with request.app.state.session_factory() as session:
        yield session


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from 'Authorization: Bearer <token>'."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def get_device_token(
    authorization: Optional[str] = Header(default=None),
    x_device_token: Optional[str] = Header(default=None),
) -> Optional[str]:
    """Device credential from the bearer header, falling back to X-Device-Token."""
    return bearer_token(authorization) or (x_device_token or "").strip() or None


def get_security_headers(
    device_token: Optional[str] = Depends(get_device_token),
    x_timestamp: Optional[str] = Header(default=None),
    x_nonce: Optional[str] = Header(default=None),
    x_signature: Optional[str] = Header(default=None),
) -> SecurityHeaders:
    return SecurityHeaders(
        device_token=device_token,
        timestamp=x_timestamp,
        nonce=x_nonce,
        signature=x_signature,
    )


def get_registration_gate(settings: Settings = Depends(get_settings)) -> RegistrationGate:
    return RegistrationGate(settings.registration_secret)


def get_device_registry(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DeviceRegistry:
    return DeviceRegistry(DeviceRepositoryImpl(db, clock))


def get_replay_guard(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ReplayGuard:
    return ReplayGuard(NonceRepositoryImpl(db), clock)


def get_request_authenticator(
    registry: DeviceRegistry = Depends(get_device_registry),
    replay_guard: ReplayGuard = Depends(get_replay_guard),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_settings),
) -> RequestAuthenticator:
    return RequestAuthenticator(
        registry,
        replay_guard,
        clock=clock,
        window_seconds=settings.timestamp_window_seconds,
    )


def get_event_ingestor(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_settings),
) -> EventIngestor:
    return EventIngestor(
        PaymentEventRepositoryImpl(db),
        clock=clock,
        require_positive_amount=settings.require_positive_amount,
    )
