"""Per-request device authentication for signed requests."""
import logging
import math
from dataclasses import dataclass
from typing import Optional

from app.domain.common.errors import (
    BadSignatureError,
    InvalidInputError,
    MissingCredentialsError,
    ReplayDetectedError,
    StaleRequestError,
)
from app.domain.common.types import Clock, SystemClock
from app.domain.devices.models import Device
from app.domain.devices.services import DeviceRegistry
from app.domain.security.replay import NonceCheck, ReplayGuard
from app.domain.security.signing import compute_signature, signatures_match

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 120
# Timestamps above this are taken to be epoch milliseconds.
_MILLIS_THRESHOLD = 10**11
# Width of the nonces.nonce column.
MAX_NONCE_LENGTH = 255


@dataclass(frozen=True)
class SecurityHeaders:
    """The four security header values as received."""

    device_token: Optional[str]
    timestamp: Optional[str]
    nonce: Optional[str]
    signature: Optional[str]

    def missing(self) -> list[str]:
        return [
            name
            for name in ("device_token", "timestamp", "nonce", "signature")
            if not (getattr(self, name) or "").strip()
        ]


def parse_timestamp(value: str) -> float:
    """Epoch seconds (or milliseconds) header value -> epoch seconds."""
    try:
        ts = float(value.strip())
    except ValueError:
        raise StaleRequestError("Invalid timestamp") from None
    if not math.isfinite(ts):
        raise StaleRequestError("Invalid timestamp")
    if abs(ts) >= _MILLIS_THRESHOLD:
        ts = ts / 1000.0
    return ts


class RequestAuthenticator:
    """Validates device token, timestamp, nonce and signature, in that order.

    The nonce is consumed once the device is known, before the signature is
    checked, so a failed signature still spends it; clients must use a new
    nonce for every attempt.
    """

    def __init__(
        self,
        device_registry: DeviceRegistry,
        replay_guard: ReplayGuard,
        clock: Clock | None = None,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
    ):
        self.device_registry = device_registry
        self.replay_guard = replay_guard
        self.clock = clock or SystemClock()
        self.window_seconds = window_seconds

    async def authenticate(self, headers: SecurityHeaders, raw_body: bytes) -> Device:
        missing = headers.missing()
        if missing:
            raise MissingCredentialsError(f"Missing security headers: {', '.join(missing)}")

        timestamp = headers.timestamp.strip()
        nonce = headers.nonce.strip()
        if len(nonce) > MAX_NONCE_LENGTH:
            raise InvalidInputError(f"Nonce longer than {MAX_NONCE_LENGTH} characters")

        skew = abs(self.clock.now() - parse_timestamp(timestamp))
        if skew > self.window_seconds:
            logger.warning(f"⏱️ [AUTH] Stale request rejected (skew {skew:.0f}s)")
            raise StaleRequestError(f"Timestamp outside the {self.window_seconds}s window")

        device = await self.device_registry.authenticate(headers.device_token.strip())

        if await self.replay_guard.check_and_record(nonce, device.device_id) == NonceCheck.REPLAY:
            raise ReplayDetectedError("Nonce already used")

        expected = compute_signature(device.device_token, raw_body, timestamp, nonce)
        if not signatures_match(expected, headers.signature):
            logger.warning(f"🚫 [AUTH] Bad signature from device {device.device_id}")
            raise BadSignatureError("Signature mismatch")

        return device
