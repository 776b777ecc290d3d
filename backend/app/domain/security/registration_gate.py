"""Coarse gate in front of /register.

This does not authenticate a device (none exists yet); it only slows down
anonymous credential minting.
"""
import hmac
import logging
from typing import Optional

from app.domain.common.errors import RegistrationGateError

logger = logging.getLogger(__name__)


class RegistrationGate:
    """Static shared secret when configured, otherwise fingerprint presence."""

    def __init__(self, shared_secret: Optional[str] = None):
        self.shared_secret = shared_secret or None

    def check(self, secret_key: Optional[str], fingerprint: Optional[str]) -> None:
        if self.shared_secret:
            supplied = (secret_key or "").encode("utf-8")
            if not hmac.compare_digest(supplied, self.shared_secret.encode("utf-8")):
                logger.warning("🚫 [AUTH] Registration rejected: bad shared secret")
                raise RegistrationGateError()
            return
        if not (fingerprint or "").strip():
            logger.warning("🚫 [AUTH] Registration rejected: missing device fingerprint")
            raise RegistrationGateError()
