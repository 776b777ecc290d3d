"""Database models."""
from app.infra.db.models.device import DeviceModel
from app.infra.db.models.nonce import NonceModel
from app.infra.db.models.payment_event import PaymentEventModel

__all__ = [
    "DeviceModel",
    "NonceModel",
    "PaymentEventModel",
]
