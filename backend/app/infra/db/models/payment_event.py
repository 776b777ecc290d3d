"""Payment event database model."""
from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Text

from app.domain.payments.models import PaymentEvent
from app.infra.db.base import Base


class PaymentEventModel(Base):
    """Payment notification reported by a device; one row per client_txn_id."""

    __tablename__ = "payment_events"

    id = Column(String, primary_key=True)
    client_txn_id = Column(String(128), nullable=False, unique=True, index=True)
    device_id = Column(String(128), ForeignKey("devices.device_id"), nullable=False, index=True)
    bank = Column(String(255), nullable=True)
    amount = Column(Numeric(18, 2), nullable=False)
    title = Column(Text, nullable=True)
    message = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False)

    @classmethod
    def from_entity(cls, event: PaymentEvent) -> "PaymentEventModel":
        return cls(
            id=event.id,
            client_txn_id=event.client_txn_id,
            device_id=event.device_id,
            bank=event.bank,
            amount=event.amount,
            title=event.title,
            message=event.message,
            created_at=event.created_at,
        )

    def to_entity(self) -> PaymentEvent:
        return PaymentEvent(
            id=self.id,
            client_txn_id=self.client_txn_id,
            device_id=self.device_id,
            bank=self.bank,
            amount=self.amount,
            title=self.title,
            message=self.message,
            created_at=self.created_at,
        )
