"""Payment event domain models."""
import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.common.types import generate_id


class NotifyPayload(BaseModel):
    """Body of a /notify request. bank/title/message are opaque."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    client_txn_id: str = Field(min_length=1, max_length=128)
    # Stored as NUMERIC(18, 2)
    amount: Decimal = Field(allow_inf_nan=False, max_digits=18, decimal_places=2)
    bank: Optional[str] = Field(default=None, max_length=255)
    title: Optional[str] = None
    message: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_is_number(cls, value):
        if isinstance(value, (str, bool)):
            raise ValueError("amount must be a JSON number")
        return value


class PaymentEvent(BaseModel):
    """Stored payment notification."""

    id: str
    client_txn_id: str
    device_id: str
    amount: Decimal
    bank: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None
    created_at: datetime

    @classmethod
    def create(cls, device_id: str, payload: NotifyPayload, created_at: datetime) -> "PaymentEvent":
        """Create a new payment event from an authenticated payload."""
        return cls(
            id=generate_id(),
            client_txn_id=payload.client_txn_id,
            device_id=device_id,
            amount=payload.amount,
            bank=payload.bank,
            title=payload.title,
            message=payload.message,
            created_at=created_at,
        )


class IngestStatus(str, enum.Enum):
    OK = "ok"
    DUPLICATE_IGNORED = "duplicate_ignored"


class IngestResult(BaseModel):
    """Outcome of an ingestion; a duplicate is a success, not an error."""

    status: IngestStatus
    client_txn_id: str
    event_id: Optional[str] = None
