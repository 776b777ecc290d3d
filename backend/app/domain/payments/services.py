"""Payment event ingestion."""
import logging
from typing import Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from app.domain.common.errors import InvalidInputError
from app.domain.common.types import Clock, SystemClock
from app.domain.devices.models import Device
from app.domain.payments.models import (
    IngestResult,
    IngestStatus,
    NotifyPayload,
    PaymentEvent,
)

logger = logging.getLogger(__name__)


class PaymentEventRepository(Protocol):
    """Payment event repository protocol. client_txn_id must be unique."""

    async def insert_if_absent(self, event: PaymentEvent) -> bool:
        """Insert the event; False if an event with its client_txn_id already exists."""
        ...

    async def get_by_client_txn_id(self, client_txn_id: str) -> Optional[PaymentEvent]:
        """Get event by idempotency key."""
        ...


def parse_payload(raw_body: bytes) -> NotifyPayload:
    """Parse the raw /notify body. Any JSON or field problem is InvalidInput."""
    try:
        return NotifyPayload.model_validate_json(raw_body)
    except PydanticValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) or "body" for err in e.errors()})
        raise InvalidInputError(f"Invalid payload: {', '.join(fields)}") from None


class EventIngestor:
    """Turns at-least-once delivery into exactly-once storage keyed by client_txn_id."""

    def __init__(
        self,
        event_repo: PaymentEventRepository,
        clock: Clock | None = None,
        require_positive_amount: bool = True,
    ):
        self.event_repo = event_repo
        self.clock = clock or SystemClock()
        self.require_positive_amount = require_positive_amount

    def validate(self, payload: NotifyPayload) -> None:
        if not payload.client_txn_id:
            raise InvalidInputError("client_txn_id is required")
        if self.require_positive_amount and payload.amount <= 0:
            raise InvalidInputError("amount must be positive")

    async def ingest(self, device: Device, payload: NotifyPayload) -> IngestResult:
        self.validate(payload)
        event = PaymentEvent.create(device.device_id, payload, self.clock.utcnow())

        # Unconditional insert; the unique key decides, never a prior read.
        if await self.event_repo.insert_if_absent(event):
            logger.info(
                f"💸 [NOTIFY] Recorded txn {event.client_txn_id} from device {device.device_id} "
                f"(bank={event.bank}, amount={event.amount})"
            )
            return IngestResult(
                status=IngestStatus.OK,
                client_txn_id=event.client_txn_id,
                event_id=event.id,
            )

        logger.info(f"💸 [NOTIFY] Duplicate txn {event.client_txn_id} from device {device.device_id} ignored")
        return IngestResult(
            status=IngestStatus.DUPLICATE_IGNORED,
            client_txn_id=event.client_txn_id,
        )
