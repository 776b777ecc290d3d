"""Event ingestion tests: payload parsing and exactly-once storage."""
from decimal import Decimal

import pytest

from app.domain.common.errors import InvalidInputError
from app.domain.devices.services import DeviceRegistry
from app.domain.payments.models import IngestStatus, NotifyPayload
from app.domain.payments.services import EventIngestor, parse_payload
from app.infra.db.repositories.device_repo import DeviceRepositoryImpl
from app.infra.db.repositories.payment_event_repo import PaymentEventRepositoryImpl


@pytest.fixture
def event_repo(db_session):
    return PaymentEventRepositoryImpl(db_session)


@pytest.fixture
def ingestor(event_repo, clock):
    return EventIngestor(event_repo, clock=clock)


@pytest.fixture
async def device(db_session, clock):
    registry = DeviceRegistry(DeviceRepositoryImpl(db_session, clock))
    token = await registry.register("d1", "n1")
    return await registry.authenticate(token)


def payload(**overrides) -> NotifyPayload:
    data = {"client_txn_id": "tx1", "bank": "X", "amount": 100, "title": "t", "message": "m"}
    data.update(overrides)
    return NotifyPayload(**data)


async def test_first_submission_recorded(ingestor, event_repo, device, clock):
    result = await ingestor.ingest(device, payload())
    assert result.status == IngestStatus.OK
    assert result.client_txn_id == "tx1"
    assert result.event_id

    stored = await event_repo.get_by_client_txn_id("tx1")
    assert stored.device_id == "d1"
    assert stored.amount == Decimal("100")
    assert stored.bank == "X"
    assert stored.created_at == clock.utcnow()


async def test_resubmission_is_duplicate_not_error(ingestor, device, count_events):
    await ingestor.ingest(device, payload())
    result = await ingestor.ingest(device, payload())
    assert result.status == IngestStatus.DUPLICATE_IGNORED
    assert result.client_txn_id == "tx1"
    assert result.event_id is None
    assert await count_events("tx1") == 1


async def test_duplicate_never_mutates_original(ingestor, event_repo, device):
    first = await ingestor.ingest(device, payload(amount=100, title="original"))
    await ingestor.ingest(device, payload(amount=999, title="changed"))

    stored = await event_repo.get_by_client_txn_id("tx1")
    assert stored.id == first.event_id
    assert stored.amount == Decimal("100")
    assert stored.title == "original"


async def test_distinct_txn_ids_each_stored(ingestor, device, count_events):
    for txn in ("tx1", "tx2", "tx3"):
        assert (await ingestor.ingest(device, payload(client_txn_id=txn))).status == IngestStatus.OK
    for txn in ("tx1", "tx2", "tx3"):
        assert await count_events(txn) == 1


@pytest.mark.parametrize("amount", [0, -5])
async def test_non_positive_amount_rejected(ingestor, device, amount):
    with pytest.raises(InvalidInputError):
        await ingestor.ingest(device, payload(amount=amount))


async def test_positive_check_can_be_disabled(event_repo, device, clock):
    lenient = EventIngestor(event_repo, clock=clock, require_positive_amount=False)
    result = await lenient.ingest(device, payload(amount=0))
    assert result.status == IngestStatus.OK


def test_parse_payload_minimal():
    parsed = parse_payload(b'{"client_txn_id":"tx1","amount":12.5}')
    assert parsed.client_txn_id == "tx1"
    assert parsed.amount == Decimal("12.5")
    assert parsed.bank is None


def test_parse_payload_ignores_unknown_fields():
    parsed = parse_payload(b'{"client_txn_id":"tx1","amount":1,"extra":"x"}')
    assert parsed.client_txn_id == "tx1"


@pytest.mark.parametrize(
    "raw",
    [
        b'{"amount":100}',
        b'{"client_txn_id":"","amount":100}',
        b'{"client_txn_id":"   ","amount":100}',
        b'{"client_txn_id":"tx1"}',
        b'{"client_txn_id":"tx1","amount":"lots"}',
        b'{"client_txn_id":"tx1","amount":null}',
        b'{"client_txn_id":"tx1","amount":"100"}',
        b'{"client_txn_id":"tx1","amount":true}',
        b'{"client_txn_id":"tx1","amount":0.001}',
        b'{"client_txn_id":"tx1","amount":1e17}',
        b'{"client_txn_id":"tx1","amount":1,"bank":"' + b"x" * 256 + b'"}',
        b"not json",
        b"[]",
        b"",
    ],
)
def test_parse_payload_rejects(raw):
    with pytest.raises(InvalidInputError):
        parse_payload(raw)


def test_parse_payload_amount_fits_storage_column():
    parsed = parse_payload(b'{"client_txn_id":"tx1","amount":12345678.91,"bank":"' + b"b" * 255 + b'"}')
    assert parsed.amount == Decimal("12345678.91")
    assert len(parsed.bank) == 255
