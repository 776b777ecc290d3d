"""Pytest configuration for tests directory.

Store: in-memory SQLite (aiosqlite + StaticPool) with the real models.
Time: a frozen clock so timestamp-window edges are exact.
"""
import sys
from datetime import datetime, timezone
from pathlib import Path

backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from app.domain.security.signing import compute_signature
from app.infra.db.base import Base, build_engine, build_sessionmaker
from app.infra.db import models  # noqa: F401
from app.infra.db.models.payment_event import PaymentEventModel
from app.main import create_app
from app.settings import Settings

FROZEN_NOW = 1_760_000_000.0
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests that need a real DB (deselect with '-m \"not integration\"')"
    )


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: float = FROZEN_NOW):
        self._now = now

    def now(self) -> float:
        return self._now

    def utcnow(self) -> datetime:
        return datetime.fromtimestamp(self._now, tz=timezone.utc).replace(tzinfo=None)

    def advance(self, seconds: float) -> None:
        self._now += seconds


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
async def engine():
    """Fresh in-memory database with all tables."""
    engine = build_engine(TEST_DB_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def settings():
    return Settings(
        database_url=TEST_DB_URL,
        registration_secret="",
        create_tables_on_startup=False,
        nonce_prune_interval_seconds=0,
    )


@pytest.fixture
def app(settings, engine, clock):
    return create_app(settings, engine=engine, clock=clock)


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def signed_headers(clock):
    """Build the four security headers for a body, signed with the given token."""

    def _build(token: str, body: bytes, nonce: str, timestamp: str | None = None) -> dict:
        ts = timestamp if timestamp is not None else str(int(clock.now()))
        return {
            "Authorization": f"Bearer {token}",
            "X-Timestamp": ts,
            "X-Nonce": nonce,
            "X-Signature": compute_signature(token, body, ts, nonce),
            "Content-Type": "application/json",
        }

    return _build


@pytest.fixture
async def registered_device(client):
    """Register device d1 over HTTP; returns (device_id, token)."""
    response = await client.post(
        "/register",
        json={"device_id": "d1", "device_name": "n1"},
        headers={"X-Device-Fingerprint": "fp-d1"},
    )
    assert response.status_code == 200
    return "d1", response.json()["device_token"]


@pytest.fixture
def count_events(db_session):
    """Number of stored payment events for a client_txn_id."""

    async def _count(client_txn_id: str) -> int:
        result = await db_session.execute(
            select(func.count())
            .select_from(PaymentEventModel)
            .where(PaymentEventModel.client_txn_id == client_txn_id)
        )
        return int(result.scalar_one())

    return _count
