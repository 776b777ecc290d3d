"""Nonce database model (replay protection)."""
from sqlalchemy import Column, String, DateTime

from app.infra.db.base import Base


class NonceModel(Base):
    """A nonce that has been spent. The primary key is the uniqueness guarantee."""

    __tablename__ = "nonces"

    nonce = Column(String(255), primary_key=True)
    device_id = Column(String(128), nullable=True)
    seen_at = Column(DateTime, nullable=False, index=True)
