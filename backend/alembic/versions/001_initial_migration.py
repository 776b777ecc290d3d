"""Devices, nonces and payment events.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None

device_status = sa.Enum("active", "disabled", name="device_status")


def upgrade() -> None:
    op.create_table(
        "devices",
        sa.Column("device_id", sa.String(length=128), nullable=False),
        sa.Column("device_name", sa.String(length=255), nullable=False),
        sa.Column("device_token", sa.String(length=128), nullable=False),
        sa.Column("status", device_status, nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("device_id"),
    )
    op.create_index("ix_devices_device_token", "devices", ["device_token"], unique=True)

    op.create_table(
        "nonces",
        sa.Column("nonce", sa.String(length=255), nullable=False),
        sa.Column("device_id", sa.String(length=128), nullable=True),
        sa.Column("seen_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("nonce"),
    )
    op.create_index("ix_nonces_seen_at", "nonces", ["seen_at"], unique=False)

    op.create_table(
        "payment_events",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("client_txn_id", sa.String(length=128), nullable=False),
        sa.Column("device_id", sa.String(length=128), nullable=False),
        sa.Column("bank", sa.String(length=255), nullable=True),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["device_id"], ["devices.device_id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payment_events_client_txn_id", "payment_events", ["client_txn_id"], unique=True)
    op.create_index("ix_payment_events_device_id", "payment_events", ["device_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_payment_events_device_id", table_name="payment_events")
    op.drop_index("ix_payment_events_client_txn_id", table_name="payment_events")
    op.drop_table("payment_events")
    op.drop_index("ix_nonces_seen_at", table_name="nonces")
    op.drop_table("nonces")
    op.drop_index("ix_devices_device_token", table_name="devices")
    op.drop_table("devices")
    device_status.drop(op.get_bind(), checkfirst=True)
