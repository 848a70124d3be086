"""Initial schema: events (read-only mirror) and registrations with waitlist index.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("registration_type", sa.String(20), nullable=False, server_default=sa.text("'open'")),
        sa.Column("invite_code", sa.String(64), nullable=True),
        sa.Column("organizer_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("capacity IS NULL OR capacity >= 0", name="check_event_capacity_non_negative"),
        sa.CheckConstraint(
            "registration_type IN ('open', 'invite_only', 'closed')",
            name="check_event_registration_type",
        ),
    )
    op.create_index("ix_events_id", "events", ["id"])
    op.create_index("ix_events_date", "events", ["date"])

    op.create_table(
        "registrations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'registered'")),
        sa.Column("invite_code_used", sa.String(64), nullable=True),
        sa.Column("registered_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        # One row per user per event; re-registration reuses it
        sa.UniqueConstraint("event_id", "user_id", name="uq_registration_event_user"),
        sa.CheckConstraint(
            "status IN ('registered', 'waitlist', 'cancelled', 'attended', 'invited')",
            name="check_registration_status",
        ),
    )
    op.create_index("ix_registrations_id", "registrations", ["id"])
    op.create_index("ix_registrations_event_id", "registrations", ["event_id"])
    op.create_index("ix_registrations_user_id", "registrations", ["user_id"])
    # Serves the admitted-seat COUNT (event_id, status) and the FIFO waitlist
    # scan (event_id, status='waitlist' ORDER BY registered_at) from one index.
    op.create_index(
        "ix_registrations_event_status_registered_at",
        "registrations",
        ["event_id", "status", "registered_at"],
    )


def downgrade() -> None:
    op.drop_table("registrations")
    op.drop_table("events")
