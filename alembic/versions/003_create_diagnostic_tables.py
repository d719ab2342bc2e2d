"""Create diagnostic service tables (slots, exceptions, settings, pricing,
service config, appointments)

Revision ID: 003
Revises: 002
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM, UUID

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id():
    return sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()"))


def _workshop_fk(unique=False):
    return sa.Column(
        "workshop_id", UUID(as_uuid=True), sa.ForeignKey("workshops.id", ondelete="CASCADE"),
        nullable=False, unique=unique,
    )


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    vehicle_category = sa.Enum("popular", "medium", "luxury", name="vehicle_category")

    op.create_table(
        "appointment_slots",
        _id(),
        _workshop_fk(),
        sa.Column("day_of_week", sa.Integer, nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("capacity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("buffer_minutes", sa.Integer, nullable=False, server_default="15"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_appointment_slots_workshop_id", "appointment_slots", ["workshop_id"])

    op.create_table(
        "appointment_exceptions",
        _id(),
        _workshop_fk(),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column(
            "type",
            sa.Enum("holiday", "vacation", "maintenance", "other", name="exception_type"),
            nullable=False,
        ),
        sa.Column("reason", sa.Text, nullable=False),
        sa.Column("is_full_day", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("start_time", sa.String(5), nullable=True),
        sa.Column("end_time", sa.String(5), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("workshop_id", "date", name="uq_appointment_exceptions_workshop_date"),
    )
    op.create_index("ix_appointment_exceptions_workshop_id", "appointment_exceptions", ["workshop_id"])

    op.create_table(
        "appointment_settings",
        _id(),
        _workshop_fk(unique=True),
        sa.Column("min_advance_hours", sa.Integer, nullable=False, server_default="2"),
        sa.Column("max_advance_days", sa.Integer, nullable=False, server_default="30"),
        sa.Column("cancellation_hours", sa.Integer, nullable=False, server_default="24"),
        sa.Column("no_show_tolerance", sa.Integer, nullable=False, server_default="15"),
        sa.Column("auto_confirm", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("send_reminders", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("reminder_hours", sa.Integer, nullable=False, server_default="24"),
        *_timestamps(),
    )

    op.create_table(
        "vehicle_pricing",
        _id(),
        _workshop_fk(),
        sa.Column("category", vehicle_category, nullable=False),
        sa.Column("price", sa.Integer, nullable=False),
        sa.Column("estimated_duration", sa.Integer, nullable=False, server_default="60"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint("workshop_id", "category", name="uq_vehicle_pricing_workshop_category"),
    )
    op.create_index("ix_vehicle_pricing_workshop_id", "vehicle_pricing", ["workshop_id"])

    op.create_table(
        "diagnostic_service_config",
        _id(),
        _workshop_fk(unique=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column(
            "status",
            sa.Enum("disabled", "configuring", "active", "suspended", name="diagnostic_service_status"),
            nullable=False,
            server_default="disabled",
        ),
        sa.Column("suspension_reason", sa.Text, nullable=True),
        sa.Column("activated_at", sa.DateTime, nullable=True),
        sa.Column("deactivated_at", sa.DateTime, nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "diagnostic_appointments",
        _id(),
        _workshop_fk(),
        sa.Column("customer_name", sa.String, nullable=False),
        sa.Column("customer_email", sa.String, nullable=False),
        sa.Column("customer_phone", sa.String, nullable=False),
        sa.Column("vehicle_model", sa.String, nullable=False),
        sa.Column("vehicle_year", sa.String, nullable=False),
        sa.Column("vehicle_category", ENUM("popular", "medium", "luxury", name="vehicle_category", create_type=False), nullable=True),
        sa.Column("problem_description", sa.Text, nullable=True),
        sa.Column("preferred_date", sa.Date, nullable=False),
        sa.Column("preferred_time", sa.String(5), nullable=False),
        sa.Column(
            "status",
            sa.Enum("pending", "confirmed", "in_progress", "completed", "cancelled", "no_show", name="appointment_status"),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("estimated_price", sa.Integer, nullable=True),
        sa.Column("workshop_notes", sa.Text, nullable=True),
        sa.Column("confirmation_code", sa.String, unique=True, nullable=True),
        sa.Column("check_in_time", sa.DateTime, nullable=True),
        sa.Column("check_out_time", sa.DateTime, nullable=True),
        sa.Column("cancelled_by", sa.String, nullable=True),
        sa.Column("cancellation_reason", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_diagnostic_appointments_workshop_id", "diagnostic_appointments", ["workshop_id"])
    op.create_index("ix_diagnostic_appointments_preferred_date", "diagnostic_appointments", ["preferred_date"])
    op.create_index("ix_diagnostic_appointments_status", "diagnostic_appointments", ["status"])


def downgrade() -> None:
    op.drop_table("diagnostic_appointments")
    op.drop_table("diagnostic_service_config")
    op.drop_table("vehicle_pricing")
    op.drop_table("appointment_settings")
    op.drop_table("appointment_exceptions")
    op.drop_table("appointment_slots")
    for enum_name in ("appointment_status", "diagnostic_service_status", "vehicle_category", "exception_type"):
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
