"""Create leads, lead_interactions and lead_status_history tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LEAD_STATUSES = (
    "new", "contacted", "qualified", "proposal", "negotiation", "closed_won", "closed_lost", "nurturing",
)


def upgrade() -> None:
    op.create_table(
        "leads",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("whatsapp", sa.String(50), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("business_type", sa.String(100), nullable=True),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("city", sa.String(120), nullable=True),
        sa.Column("state", sa.String(60), nullable=True),
        sa.Column("status", sa.Enum(*LEAD_STATUSES, name="lead_status"), nullable=False, server_default="new"),
        sa.Column("assigned_to", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("lead_score", sa.Integer, nullable=False, server_default="0"),
        sa.Column("lead_temperature", sa.Enum("hot", "warm", "cold", name="lead_temperature"), nullable=True),
        sa.Column("ai_analysis", sa.JSON, nullable=True),
        sa.Column("last_ai_analysis", sa.DateTime, nullable=True),
        sa.Column("tags", sa.JSON, nullable=True),
        sa.Column("next_action_date", sa.Date, nullable=True),
        sa.Column("conversion_date", sa.DateTime, nullable=True),
        sa.Column("rejection_reason", sa.Text, nullable=True),
        sa.Column("internal_notes", sa.Text, nullable=True),
        sa.Column("interaction_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_interaction", sa.DateTime, nullable=True),
        sa.Column("responded", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_leads_email", "leads", ["email"])
    op.create_index("ix_leads_status", "leads", ["status"])
    op.create_index("ix_leads_assigned_to", "leads", ["assigned_to"])
    op.create_index("ix_leads_created_at", "leads", ["created_at"])

    op.create_table(
        "lead_interactions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("lead_id", UUID(as_uuid=True), sa.ForeignKey("leads.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=True),
        sa.Column(
            "type",
            sa.Enum("note", "call", "email", "whatsapp", "meeting", "system", name="interaction_type"),
            nullable=False,
        ),
        sa.Column("content", sa.Text, nullable=True),
        sa.Column("scheduled_at", sa.DateTime, nullable=True),
        sa.Column("completed_at", sa.DateTime, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_lead_interactions_lead_id", "lead_interactions", ["lead_id"])

    op.create_table(
        "lead_status_history",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("lead_id", UUID(as_uuid=True), sa.ForeignKey("leads.id", ondelete="CASCADE"), nullable=False),
        sa.Column("old_status", sa.String(30), nullable=True),
        sa.Column("new_status", sa.String(30), nullable=False),
        sa.Column("changed_by", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("reason", sa.Text, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_lead_status_history_lead_id", "lead_status_history", ["lead_id"])


def downgrade() -> None:
    op.drop_table("lead_status_history")
    op.drop_table("lead_interactions")
    op.drop_table("leads")
    op.execute("DROP TYPE IF EXISTS interaction_type")
    op.execute("DROP TYPE IF EXISTS lead_temperature")
    op.execute("DROP TYPE IF EXISTS lead_status")
