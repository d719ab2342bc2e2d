"""Lead CRM models: the lead itself, its interactions and its status history."""
import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, Integer, Boolean, Date, DateTime, Enum, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.types import JSON
from sqlalchemy.orm import relationship
from app.core.database import Base, enum_values


class LeadStatus(str, enum.Enum):
    """Lead lifecycle states."""
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    CLOSED_WON = "closed_won"
    CLOSED_LOST = "closed_lost"
    NURTURING = "nurturing"


class InteractionType(str, enum.Enum):
    NOTE = "note"
    CALL = "call"
    EMAIL = "email"
    WHATSAPP = "whatsapp"
    MEETING = "meeting"
    SYSTEM = "system"


class LeadTemperature(str, enum.Enum):
    HOT = "hot"
    WARM = "warm"
    COLD = "cold"


class Lead(Base):
    """Lead model (one row per contact form submission)."""
    __tablename__ = "leads"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    company = Column(String(255), nullable=True)
    whatsapp = Column(String(50), nullable=True)
    country = Column(String(100), nullable=True)
    business_type = Column(String(100), nullable=True)
    message = Column(Text, nullable=False)
    city = Column(String(120), nullable=True)
    state = Column(String(60), nullable=True)

    status = Column(
        Enum(LeadStatus, name="lead_status", values_callable=enum_values),
        nullable=False,
        default=LeadStatus.NEW,
        index=True,
    )
    assigned_to = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)
    lead_score = Column(Integer, nullable=False, default=0)
    lead_temperature = Column(
        Enum(LeadTemperature, name="lead_temperature", values_callable=enum_values),
        nullable=True,
    )
    ai_analysis = Column(JSON, nullable=True)
    last_ai_analysis = Column(DateTime, nullable=True)
    tags = Column(JSON, nullable=True)  # ["frota", "sp", ...]

    next_action_date = Column(Date, nullable=True)
    conversion_date = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    internal_notes = Column(Text, nullable=True)
    interaction_count = Column(Integer, nullable=False, default=0)
    last_interaction = Column(DateTime, nullable=True)
    responded = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    assigned_user = relationship("User", foreign_keys=[assigned_to])
    interactions = relationship(
        "LeadInteraction", back_populates="lead", cascade="all, delete-orphan"
    )
    status_history = relationship(
        "LeadStatusHistory", back_populates="lead", cascade="all, delete-orphan"
    )


class LeadInteraction(Base):
    __tablename__ = "lead_interactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lead_id = Column(UUID(as_uuid=True), ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    type = Column(Enum(InteractionType, name="interaction_type", values_callable=enum_values), nullable=False)
    content = Column(Text, nullable=True)
    scheduled_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    lead = relationship("Lead", back_populates="interactions")
    user = relationship("User")


class LeadStatusHistory(Base):
    """Append-only audit row written on every status transition."""
    __tablename__ = "lead_status_history"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lead_id = Column(UUID(as_uuid=True), ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, index=True)
    old_status = Column(String(30), nullable=True)
    new_status = Column(String(30), nullable=False)
    changed_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    lead = relationship("Lead", back_populates="status_history")
    changed_by_user = relationship("User")
