"""Diagnostic appointment model (a booked slot instance)."""

from sqlalchemy import Column, String, DateTime, Integer, Date, ForeignKey, Enum as SQLEnum, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from app.core.database import Base, enum_values
from app.models.diagnostic import VehicleCategory


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class DiagnosticAppointment(Base):
    __tablename__ = "diagnostic_appointments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    workshop_id = Column(UUID(as_uuid=True), ForeignKey("workshops.id", ondelete="CASCADE"), nullable=False, index=True)

    # Customer info
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    customer_phone = Column(String, nullable=False)

    # Vehicle
    vehicle_model = Column(String, nullable=False)
    vehicle_year = Column(String, nullable=False)
    vehicle_category = Column(SQLEnum(VehicleCategory, name="vehicle_category", values_callable=enum_values), nullable=True)
    problem_description = Column(Text, nullable=True)

    # Appointment details
    preferred_date = Column(Date, nullable=False, index=True)
    preferred_time = Column(String(5), nullable=False)  # "HH:MM"
    status = Column(
        SQLEnum(AppointmentStatus, name="appointment_status", values_callable=enum_values),
        default=AppointmentStatus.PENDING,
        nullable=False,
        index=True,
    )
    estimated_price = Column(Integer, nullable=True)  # cents
    workshop_notes = Column(Text, nullable=True)
    confirmation_code = Column(String, unique=True, nullable=True)
    check_in_time = Column(DateTime, nullable=True)
    check_out_time = Column(DateTime, nullable=True)
    cancelled_by = Column(String, nullable=True)  # customer, workshop, system
    cancellation_reason = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    workshop = relationship("Workshop", backref="diagnostic_appointments")
