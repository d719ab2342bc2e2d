"""Diagnostic service configuration models.

Per-workshop availability (weekly slots + calendar exceptions), vehicle
pricing, booking settings and the on/off state of the service.
"""

from sqlalchemy import (
    Column, String, DateTime, Date, Integer, Boolean, Text, ForeignKey, Enum as SQLEnum, UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from app.core.database import Base, enum_values


class ExceptionType(str, enum.Enum):
    HOLIDAY = "holiday"
    VACATION = "vacation"
    MAINTENANCE = "maintenance"
    OTHER = "other"


class VehicleCategory(str, enum.Enum):
    POPULAR = "popular"
    MEDIUM = "medium"
    LUXURY = "luxury"


class ServiceStatus(str, enum.Enum):
    DISABLED = "disabled"
    CONFIGURING = "configuring"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class AppointmentSlot(Base):
    """Recurring weekly availability window."""
    __tablename__ = "appointment_slots"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    workshop_id = Column(UUID(as_uuid=True), ForeignKey("workshops.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0-6, 0 = Sunday
    start_time = Column(String(5), nullable=False)  # "HH:MM"
    end_time = Column(String(5), nullable=False)  # "HH:MM"
    capacity = Column(Integer, nullable=False, default=1)
    buffer_minutes = Column(Integer, nullable=False, default=15)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    workshop = relationship("Workshop", back_populates="slots")


class AppointmentException(Base):
    """One-off calendar override for a single date."""
    __tablename__ = "appointment_exceptions"
    __table_args__ = (
        UniqueConstraint("workshop_id", "date", name="uq_appointment_exceptions_workshop_date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    workshop_id = Column(UUID(as_uuid=True), ForeignKey("workshops.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    type = Column(SQLEnum(ExceptionType, name="exception_type", values_callable=enum_values), nullable=False)
    reason = Column(Text, nullable=False)
    is_full_day = Column(Boolean, nullable=False, default=True)
    start_time = Column(String(5), nullable=True)  # only when is_full_day is False
    end_time = Column(String(5), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    workshop = relationship("Workshop", back_populates="exceptions")


class AppointmentSettings(Base):
    __tablename__ = "appointment_settings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    workshop_id = Column(UUID(as_uuid=True), ForeignKey("workshops.id", ondelete="CASCADE"), nullable=False, unique=True)
    min_advance_hours = Column(Integer, nullable=False, default=2)
    max_advance_days = Column(Integer, nullable=False, default=30)
    cancellation_hours = Column(Integer, nullable=False, default=24)
    no_show_tolerance = Column(Integer, nullable=False, default=15)  # minutes
    auto_confirm = Column(Boolean, nullable=False, default=False)
    send_reminders = Column(Boolean, nullable=False, default=True)
    reminder_hours = Column(Integer, nullable=False, default=24)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class VehiclePricing(Base):
    __tablename__ = "vehicle_pricing"
    __table_args__ = (
        UniqueConstraint("workshop_id", "category", name="uq_vehicle_pricing_workshop_category"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    workshop_id = Column(UUID(as_uuid=True), ForeignKey("workshops.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(SQLEnum(VehicleCategory, name="vehicle_category", values_callable=enum_values), nullable=False)
    price = Column(Integer, nullable=False)  # cents
    estimated_duration = Column(Integer, nullable=False, default=60)  # minutes
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class DiagnosticServiceConfig(Base):
    __tablename__ = "diagnostic_service_config"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    workshop_id = Column(UUID(as_uuid=True), ForeignKey("workshops.id", ondelete="CASCADE"), nullable=False, unique=True)
    is_active = Column(Boolean, nullable=False, default=False)
    status = Column(
        SQLEnum(ServiceStatus, name="diagnostic_service_status", values_callable=enum_values),
        nullable=False,
        default=ServiceStatus.DISABLED,
    )
    suspension_reason = Column(Text, nullable=True)
    activated_at = Column(DateTime, nullable=True)
    deactivated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
