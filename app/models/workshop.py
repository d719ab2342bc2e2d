"""Workshop (oficina) model.

A workshop owns its diagnostic configuration: recurring slots, calendar
exceptions, vehicle pricing and booking settings.
"""

from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
from app.core.database import Base


class Workshop(Base):
    __tablename__ = "workshops"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    unique_code = Column(String, unique=True, nullable=True)  # e.g. RCW-1234
    address = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("User", back_populates="workshops")
    slots = relationship("AppointmentSlot", back_populates="workshop", cascade="all, delete-orphan")
    exceptions = relationship("AppointmentException", back_populates="workshop", cascade="all, delete-orphan")
