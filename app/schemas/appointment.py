"""Pydantic schemas for diagnostic appointments."""

from datetime import datetime, date
from uuid import UUID
from typing import Optional
from app.models.appointment import AppointmentStatus
from app.models.diagnostic import VehicleCategory
from app.schemas.common import CamelModel


class AppointmentOut(CamelModel):
    id: UUID
    workshop_id: UUID
    customer_name: str
    customer_email: str
    customer_phone: str
    vehicle_model: str
    vehicle_year: str
    vehicle_category: Optional[VehicleCategory] = None
    problem_description: Optional[str] = None
    preferred_date: date
    preferred_time: str
    status: AppointmentStatus
    estimated_price: Optional[int] = None
    workshop_notes: Optional[str] = None
    confirmation_code: Optional[str] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    cancelled_by: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None


class AppointmentStatusUpdate(CamelModel):
    """Body of PUT /appointments/{id}/status."""
    status: AppointmentStatus
    reason: Optional[str] = None
    workshop_notes: Optional[str] = None
