"""Pydantic schemas for the workshop diagnostic configuration."""

from datetime import date as DateType, datetime
from uuid import UUID
from typing import Optional
from pydantic import Field
from app.models.diagnostic import ExceptionType, ServiceStatus, VehicleCategory
from app.schemas.common import CamelModel

# Zero-padded 24h clock; lexicographic order of these strings is time order.
TIME_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"


class SlotCreate(CamelModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    capacity: int = 1
    buffer_minutes: int = 15
    is_active: bool = True


class SlotUpdate(CamelModel):
    """Partial update; omitted fields keep their stored value."""
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    capacity: Optional[int] = None
    buffer_minutes: Optional[int] = None
    is_active: Optional[bool] = None


class SlotOut(CamelModel):
    id: UUID
    workshop_id: UUID
    day_of_week: int
    start_time: str
    end_time: str
    capacity: int
    buffer_minutes: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ExceptionCreate(CamelModel):
    date: Optional[DateType] = None
    type: ExceptionType = ExceptionType.HOLIDAY
    reason: str = ""
    is_full_day: bool = True
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)


class ExceptionUpdate(CamelModel):
    date: Optional[DateType] = None
    type: Optional[ExceptionType] = None
    reason: Optional[str] = None
    is_full_day: Optional[bool] = None
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)


class ExceptionOut(CamelModel):
    id: UUID
    workshop_id: UUID
    date: DateType
    type: ExceptionType
    reason: str
    is_full_day: bool
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    created_at: Optional[datetime] = None


class PricingUpdate(CamelModel):
    category: VehicleCategory
    price: int = Field(ge=1000, le=100000)  # cents: R$ 10 to R$ 1000
    estimated_duration: Optional[int] = Field(None, ge=30, le=240)


class PricingOut(CamelModel):
    id: UUID
    workshop_id: UUID
    category: VehicleCategory
    price: int
    estimated_duration: int
    is_active: bool


class SettingsUpdate(CamelModel):
    min_advance_hours: Optional[int] = Field(None, ge=0, le=168)
    max_advance_days: Optional[int] = Field(None, ge=1, le=365)
    cancellation_hours: Optional[int] = Field(None, ge=0, le=72)
    no_show_tolerance: Optional[int] = Field(None, ge=0, le=60)
    auto_confirm: Optional[bool] = None
    send_reminders: Optional[bool] = None
    reminder_hours: Optional[int] = Field(None, ge=1, le=48)


class SettingsOut(CamelModel):
    min_advance_hours: int = 2
    max_advance_days: int = 30
    cancellation_hours: int = 24
    no_show_tolerance: int = 15
    auto_confirm: bool = False
    send_reminders: bool = True
    reminder_hours: int = 24


class ActivationCheck(CamelModel):
    can_activate: bool
    errors: list[str]
    warnings: list[str]


class ServiceStatusOut(CamelModel):
    workshop_id: UUID
    is_active: bool
    status: ServiceStatus
    suspension_reason: Optional[str] = None
    activated_at: Optional[datetime] = None
    deactivated_at: Optional[datetime] = None
    validation: Optional[ActivationCheck] = None


class ToggleRequest(CamelModel):
    activate: bool
