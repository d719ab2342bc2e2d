"""Pydantic schemas for Leads."""

from datetime import date, datetime
from uuid import UUID
from typing import Any, Literal, Optional
from pydantic import EmailStr, Field, field_validator
from app.models.lead import InteractionType, LeadStatus, LeadTemperature
from app.schemas.common import CamelModel, UserSummary, to_naive_utc


class ContactCreate(CamelModel):
    """Public contact form submission (creates a lead)."""
    full_name: str = Field(min_length=2, max_length=255)
    email: EmailStr
    company: Optional[str] = None
    whatsapp: Optional[str] = None
    country: Optional[str] = None
    business_type: Optional[str] = None
    message: str = Field(min_length=1)
    city: Optional[str] = None
    state: Optional[str] = None


class LeadOut(CamelModel):
    """Schema for returning lead details."""
    id: UUID
    full_name: str
    email: str
    company: Optional[str] = None
    whatsapp: Optional[str] = None
    country: Optional[str] = None
    business_type: Optional[str] = None
    message: str
    city: Optional[str] = None
    state: Optional[str] = None
    status: LeadStatus
    assigned_to: Optional[UUID] = None
    lead_score: int
    lead_temperature: Optional[LeadTemperature] = None
    ai_analysis: Optional[dict[str, Any]] = None
    last_ai_analysis: Optional[datetime] = None
    tags: Optional[list[str]] = None
    next_action_date: Optional[date] = None
    conversion_date: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    internal_notes: Optional[str] = None
    interaction_count: int
    last_interaction: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class LeadListItem(LeadOut):
    assigned_user: Optional[UserSummary] = None


class LeadListOut(CamelModel):
    leads: list[LeadListItem]
    total: int
    page: int
    limit: int
    total_pages: int


class LeadQuery(CamelModel):
    """Filters, paging and sort for the admin lead list."""
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)
    status: Optional[LeadStatus] = None
    assigned_to: Optional[UUID] = None
    search: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    tags: Optional[list[str]] = None
    min_score: Optional[int] = Field(None, ge=0, le=100)
    max_score: Optional[int] = Field(None, ge=0, le=100)
    sort_by: Literal["createdAt", "leadScore", "lastInteraction", "company"] = "createdAt"
    sort_order: Literal["asc", "desc"] = "desc"

    @field_validator("start_date", "end_date")
    @classmethod
    def _utc_bounds(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)


class LeadInteractionOut(CamelModel):
    id: UUID
    lead_id: UUID
    user_id: Optional[UUID] = None
    type: InteractionType
    content: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    user: Optional[UserSummary] = None


class LeadStatusHistoryOut(CamelModel):
    id: UUID
    lead_id: UUID
    old_status: Optional[str] = None
    new_status: str
    reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    changed_by: Optional[UserSummary] = None


class LeadDetailOut(LeadListItem):
    interactions: list[LeadInteractionOut]
    status_history: list[LeadStatusHistoryOut]


class LeadStatusUpdate(CamelModel):
    """Body of PUT /admin/leads/{id}/status."""
    new_status: LeadStatus
    reason: Optional[str] = None
    notes: Optional[str] = None


class LeadInteractionCreate(CamelModel):
    type: InteractionType
    content: str
    scheduled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class LeadAssign(CamelModel):
    user_id: UUID
    notify_user: bool = True


class ContactReceipt(CamelModel):
    contact_id: UUID
    lead_score: int
    lead_temperature: Optional[LeadTemperature] = None


# Dashboard

class LeadMetrics(CamelModel):
    total_leads: int
    new_leads: int
    conversions: int
    conversion_rate: float


class DailyConversion(CamelModel):
    date: str  # YYYY-MM-DD
    leads: int
    conversions: int
    rate: float


class PipelineStage(CamelModel):
    name: str
    count: int
    percentage: float
    color: str


class TeamPerformer(CamelModel):
    id: UUID
    name: str
    email: str
    total_leads: int
    conversions: int
    conversion_rate: float
    rank: int


class LeadDashboardOut(CamelModel):
    start_date: datetime
    end_date: datetime
    metrics: LeadMetrics
    daily: list[DailyConversion]
    pipeline: list[PipelineStage]
    team: list[TeamPerformer]
