"""Admin lead pipeline endpoints.

- GET  /api/admin/leads                      -> filtered, paginated list
- GET  /api/admin/leads/dashboard            -> aggregate metrics for a period
- GET  /api/admin/leads/export               -> CSV attachment or JSON
- GET  /api/admin/leads/{id}                 -> detail with interactions and history
- PUT  /api/admin/leads/{id}/status          -> status transition
- POST /api/admin/leads/{id}/interaction     -> log an interaction
- POST /api/admin/leads/{id}/assign          -> reassign
"""

import logging
from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import require_admin
from app.models.lead import LeadStatus
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.lead import (
    LeadAssign,
    LeadDashboardOut,
    LeadDetailOut,
    LeadInteractionCreate,
    LeadInteractionOut,
    LeadListItem,
    LeadListOut,
    LeadQuery,
    LeadStatusUpdate,
)
from app.services import lead_dashboard, lead_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=ApiResponse[LeadListOut])
async def list_leads(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[LeadStatus] = Query(None),
    assigned_to: Optional[UUID] = Query(None, alias="assignedTo"),
    search: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    tags: Optional[str] = Query(None, description="Comma-separated tags; matches any"),
    min_score: Optional[int] = Query(None, ge=0, le=100, alias="minScore"),
    max_score: Optional[int] = Query(None, ge=0, le=100, alias="maxScore"),
    sort_by: Literal["createdAt", "leadScore", "lastInteraction", "company"] = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    query = LeadQuery(
        page=page,
        limit=limit,
        status=status,
        assigned_to=assigned_to,
        search=search or None,
        start_date=start_date,
        end_date=end_date,
        tags=[t.strip() for t in tags.split(",") if t.strip()] if tags else None,
        min_score=min_score,
        max_score=max_score,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return ApiResponse(data=await lead_service.list_leads(db, query))


@router.get("/dashboard", response_model=ApiResponse[LeadDashboardOut])
async def lead_dashboard_data(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return ApiResponse(data=await lead_dashboard.build_dashboard(db, start_date, end_date))


@router.get("/export")
async def export_leads(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    format: Literal["csv", "json"] = Query("csv"),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await lead_dashboard.export_leads(db, start_date, end_date, format)
    if format == "json":
        return ApiResponse[list[LeadListItem]](data=result)
    return result


@router.get("/{lead_id}", response_model=ApiResponse[LeadDetailOut])
async def get_lead(
    lead_id: UUID,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return ApiResponse(data=await lead_service.get_lead_detail(db, lead_id))


@router.put("/{lead_id}/status", response_model=ApiResponse[LeadListItem])
async def update_lead_status(
    lead_id: UUID,
    payload: LeadStatusUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    lead = await lead_service.update_status(db, lead_id, payload, current_user)
    return ApiResponse(
        data=LeadListItem.model_validate(lead),
        message="Lead status updated successfully",
    )


@router.post("/{lead_id}/interaction", response_model=ApiResponse[LeadInteractionOut])
async def add_lead_interaction(
    lead_id: UUID,
    payload: LeadInteractionCreate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    interaction = await lead_service.add_interaction(db, lead_id, payload, current_user)
    return ApiResponse(
        data=LeadInteractionOut(
            id=interaction.id,
            lead_id=interaction.lead_id,
            user_id=interaction.user_id,
            type=interaction.type,
            content=interaction.content,
            scheduled_at=interaction.scheduled_at,
            completed_at=interaction.completed_at,
            created_at=interaction.created_at,
        ),
        message="Interaction added successfully",
    )


@router.post("/{lead_id}/assign", response_model=ApiResponse[LeadListItem])
async def assign_lead(
    lead_id: UUID,
    payload: LeadAssign,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    lead, assignee = await lead_service.assign_lead(db, lead_id, payload, current_user)
    return ApiResponse(
        data=LeadListItem.model_validate(lead),
        message=f"Lead assigned to {assignee.name}",
    )
