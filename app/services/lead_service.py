"""Lead pipeline operations: listing, detail, status changes, assignment,
interactions and capture from the public contact form.

Every mutation runs as one unit of work: all rows are staged on the session
and committed once, or rolled back together. Live pushes happen after the
commit and are best-effort.
"""

import logging
import math
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select, func, or_, String, cast
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.database import json_serializer
from app.models.lead import Lead, LeadInteraction, LeadStatus, LeadStatusHistory, InteractionType, LeadTemperature
from app.models.user import User
from app.schemas.common import UserSummary
from app.schemas.lead import (
    ContactCreate,
    LeadAssign,
    LeadDetailOut,
    LeadInteractionCreate,
    LeadInteractionOut,
    LeadListItem,
    LeadListOut,
    LeadQuery,
    LeadStatusHistoryOut,
    LeadStatusUpdate,
)
from app.services import lead_events
from app.services.lead_scoring import LeadInput, LeadScorer, RuleBasedLeadScorer
from app.services.notification_service import create_lead_assigned_notification

logger = logging.getLogger(__name__)

# Forward moves allowed when LEAD_STRICT_TRANSITIONS is on.
LEAD_TRANSITIONS: dict[LeadStatus, set[LeadStatus]] = {
    LeadStatus.NEW: {LeadStatus.CONTACTED, LeadStatus.NURTURING, LeadStatus.CLOSED_LOST},
    LeadStatus.CONTACTED: {LeadStatus.QUALIFIED, LeadStatus.NURTURING, LeadStatus.CLOSED_LOST},
    LeadStatus.QUALIFIED: {LeadStatus.PROPOSAL, LeadStatus.NURTURING, LeadStatus.CLOSED_LOST},
    LeadStatus.PROPOSAL: {LeadStatus.NEGOTIATION, LeadStatus.NURTURING, LeadStatus.CLOSED_LOST},
    LeadStatus.NEGOTIATION: {LeadStatus.CLOSED_WON, LeadStatus.CLOSED_LOST, LeadStatus.NURTURING},
    LeadStatus.NURTURING: {LeadStatus.CONTACTED, LeadStatus.QUALIFIED, LeadStatus.CLOSED_LOST},
    LeadStatus.CLOSED_WON: {LeadStatus.NURTURING},
    LeadStatus.CLOSED_LOST: {LeadStatus.NURTURING},
}

SORT_COLUMNS = {
    "createdAt": Lead.created_at,
    "leadScore": Lead.lead_score,
    "lastInteraction": Lead.last_interaction,
    "company": Lead.company,
}


def is_transition_allowed(old: LeadStatus, new: LeadStatus, strict: Optional[bool] = None) -> bool:
    if strict is None:
        strict = settings.LEAD_STRICT_TRANSITIONS
    if not strict:
        return True
    return new in LEAD_TRANSITIONS.get(old, set())


def _user_summary(user: Optional[User]) -> Optional[UserSummary]:
    if user is None:
        return None
    return UserSummary(id=user.id, name=user.name, email=user.email)


async def get_lead_or_404(db: AsyncSession, lead_id: UUID, for_update: bool = False) -> Lead:
    query = select(Lead).where(Lead.id == lead_id).options(selectinload(Lead.assigned_user))
    if for_update:
        query = query.with_for_update(of=Lead)
    result = await db.execute(query.execution_options(populate_existing=True))
    lead = result.scalar_one_or_none()
    if not lead:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lead not found")
    return lead


def escape_like(value: str) -> str:
    """Make LIKE wildcards in user input match literally (escape char is a backslash)."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_lead_filters(query: LeadQuery) -> list:
    """WHERE clauses for the list/export queries; absent filters add nothing."""
    filters = []
    if query.status:
        filters.append(Lead.status == query.status)
    if query.assigned_to:
        filters.append(Lead.assigned_to == query.assigned_to)
    if query.search:
        pattern = f"%{escape_like(query.search)}%"
        filters.append(or_(
            Lead.full_name.ilike(pattern, escape="\\"),
            Lead.company.ilike(pattern, escape="\\"),
            Lead.email.ilike(pattern, escape="\\"),
            Lead.message.ilike(pattern, escape="\\"),
        ))
    if query.start_date:
        filters.append(Lead.created_at >= query.start_date)
    if query.end_date:
        filters.append(Lead.created_at <= query.end_date)
    if query.min_score is not None:
        filters.append(Lead.lead_score >= query.min_score)
    if query.max_score is not None:
        filters.append(Lead.lead_score <= query.max_score)
    if query.tags:
        # tags is a JSON array; match any of the requested tags as a serialised element
        filters.append(or_(*[
            cast(Lead.tags, String).like(f"%{escape_like(json_serializer(tag))}%", escape="\\")
            for tag in query.tags
        ]))
    return filters


async def list_leads(db: AsyncSession, query: LeadQuery) -> LeadListOut:
    filters = build_lead_filters(query)

    total = (await db.execute(select(func.count(Lead.id)).where(*filters))).scalar_one()

    column = SORT_COLUMNS[query.sort_by]
    order = column.asc() if query.sort_order == "asc" else column.desc()
    result = await db.execute(
        select(Lead)
        .where(*filters)
        .options(selectinload(Lead.assigned_user))
        .order_by(order, Lead.id)
        .offset((query.page - 1) * query.limit)
        .limit(query.limit)
    )
    leads = result.scalars().all()

    return LeadListOut(
        leads=[LeadListItem.model_validate(lead) for lead in leads],
        total=total,
        page=query.page,
        limit=query.limit,
        total_pages=math.ceil(total / query.limit),
    )


async def get_lead_detail(db: AsyncSession, lead_id: UUID) -> LeadDetailOut:
    """Lead with assignee, interactions and status history, newest first."""
    lead = await get_lead_or_404(db, lead_id)

    interactions = (await db.execute(
        select(LeadInteraction)
        .where(LeadInteraction.lead_id == lead_id)
        .options(selectinload(LeadInteraction.user))
        .order_by(LeadInteraction.created_at.desc())
    )).scalars().all()

    history = (await db.execute(
        select(LeadStatusHistory)
        .where(LeadStatusHistory.lead_id == lead_id)
        .options(selectinload(LeadStatusHistory.changed_by_user))
        .order_by(LeadStatusHistory.created_at.desc())
    )).scalars().all()

    return LeadDetailOut(
        **LeadListItem.model_validate(lead).model_dump(),
        interactions=[
            LeadInteractionOut(
                id=i.id,
                lead_id=i.lead_id,
                user_id=i.user_id,
                type=i.type,
                content=i.content,
                scheduled_at=i.scheduled_at,
                completed_at=i.completed_at,
                created_at=i.created_at,
                user=_user_summary(i.user),
            )
            for i in interactions
        ],
        status_history=[
            LeadStatusHistoryOut(
                id=h.id,
                lead_id=h.lead_id,
                old_status=h.old_status,
                new_status=h.new_status,
                reason=h.reason,
                notes=h.notes,
                created_at=h.created_at,
                changed_by=_user_summary(h.changed_by_user),
            )
            for h in history
        ],
    )


async def update_status(db: AsyncSession, lead_id: UUID, payload: LeadStatusUpdate, actor: User) -> Lead:
    """Move a lead to a new status, writing history and a system interaction.

    The lead row, the history row and the interaction commit together.
    """
    try:
        lead = await get_lead_or_404(db, lead_id, for_update=True)
        old_status = lead.status
        new_status = payload.new_status

        if not is_transition_allowed(old_status, new_status):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Transition from {old_status.value} to {new_status.value} is not allowed",
            )

        now = datetime.utcnow()
        lead.status = new_status
        lead.last_interaction = now
        lead.interaction_count = (lead.interaction_count or 0) + 1
        if new_status == LeadStatus.CLOSED_WON:
            lead.conversion_date = now
        elif new_status == LeadStatus.CLOSED_LOST and payload.reason:
            lead.rejection_reason = payload.reason

        db.add(LeadStatusHistory(
            lead_id=lead.id,
            old_status=old_status.value,
            new_status=new_status.value,
            changed_by=actor.id,
            reason=payload.reason,
            notes=payload.notes,
            created_at=now,
        ))

        suffix = f": {payload.reason}" if payload.reason else ""
        db.add(LeadInteraction(
            lead_id=lead.id,
            user_id=actor.id,
            type=InteractionType.SYSTEM,
            content=f"Status changed from {old_status.value} to {new_status.value}{suffix}",
            created_at=now,
        ))

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Lead %s status %s -> %s by %s", lead_id, old_status.value, new_status.value, actor.id)

    await lead_events.publish(
        lead_events.STATUS_CHANGED,
        lead_id,
        {"oldStatus": old_status.value, "newStatus": new_status.value, "changedBy": str(actor.id)},
        db=db,
    )
    return await get_lead_or_404(db, lead_id)


async def assign_lead(db: AsyncSession, lead_id: UUID, payload: LeadAssign, actor: User) -> tuple[Lead, User]:
    """Reassign a lead; optionally notify the assignee."""
    try:
        lead = await get_lead_or_404(db, lead_id, for_update=True)

        assignee = (await db.execute(select(User).where(User.id == payload.user_id))).scalar_one_or_none()
        if not assignee:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        lead.assigned_to = assignee.id
        lead.last_interaction = datetime.utcnow()
        db.add(LeadInteraction(
            lead_id=lead.id,
            user_id=actor.id,
            type=InteractionType.SYSTEM,
            content=f"Lead assigned to {assignee.name}",
        ))
        if payload.notify_user:
            create_lead_assigned_notification(db, assignee.id, lead)

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Lead %s assigned to %s by %s", lead_id, assignee.id, actor.id)

    if payload.notify_user:
        await lead_events.publish(
            lead_events.LEAD_ASSIGNED,
            lead_id,
            {"assignedTo": str(assignee.id), "assignedToName": assignee.name, "assignedBy": str(actor.id)},
        )
    return await get_lead_or_404(db, lead_id), assignee


async def add_interaction(
    db: AsyncSession, lead_id: UUID, payload: LeadInteractionCreate, actor: User
) -> LeadInteraction:
    """Append one interaction and bump the lead's counters."""
    try:
        lead = await get_lead_or_404(db, lead_id, for_update=True)
        interaction = LeadInteraction(
            lead_id=lead.id,
            user_id=actor.id,
            type=payload.type,
            content=payload.content,
            scheduled_at=payload.scheduled_at,
            completed_at=payload.completed_at,
        )
        db.add(interaction)
        lead.last_interaction = datetime.utcnow()
        lead.interaction_count = (lead.interaction_count or 0) + 1
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Interaction %s (%s) added to lead %s", interaction.id, payload.type.value, lead_id)

    await lead_events.publish(
        lead_events.NEW_INTERACTION,
        lead_id,
        {"interactionId": str(interaction.id), "type": payload.type.value},
    )
    return interaction


async def create_from_contact(db: AsyncSession, payload: ContactCreate, scorer: LeadScorer) -> Lead:
    """Store a contact form submission as a new lead and score it.

    Scoring failures fall back to the rule-based scorer; push failures are
    ignored. Either way the lead is saved.
    """
    lead_input = LeadInput(
        full_name=payload.full_name,
        email=payload.email,
        phone=payload.whatsapp,
        company=payload.company,
        message=payload.message,
        business_type=payload.business_type,
        country=payload.country,
        city=payload.city,
        state=payload.state,
    )
    try:
        analysis = await scorer.score(lead_input)
    except Exception as e:
        logger.error("Lead scoring failed, using rules: %s", e)
        analysis = RuleBasedLeadScorer().analyze(lead_input)

    lead = Lead(
        full_name=payload.full_name,
        email=payload.email,
        company=payload.company,
        whatsapp=payload.whatsapp,
        country=payload.country,
        business_type=payload.business_type,
        message=payload.message,
        city=payload.city,
        state=payload.state,
        status=LeadStatus.NEW,
        lead_score=analysis.lead_score,
        lead_temperature=LeadTemperature(analysis.temperature),
        ai_analysis=analysis.as_json(),
        last_ai_analysis=datetime.utcnow(),
        interaction_count=0,
    )
    db.add(lead)
    await db.commit()
    await db.refresh(lead)

    logger.info("New lead %s from contact form (score %d, %s)", lead.id, lead.lead_score, analysis.temperature)

    await lead_events.publish(
        lead_events.NEW_LEAD,
        lead.id,
        {"fullName": lead.full_name, "email": lead.email, "leadScore": lead.lead_score},
        db=db,
    )
    return lead
