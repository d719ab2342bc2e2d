"""Lead dashboard aggregates and CSV/JSON export."""

import csv
import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from io import StringIO
from typing import Optional

from fastapi.responses import StreamingResponse
from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.lead import Lead, LeadStatus
from app.models.user import User, UserRole
from app.schemas.common import to_naive_utc
from app.schemas.lead import (
    DailyConversion,
    LeadDashboardOut,
    LeadListItem,
    LeadMetrics,
    PipelineStage,
    TeamPerformer,
)

logger = logging.getLogger(__name__)

DEFAULT_PERIOD_DAYS = 30

STATUS_COLORS = {
    "new": "#3b82f6",
    "contacted": "#f59e0b",
    "qualified": "#8b5cf6",
    "proposal": "#f97316",
    "negotiation": "#6366f1",
    "closed_won": "#10b981",
    "closed_lost": "#ef4444",
    "nurturing": "#6b7280",
}
DEFAULT_COLOR = "#94a3b8"

CSV_HEADER = [
    "ID", "Nome", "Email", "WhatsApp", "Empresa", "Cidade", "Estado", "Status",
    "Score", "Responsável", "Data Criação", "Última Interação", "Mensagem",
]


def resolve_period(start: Optional[datetime], end: Optional[datetime]) -> tuple[datetime, datetime]:
    """Missing bounds default to the last 30 days ending now; offset-bearing bounds become naive UTC."""
    end = to_naive_utc(end) or datetime.utcnow()
    start = to_naive_utc(start) or end - timedelta(days=DEFAULT_PERIOD_DAYS)
    return start, end


def _rate(part: int, total: int) -> float:
    return round(part * 100.0 / total, 1) if total else 0.0


def status_color(status_value: str) -> str:
    return STATUS_COLORS.get(status_value, DEFAULT_COLOR)


async def build_dashboard(
    db: AsyncSession, start: Optional[datetime] = None, end: Optional[datetime] = None
) -> LeadDashboardOut:
    start, end = resolve_period(start, end)
    in_period = (Lead.created_at >= start, Lead.created_at <= end)

    rows = (await db.execute(
        select(Lead.created_at, Lead.status).where(*in_period).order_by(Lead.created_at)
    )).all()

    total = len(rows)
    new_leads = sum(1 for _, s in rows if s == LeadStatus.NEW)
    conversions = sum(1 for _, s in rows if s == LeadStatus.CLOSED_WON)

    # Daily series, one entry per day that has leads
    daily: "OrderedDict[str, list[int]]" = OrderedDict()
    for created_at, lead_status in rows:
        bucket = daily.setdefault(created_at.date().isoformat(), [0, 0])
        bucket[0] += 1
        if lead_status == LeadStatus.CLOSED_WON:
            bucket[1] += 1

    by_status: dict[str, int] = {}
    for _, lead_status in rows:
        by_status[lead_status.value] = by_status.get(lead_status.value, 0) + 1

    pipeline = [
        PipelineStage(
            name=s.value,
            count=by_status[s.value],
            percentage=_rate(by_status[s.value], total),
            color=status_color(s.value),
        )
        for s in LeadStatus
        if s.value in by_status
    ]

    team_rows = (await db.execute(
        select(
            User.id,
            User.name,
            User.email,
            func.count(Lead.id),
            func.count(case((Lead.status == LeadStatus.CLOSED_WON, 1))),
        )
        .select_from(User)
        .outerjoin(Lead, (Lead.assigned_to == User.id) & (Lead.created_at >= start) & (Lead.created_at <= end))
        .where(User.role == UserRole.ADMIN)
        .group_by(User.id, User.name, User.email)
        .order_by(User.name)
    )).all()

    team = [
        TeamPerformer(
            id=user_id,
            name=name,
            email=email,
            total_leads=assigned,
            conversions=won,
            conversion_rate=_rate(won, assigned),
            rank=index + 1,
        )
        for index, (user_id, name, email, assigned, won) in enumerate(team_rows)
    ]

    return LeadDashboardOut(
        start_date=start,
        end_date=end,
        metrics=LeadMetrics(
            total_leads=total,
            new_leads=new_leads,
            conversions=conversions,
            conversion_rate=_rate(conversions, total),
        ),
        daily=[
            DailyConversion(date=day, leads=leads, conversions=won, rate=_rate(won, leads))
            for day, (leads, won) in daily.items()
        ],
        pipeline=pipeline,
        team=team,
    )


async def leads_in_period(db: AsyncSession, start: datetime, end: datetime) -> list[Lead]:
    result = await db.execute(
        select(Lead)
        .where(Lead.created_at >= start, Lead.created_at <= end)
        .options(selectinload(Lead.assigned_user))
        .order_by(Lead.created_at.desc())
    )
    return list(result.scalars().all())


def _iso(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


def render_csv(leads: list[Lead]) -> str:
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_HEADER)
    for lead in leads:
        writer.writerow([
            str(lead.id),
            lead.full_name,
            lead.email,
            lead.whatsapp or "",
            lead.company or "",
            lead.city or "",
            lead.state or "",
            lead.status.value,
            lead.lead_score if lead.lead_score is not None else "",
            lead.assigned_user.name if lead.assigned_user else "",
            _iso(lead.created_at),
            _iso(lead.last_interaction),
            lead.message,
        ])
    return output.getvalue()


async def export_leads(
    db: AsyncSession,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    export_format: str = "csv",
):
    """CSV attachment, or the lead list for the JSON envelope."""
    start, end = resolve_period(start, end)
    leads = await leads_in_period(db, start, end)

    if export_format == "json":
        logger.info("Lead export (json): %d leads", len(leads))
        return [LeadListItem.model_validate(lead) for lead in leads]

    filename = f"leads-{start.date().isoformat()}-{end.date().isoformat()}.csv"
    logger.info("Lead export (csv): %s (%d leads)", filename, len(leads))
    return StreamingResponse(
        iter([render_csv(leads)]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
