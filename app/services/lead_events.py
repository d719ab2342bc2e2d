"""Live lead events pushed to connected admin dashboards.

Every push is best-effort: failures are logged and never reach the caller.
"""

import logging
from datetime import datetime
from typing import Any, Optional, Set
from fastapi import WebSocket
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.lead import Lead, LeadStatus

logger = logging.getLogger(__name__)

NEW_LEAD = "new_lead"
STATUS_CHANGED = "status_changed"
LEAD_ASSIGNED = "lead_assigned"
NEW_INTERACTION = "new_interaction"
LEAD_STATS = "lead_stats"

_connections: Set[WebSocket] = set()


def register(ws: WebSocket) -> None:
    _connections.add(ws)
    logger.info("Lead dashboard client connected (%d total)", len(_connections))


def unregister(ws: WebSocket) -> None:
    _connections.discard(ws)
    logger.info("Lead dashboard client disconnected (%d remaining)", len(_connections))


def connection_count() -> int:
    return len(_connections)


async def broadcast(message: dict):
    """Send a JSON message to all connected clients, dropping dead sockets."""
    dead = set()
    for ws in list(_connections):
        try:
            await ws.send_json(message)
        except Exception:
            dead.add(ws)
    _connections.difference_update(dead)


def build_event(event_type: str, lead_id: Optional[Any], data: Optional[dict] = None) -> dict:
    return {
        "type": event_type,
        "leadId": str(lead_id) if lead_id is not None else None,
        "data": data or {},
        "timestamp": datetime.utcnow().isoformat(),
    }


async def status_counts(db: AsyncSession) -> dict[str, int]:
    """Lead count per status, every status present (zero when empty)."""
    result = await db.execute(select(Lead.status, func.count(Lead.id)).group_by(Lead.status))
    counts = {s.value: 0 for s in LeadStatus}
    for lead_status, count in result.all():
        key = lead_status.value if isinstance(lead_status, LeadStatus) else str(lead_status)
        counts[key] = count
    return counts


async def publish(event_type: str, lead_id, data: Optional[dict] = None, db: Optional[AsyncSession] = None):
    """Broadcast one lead event; with `db`, follow it by a lead_stats snapshot."""
    if not _connections:
        return
    try:
        await broadcast(build_event(event_type, lead_id, data))
        if db is not None and event_type in (NEW_LEAD, STATUS_CHANGED):
            counts = await status_counts(db)
            await broadcast(build_event(LEAD_STATS, None, {"byStatus": counts, "total": sum(counts.values())}))
    except Exception as e:
        logger.warning("Lead event push failed (%s): %s", event_type, e)
