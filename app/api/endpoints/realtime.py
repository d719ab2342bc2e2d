"""WebSocket feed of live lead events for admin dashboards."""

import logging
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import user_from_token
from app.models.user import UserRole
from app.services import lead_events

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/leads")
async def leads_ws(websocket: WebSocket, token: str = Query(""), db: AsyncSession = Depends(get_db)):
    user = await user_from_token(db, token) if token else None
    # release the DB connection before the receive loop
    await db.close()

    if user is None or not user.is_active or user.role != UserRole.ADMIN:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        logger.warning("Rejected lead feed connection (no admin token)")
        return

    await websocket.accept()
    lead_events.register(websocket)
    try:
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        lead_events.unregister(websocket)
