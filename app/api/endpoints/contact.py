"""Public contact form: every submission becomes a scored lead."""

import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.schemas.common import ApiResponse
from app.schemas.lead import ContactCreate, ContactReceipt
from app.services import lead_service
from app.services.lead_scoring import LeadScorer, get_lead_scorer

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=ApiResponse[ContactReceipt], status_code=201)
async def submit_contact(
    payload: ContactCreate,
    db: AsyncSession = Depends(get_db),
    scorer: LeadScorer = Depends(get_lead_scorer),
):
    lead = await lead_service.create_from_contact(db, payload, scorer)
    return ApiResponse(
        data=ContactReceipt(
            contact_id=lead.id,
            lead_score=lead.lead_score,
            lead_temperature=lead.lead_temperature,
        ),
        message="Mensagem enviada com sucesso",
    )
