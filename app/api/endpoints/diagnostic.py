"""Workshop diagnostic configuration endpoints.

All routes act on the workshop named by the x-workshop-id header.
"""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import get_current_workshop
from app.models.appointment import AppointmentStatus
from app.models.workshop import Workshop
from app.schemas.appointment import AppointmentOut, AppointmentStatusUpdate
from app.schemas.common import ApiResponse
from app.schemas.diagnostic import (
    ExceptionCreate,
    ExceptionOut,
    ExceptionUpdate,
    PricingOut,
    PricingUpdate,
    ServiceStatusOut,
    SettingsOut,
    SettingsUpdate,
    SlotCreate,
    SlotOut,
    SlotUpdate,
    ToggleRequest,
)
from app.services import diagnostic_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/status", response_model=ApiResponse[ServiceStatusOut])
async def service_status(workshop: Workshop = Depends(get_current_workshop), db: AsyncSession = Depends(get_db)):
    return ApiResponse(data=await diagnostic_service.get_service_status(db, workshop))


@router.post("/toggle", response_model=ApiResponse[ServiceStatusOut])
async def toggle_service(
    payload: ToggleRequest,
    workshop: Workshop = Depends(get_current_workshop),
    db: AsyncSession = Depends(get_db),
):
    """Activate (only when pricing and availability are complete) or deactivate."""
    result = await diagnostic_service.toggle_service(db, workshop, payload.activate)
    message = "Serviço de diagnóstico ativado com sucesso" if payload.activate else "Serviço de diagnóstico desativado"
    return ApiResponse(data=result, message=message)


# Settings

@router.get("/settings", response_model=ApiResponse[SettingsOut])
async def get_settings(workshop: Workshop = Depends(get_current_workshop), db: AsyncSession = Depends(get_db)):
    return ApiResponse(data=await diagnostic_service.get_settings(db, workshop))


@router.put("/settings", response_model=ApiResponse[SettingsOut])
async def update_settings(
    payload: SettingsUpdate,
    workshop: Workshop = Depends(get_current_workshop),
    db: AsyncSession = Depends(get_db),
):
    result = await diagnostic_service.update_settings(db, workshop, payload)
    return ApiResponse(data=result, message="Configurações atualizadas com sucesso")


# Pricing

@router.get("/pricing", response_model=ApiResponse[list[PricingOut]])
async def list_pricing(workshop: Workshop = Depends(get_current_workshop), db: AsyncSession = Depends(get_db)):
    pricing = await diagnostic_service.list_pricing(db, workshop)
    return ApiResponse(data=[PricingOut.model_validate(p) for p in pricing])


@router.put("/pricing", response_model=ApiResponse[PricingOut])
async def upsert_pricing(
    payload: PricingUpdate,
    workshop: Workshop = Depends(get_current_workshop),
    db: AsyncSession = Depends(get_db),
):
    pricing = await diagnostic_service.upsert_pricing(db, workshop, payload)
    return ApiResponse(
        data=PricingOut.model_validate(pricing),
        message=f"Preço para categoria {payload.category.value} atualizado",
    )


@router.delete("/pricing/{category}", response_model=ApiResponse[None])
async def delete_pricing(
    category: str,
    workshop: Workshop = Depends(get_current_workshop),
    db: AsyncSession = Depends(get_db),
):
    removed = await diagnostic_service.delete_pricing(db, workshop, category)
    return ApiResponse(message=f"Preço para categoria {removed.value} removido")


# Availability slots

@router.get("/slots", response_model=ApiResponse[list[SlotOut]])
async def list_slots(workshop: Workshop = Depends(get_current_workshop), db: AsyncSession = Depends(get_db)):
    slots = await diagnostic_service.list_slots(db, workshop)
    return ApiResponse(data=[SlotOut.model_validate(s) for s in slots])


@router.post("/slots", response_model=ApiResponse[SlotOut], status_code=201)
async def create_slot(
    payload: SlotCreate,
    workshop: Workshop = Depends(get_current_workshop),
    db: AsyncSession = Depends(get_db),
):
    slot = await diagnostic_service.create_slot(db, workshop, payload)
    return ApiResponse(data=SlotOut.model_validate(slot), message="Slot de disponibilidade criado")


@router.put("/slots/{slot_id}", response_model=ApiResponse[SlotOut])
async def update_slot(
    slot_id: UUID,
    payload: SlotUpdate,
    workshop: Workshop = Depends(get_current_workshop),
    db: AsyncSession = Depends(get_db),
):
    slot = await diagnostic_service.update_slot(db, workshop, slot_id, payload)
    return ApiResponse(data=SlotOut.model_validate(slot), message="Slot atualizado")


@router.delete("/slots/{slot_id}", response_model=ApiResponse[None])
async def delete_slot(
    slot_id: UUID,
    workshop: Workshop = Depends(get_current_workshop),
    db: AsyncSession = Depends(get_db),
):
    await diagnostic_service.delete_slot(db, workshop, slot_id)
    return ApiResponse(message="Slot removido")


# Calendar exceptions

@router.get("/exceptions", response_model=ApiResponse[list[ExceptionOut]])
async def list_exceptions(
    upcoming: bool = Query(False, description="Only today and later"),
    workshop: Workshop = Depends(get_current_workshop),
    db: AsyncSession = Depends(get_db),
):
    exceptions = await diagnostic_service.list_exceptions(db, workshop, upcoming_only=upcoming)
    return ApiResponse(data=[ExceptionOut.model_validate(e) for e in exceptions])


@router.post("/exceptions", response_model=ApiResponse[ExceptionOut], status_code=201)
async def create_exception(
    payload: ExceptionCreate,
    workshop: Workshop = Depends(get_current_workshop),
    db: AsyncSession = Depends(get_db),
):
    exc = await diagnostic_service.create_exception(db, workshop, payload)
    return ApiResponse(data=ExceptionOut.model_validate(exc), message="Exceção de agenda criada")


@router.put("/exceptions/{exception_id}", response_model=ApiResponse[ExceptionOut])
async def update_exception(
    exception_id: UUID,
    payload: ExceptionUpdate,
    workshop: Workshop = Depends(get_current_workshop),
    db: AsyncSession = Depends(get_db),
):
    exc = await diagnostic_service.update_exception(db, workshop, exception_id, payload)
    return ApiResponse(data=ExceptionOut.model_validate(exc), message="Exceção atualizada")


@router.delete("/exceptions/{exception_id}", response_model=ApiResponse[None])
async def delete_exception(
    exception_id: UUID,
    workshop: Workshop = Depends(get_current_workshop),
    db: AsyncSession = Depends(get_db),
):
    await diagnostic_service.delete_exception(db, workshop, exception_id)
    return ApiResponse(message="Exceção removida")


# Appointments

@router.get("/appointments", response_model=ApiResponse[list[AppointmentOut]])
async def list_appointments(
    status: Optional[AppointmentStatus] = Query(None),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    workshop: Workshop = Depends(get_current_workshop),
    db: AsyncSession = Depends(get_db),
):
    appointments = await diagnostic_service.list_appointments(db, workshop, status, start_date, end_date)
    return ApiResponse(data=[AppointmentOut.model_validate(a) for a in appointments])


@router.put("/appointments/{appointment_id}/status", response_model=ApiResponse[AppointmentOut])
async def update_appointment_status(
    appointment_id: UUID,
    payload: AppointmentStatusUpdate,
    workshop: Workshop = Depends(get_current_workshop),
    db: AsyncSession = Depends(get_db),
):
    appointment = await diagnostic_service.update_appointment_status(db, workshop, appointment_id, payload)
    return ApiResponse(data=AppointmentOut.model_validate(appointment), message="Status do agendamento atualizado")
