"""Workshop diagnostic service: availability, pricing, settings, activation
and booked appointments.

Slot and exception writes lock the workshop row with SELECT ... FOR UPDATE
and then re-run the conflict validators against the workshop's rows in the
same transaction, so concurrent writers for one workshop run one at a time.
"""

import logging
from datetime import datetime, date
from typing import Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import AppointmentStatus, DiagnosticAppointment
from app.models.diagnostic import (
    AppointmentException,
    AppointmentSettings,
    AppointmentSlot,
    DiagnosticServiceConfig,
    ServiceStatus,
    VehicleCategory,
    VehiclePricing,
)
from app.models.workshop import Workshop
from app.schemas.appointment import AppointmentStatusUpdate
from app.schemas.diagnostic import (
    ActivationCheck,
    ExceptionCreate,
    ExceptionUpdate,
    PricingUpdate,
    ServiceStatusOut,
    SettingsOut,
    SettingsUpdate,
    SlotCreate,
    SlotUpdate,
)
from app.services.schedule_validation import (
    EXCEPTION_CONFLICT_MESSAGE,
    ScheduleValidationError,
    validate_exception,
    validate_slot,
)

logger = logging.getLogger(__name__)

REQUIRED_CATEGORIES = [VehicleCategory.POPULAR, VehicleCategory.MEDIUM, VehicleCategory.LUXURY]


def _bad_request(exc: ScheduleValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": exc.message, "errors": exc.errors},
    )


def workshop_lock_query(workshop_id: UUID):
    return select(Workshop.id).where(Workshop.id == workshop_id).with_for_update()


async def _lock_workshop(db: AsyncSession, workshop_id: UUID) -> None:
    await db.execute(workshop_lock_query(workshop_id))


# Availability slots

async def list_slots(db: AsyncSession, workshop: Workshop) -> list[AppointmentSlot]:
    result = await db.execute(
        select(AppointmentSlot)
        .where(AppointmentSlot.workshop_id == workshop.id)
        .order_by(AppointmentSlot.day_of_week, AppointmentSlot.start_time)
    )
    return list(result.scalars().all())


async def _locked_slots(db: AsyncSession, workshop_id: UUID) -> list[AppointmentSlot]:
    await _lock_workshop(db, workshop_id)
    result = await db.execute(
        select(AppointmentSlot).where(AppointmentSlot.workshop_id == workshop_id).with_for_update()
    )
    return list(result.scalars().all())


async def create_slot(db: AsyncSession, workshop: Workshop, payload: SlotCreate) -> AppointmentSlot:
    try:
        existing = await _locked_slots(db, workshop.id)
        try:
            validate_slot(
                payload.day_of_week,
                payload.start_time,
                payload.end_time,
                payload.capacity,
                payload.buffer_minutes,
                existing,
            )
        except ScheduleValidationError as e:
            raise _bad_request(e)

        slot = AppointmentSlot(workshop_id=workshop.id, **payload.model_dump())
        db.add(slot)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(slot)
    logger.info(
        "Slot %s created for workshop %s (day %d %s-%s)",
        slot.id, workshop.id, slot.day_of_week, slot.start_time, slot.end_time,
    )
    return slot


async def update_slot(db: AsyncSession, workshop: Workshop, slot_id: UUID, payload: SlotUpdate) -> AppointmentSlot:
    """Merge the supplied fields onto the stored slot and re-validate the whole."""
    try:
        existing = await _locked_slots(db, workshop.id)
        slot = next((s for s in existing if s.id == slot_id), None)
        if slot is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Slot não encontrado")

        changes = payload.model_dump(exclude_unset=True)
        merged = {
            "day_of_week": slot.day_of_week,
            "start_time": slot.start_time,
            "end_time": slot.end_time,
            "capacity": slot.capacity,
            "buffer_minutes": slot.buffer_minutes,
        }
        merged.update({k: v for k, v in changes.items() if k in merged and v is not None})

        try:
            validate_slot(existing=existing, exclude_id=slot.id, **merged)
        except ScheduleValidationError as e:
            raise _bad_request(e)

        for key, value in changes.items():
            if value is not None:
                setattr(slot, key, value)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(slot)
    logger.info("Slot %s updated for workshop %s", slot.id, workshop.id)
    return slot


async def delete_slot(db: AsyncSession, workshop: Workshop, slot_id: UUID) -> None:
    result = await db.execute(
        select(AppointmentSlot).where(
            AppointmentSlot.id == slot_id,
            AppointmentSlot.workshop_id == workshop.id,
        )
    )
    slot = result.scalar_one_or_none()
    if slot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Slot não encontrado")
    await db.delete(slot)
    await db.commit()
    logger.info("Slot %s deleted for workshop %s", slot_id, workshop.id)


# Calendar exceptions

async def list_exceptions(db: AsyncSession, workshop: Workshop, upcoming_only: bool = False) -> list[AppointmentException]:
    query = select(AppointmentException).where(AppointmentException.workshop_id == workshop.id)
    if upcoming_only:
        query = query.where(AppointmentException.date >= date.today())
    result = await db.execute(query.order_by(AppointmentException.date))
    return list(result.scalars().all())


async def _locked_exceptions(db: AsyncSession, workshop_id: UUID) -> list[AppointmentException]:
    await _lock_workshop(db, workshop_id)
    result = await db.execute(
        select(AppointmentException).where(AppointmentException.workshop_id == workshop_id).with_for_update()
    )
    return list(result.scalars().all())


def _exception_times(is_full_day: bool, start_time: Optional[str], end_time: Optional[str]):
    if is_full_day:
        return None, None
    return start_time, end_time


async def create_exception(db: AsyncSession, workshop: Workshop, payload: ExceptionCreate) -> AppointmentException:
    try:
        existing = await _locked_exceptions(db, workshop.id)
        try:
            validate_exception(
                payload.date,
                payload.reason,
                payload.is_full_day,
                payload.start_time,
                payload.end_time,
                existing,
            )
        except ScheduleValidationError as e:
            raise _bad_request(e)

        start_time, end_time = _exception_times(payload.is_full_day, payload.start_time, payload.end_time)
        exc = AppointmentException(
            workshop_id=workshop.id,
            date=payload.date,
            type=payload.type,
            reason=payload.reason.strip(),
            is_full_day=payload.is_full_day,
            start_time=start_time,
            end_time=end_time,
        )
        db.add(exc)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise _bad_request(ScheduleValidationError({"conflict": EXCEPTION_CONFLICT_MESSAGE}))
    except Exception:
        await db.rollback()
        raise

    await db.refresh(exc)
    logger.info("Exception %s created for workshop %s on %s", exc.id, workshop.id, exc.date)
    return exc


async def update_exception(
    db: AsyncSession, workshop: Workshop, exception_id: UUID, payload: ExceptionUpdate
) -> AppointmentException:
    try:
        existing = await _locked_exceptions(db, workshop.id)
        exc = next((e for e in existing if e.id == exception_id), None)
        if exc is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exceção não encontrada")

        changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
        merged = {
            "date": exc.date,
            "type": exc.type,
            "reason": exc.reason,
            "is_full_day": exc.is_full_day,
            "start_time": exc.start_time,
            "end_time": exc.end_time,
        }
        merged.update(changes)

        try:
            validate_exception(
                merged["date"],
                merged["reason"],
                merged["is_full_day"],
                merged["start_time"],
                merged["end_time"],
                existing,
                exclude_id=exc.id,
            )
        except ScheduleValidationError as e:
            raise _bad_request(e)

        start_time, end_time = _exception_times(merged["is_full_day"], merged["start_time"], merged["end_time"])
        exc.date = merged["date"]
        exc.type = merged["type"]
        exc.reason = merged["reason"].strip()
        exc.is_full_day = merged["is_full_day"]
        exc.start_time = start_time
        exc.end_time = end_time
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise _bad_request(ScheduleValidationError({"conflict": EXCEPTION_CONFLICT_MESSAGE}))
    except Exception:
        await db.rollback()
        raise

    await db.refresh(exc)
    logger.info("Exception %s updated for workshop %s", exc.id, workshop.id)
    return exc


async def delete_exception(db: AsyncSession, workshop: Workshop, exception_id: UUID) -> None:
    result = await db.execute(
        select(AppointmentException).where(
            AppointmentException.id == exception_id,
            AppointmentException.workshop_id == workshop.id,
        )
    )
    exc = result.scalar_one_or_none()
    if exc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exceção não encontrada")
    await db.delete(exc)
    await db.commit()
    logger.info("Exception %s deleted for workshop %s", exception_id, workshop.id)


# Settings

async def _settings_row(db: AsyncSession, workshop_id: UUID) -> Optional[AppointmentSettings]:
    result = await db.execute(select(AppointmentSettings).where(AppointmentSettings.workshop_id == workshop_id))
    return result.scalar_one_or_none()


async def get_settings(db: AsyncSession, workshop: Workshop) -> SettingsOut:
    row = await _settings_row(db, workshop.id)
    return SettingsOut.model_validate(row) if row else SettingsOut()


async def update_settings(db: AsyncSession, workshop: Workshop, payload: SettingsUpdate) -> SettingsOut:
    row = await _settings_row(db, workshop.id)
    if row is None:
        row = AppointmentSettings(workshop_id=workshop.id, **SettingsOut().model_dump())
        db.add(row)
    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(row, key, value)
    await db.commit()
    await db.refresh(row)
    logger.info("Appointment settings updated for workshop %s", workshop.id)
    return SettingsOut.model_validate(row)


# Pricing

async def list_pricing(db: AsyncSession, workshop: Workshop) -> list[VehiclePricing]:
    result = await db.execute(
        select(VehiclePricing).where(VehiclePricing.workshop_id == workshop.id).order_by(VehiclePricing.price)
    )
    return list(result.scalars().all())


async def upsert_pricing(db: AsyncSession, workshop: Workshop, payload: PricingUpdate) -> VehiclePricing:
    result = await db.execute(
        select(VehiclePricing).where(
            VehiclePricing.workshop_id == workshop.id,
            VehiclePricing.category == payload.category,
        )
    )
    pricing = result.scalar_one_or_none()
    if pricing is None:
        pricing = VehiclePricing(workshop_id=workshop.id, category=payload.category, is_active=True)
        db.add(pricing)
    pricing.price = payload.price
    if payload.estimated_duration is not None:
        pricing.estimated_duration = payload.estimated_duration
    elif pricing.estimated_duration is None:
        pricing.estimated_duration = 60
    await db.commit()
    await db.refresh(pricing)
    logger.info("Price for %s set to %d for workshop %s", payload.category.value, payload.price, workshop.id)
    return pricing


async def delete_pricing(db: AsyncSession, workshop: Workshop, category: str) -> VehicleCategory:
    try:
        vehicle_category = VehicleCategory(category)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Categoria inválida")

    result = await db.execute(
        select(VehiclePricing).where(
            VehiclePricing.workshop_id == workshop.id,
            VehiclePricing.category == vehicle_category,
        )
    )
    pricing = result.scalar_one_or_none()
    if pricing is not None:
        await db.delete(pricing)
        await db.commit()
    logger.info("Price for %s removed for workshop %s", vehicle_category.value, workshop.id)
    return vehicle_category


# Service activation

async def check_activation(db: AsyncSession, workshop_id: UUID) -> ActivationCheck:
    errors: list[str] = []
    warnings: list[str] = []

    categories = set((await db.execute(
        select(VehiclePricing.category).where(VehiclePricing.workshop_id == workshop_id)
    )).scalars().all())
    missing = [c.value for c in REQUIRED_CATEGORIES if c not in categories]
    if missing:
        errors.append(f"Preços não configurados para: {', '.join(missing)}")

    active_slot = (await db.execute(
        select(AppointmentSlot.id).where(
            AppointmentSlot.workshop_id == workshop_id,
            AppointmentSlot.is_active.is_(True),
        ).limit(1)
    )).scalar_one_or_none()
    if active_slot is None:
        errors.append("Nenhum horário de disponibilidade configurado")

    if await _settings_row(db, workshop_id) is None:
        warnings.append("Usando configurações padrão")

    return ActivationCheck(can_activate=not errors, errors=errors, warnings=warnings)


async def _get_or_create_config(db: AsyncSession, workshop_id: UUID) -> DiagnosticServiceConfig:
    result = await db.execute(
        select(DiagnosticServiceConfig).where(DiagnosticServiceConfig.workshop_id == workshop_id)
    )
    config = result.scalar_one_or_none()
    if config is None:
        config = DiagnosticServiceConfig(workshop_id=workshop_id, is_active=False, status=ServiceStatus.DISABLED)
        db.add(config)
        await db.commit()
        await db.refresh(config)
    return config


def _status_out(config: DiagnosticServiceConfig, validation: Optional[ActivationCheck]) -> ServiceStatusOut:
    return ServiceStatusOut(
        workshop_id=config.workshop_id,
        is_active=config.is_active,
        status=config.status,
        suspension_reason=config.suspension_reason,
        activated_at=config.activated_at,
        deactivated_at=config.deactivated_at,
        validation=validation,
    )


async def get_service_status(db: AsyncSession, workshop: Workshop) -> ServiceStatusOut:
    config = await _get_or_create_config(db, workshop.id)
    return _status_out(config, await check_activation(db, workshop.id))


async def toggle_service(db: AsyncSession, workshop: Workshop, activate: bool) -> ServiceStatusOut:
    config = await _get_or_create_config(db, workshop.id)
    now = datetime.utcnow()

    if activate:
        validation = await check_activation(db, workshop.id)
        if not validation.can_activate:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "message": "Não é possível ativar o serviço",
                    "errors": validation.errors,
                    "warnings": validation.warnings,
                },
            )
        config.is_active = True
        config.status = ServiceStatus.ACTIVE
        config.activated_at = now
    else:
        validation = None
        config.is_active = False
        config.status = ServiceStatus.DISABLED
        config.deactivated_at = now

    await db.commit()
    await db.refresh(config)
    logger.info("Diagnostic service %s for workshop %s", "activated" if activate else "deactivated", workshop.id)
    return _status_out(config, validation)


# Appointments

async def list_appointments(
    db: AsyncSession,
    workshop: Workshop,
    appointment_status: Optional[AppointmentStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list[DiagnosticAppointment]:
    query = select(DiagnosticAppointment).where(DiagnosticAppointment.workshop_id == workshop.id)
    if appointment_status:
        query = query.where(DiagnosticAppointment.status == appointment_status)
    if start_date:
        query = query.where(DiagnosticAppointment.preferred_date >= start_date)
    if end_date:
        query = query.where(DiagnosticAppointment.preferred_date <= end_date)
    result = await db.execute(
        query.order_by(DiagnosticAppointment.preferred_date, DiagnosticAppointment.preferred_time)
    )
    return list(result.scalars().all())


async def update_appointment_status(
    db: AsyncSession, workshop: Workshop, appointment_id: UUID, payload: AppointmentStatusUpdate
) -> DiagnosticAppointment:
    result = await db.execute(
        select(DiagnosticAppointment).where(
            DiagnosticAppointment.id == appointment_id,
            DiagnosticAppointment.workshop_id == workshop.id,
        )
    )
    appointment = result.scalar_one_or_none()
    if appointment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Agendamento não encontrado")

    now = datetime.utcnow()
    appointment.status = payload.status
    if payload.status == AppointmentStatus.IN_PROGRESS:
        appointment.check_in_time = now
    elif payload.status == AppointmentStatus.COMPLETED:
        appointment.check_out_time = now
    elif payload.status == AppointmentStatus.CANCELLED:
        appointment.cancelled_by = "workshop"
        appointment.cancellation_reason = payload.reason
    if payload.workshop_notes is not None:
        appointment.workshop_notes = payload.workshop_notes

    await db.commit()
    await db.refresh(appointment)
    logger.info("Appointment %s set to %s by workshop %s", appointment.id, payload.status.value, workshop.id)
    return appointment
