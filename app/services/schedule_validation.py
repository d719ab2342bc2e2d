"""Conflict and field validation for workshop availability.

Pure functions: callers load the workshop's existing rows and pass them in.
Times are zero-padded "HH:MM" strings, so plain string comparison orders
them correctly.
"""

from datetime import date
from typing import Iterable, Optional
from uuid import UUID

MIN_CAPACITY = 1
MAX_CAPACITY = 10
MIN_BUFFER_MINUTES = 0
MAX_BUFFER_MINUTES = 60

SLOT_CONFLICT_MESSAGE = "Horário conflita com outro slot existente"
EXCEPTION_CONFLICT_MESSAGE = "Já existe uma exceção para esta data"


class ScheduleValidationError(ValueError):
    """Raised with a field -> message mapping when a candidate is rejected."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__(next(iter(errors.values())))

    @property
    def message(self) -> str:
        return next(iter(self.errors.values()))


def times_overlap(start1: str, end1: str, start2: str, end2: str) -> bool:
    """True if [start1, end1) collides with [start2, end2).

    Adjacent windows (one ends exactly when the other starts) do not collide.
    """
    return (
        (start1 >= start2 and start1 < end2)
        or (end1 > start2 and end1 <= end2)
        or (start1 <= start2 and end1 >= end2)
    )


def find_slot_conflict(
    day_of_week: int,
    start_time: str,
    end_time: str,
    existing: Iterable,
    exclude_id: Optional[UUID] = None,
):
    """Return the first existing slot on the same day that overlaps, or None."""
    for slot in existing:
        if exclude_id is not None and slot.id == exclude_id:
            continue
        if slot.day_of_week != day_of_week:
            continue
        if times_overlap(start_time, end_time, slot.start_time, slot.end_time):
            return slot
    return None


def validate_slot(
    day_of_week: int,
    start_time: str,
    end_time: str,
    capacity: int,
    buffer_minutes: int,
    existing: Iterable,
    exclude_id: Optional[UUID] = None,
) -> None:
    """Raise ScheduleValidationError if the slot may not be saved.

    buffer_minutes is range-checked only; it plays no part in the overlap test.
    """
    errors: dict[str, str] = {}

    if start_time >= end_time:
        errors["time"] = "Horário de início deve ser anterior ao horário de fim"
    if capacity is None or not MIN_CAPACITY <= capacity <= MAX_CAPACITY:
        errors["capacity"] = "Capacidade deve ser entre 1 e 10"
    if buffer_minutes is None or not MIN_BUFFER_MINUTES <= buffer_minutes <= MAX_BUFFER_MINUTES:
        errors["buffer"] = "Buffer deve ser entre 0 e 60 minutos"

    if "time" not in errors and find_slot_conflict(
        day_of_week, start_time, end_time, existing, exclude_id
    ) is not None:
        errors["conflict"] = SLOT_CONFLICT_MESSAGE

    if errors:
        raise ScheduleValidationError(errors)


def find_exception_conflict(
    exception_date: date,
    existing: Iterable,
    exclude_id: Optional[UUID] = None,
):
    """Exact-date match against the other exceptions of the workshop."""
    for exc in existing:
        if exclude_id is not None and exc.id == exclude_id:
            continue
        if exc.date == exception_date:
            return exc
    return None


def validate_exception(
    exception_date: Optional[date],
    reason: Optional[str],
    is_full_day: bool,
    start_time: Optional[str],
    end_time: Optional[str],
    existing: Iterable,
    exclude_id: Optional[UUID] = None,
    today: Optional[date] = None,
) -> None:
    """Raise ScheduleValidationError if the exception may not be saved."""
    errors: dict[str, str] = {}
    today = today or date.today()

    if exception_date is None:
        errors["date"] = "Data é obrigatória"
    elif exception_date < today:
        errors["date"] = "Data deve ser futura"

    if not reason or not reason.strip():
        errors["reason"] = "Motivo é obrigatório"

    if not is_full_day:
        if not start_time or not end_time:
            errors["time"] = "Horários são obrigatórios para exceções parciais"
        elif start_time >= end_time:
            errors["time"] = "Horário de início deve ser anterior ao horário de fim"

    if exception_date is not None and find_exception_conflict(
        exception_date, existing, exclude_id
    ) is not None:
        errors["conflict"] = EXCEPTION_CONFLICT_MESSAGE

    if errors:
        raise ScheduleValidationError(errors)
