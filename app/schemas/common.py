"""Shared schema helpers: camelCase wire models and the response envelope."""

from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar
from uuid import UUID
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamp columns are naive UTC; convert offset-bearing input onto that clock."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every JSON endpoint."""
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
    errors: Optional[Any] = None


class UserSummary(CamelModel):
    """Identity fragment embedded in lead/interaction/history payloads."""
    id: UUID
    name: str
    email: str
