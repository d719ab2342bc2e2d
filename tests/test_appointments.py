"""Tests for the workshop's diagnostic appointment endpoints."""

import uuid
from datetime import date, timedelta

import pytest
import pytest_asyncio

from app.models.appointment import AppointmentStatus, DiagnosticAppointment

BASE = "/api/workshop/diagnostic/appointments"


@pytest_asyncio.fixture
async def appointment(db, workshop):
    row = DiagnosticAppointment(
        workshop_id=workshop.id,
        customer_name="Maria Motorista",
        customer_email="maria@example.com",
        customer_phone="11999990000",
        vehicle_model="Corolla",
        vehicle_year="2021",
        preferred_date=date.today() + timedelta(days=2),
        preferred_time="09:00",
        confirmation_code="RC-0001",
    )
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return row


@pytest.mark.asyncio
async def test_list_appointments(client, appointment, workshop_headers):
    resp = await client.get(BASE, headers=workshop_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert len(data) == 1
    assert data[0]["customerName"] == "Maria Motorista"
    assert data[0]["status"] == "pending"

    resp = await client.get(BASE, params={"status": "completed"}, headers=workshop_headers)
    assert resp.json()["data"] == []


@pytest.mark.asyncio
async def test_check_in_and_check_out(client, appointment, workshop_headers):
    resp = await client.put(f"{BASE}/{appointment.id}/status", json={"status": "in_progress"}, headers=workshop_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["checkInTime"] is not None
    assert resp.json()["data"]["checkOutTime"] is None

    resp = await client.put(f"{BASE}/{appointment.id}/status", json={"status": "completed"}, headers=workshop_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == AppointmentStatus.COMPLETED.value
    assert resp.json()["data"]["checkOutTime"] is not None


@pytest.mark.asyncio
async def test_cancel_records_reason(client, appointment, workshop_headers):
    resp = await client.put(
        f"{BASE}/{appointment.id}/status",
        json={"status": "cancelled", "reason": "Cliente remarcou"},
        headers=workshop_headers,
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["cancelledBy"] == "workshop"
    assert data["cancellationReason"] == "Cliente remarcou"


@pytest.mark.asyncio
async def test_unknown_appointment_returns_404(client, workshop_headers):
    resp = await client.put(f"{BASE}/{uuid.uuid4()}/status", json={"status": "confirmed"}, headers=workshop_headers)
    assert resp.status_code == 404
