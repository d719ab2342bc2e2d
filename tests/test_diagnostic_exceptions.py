"""Tests for calendar exception endpoints."""

import uuid
from datetime import date, timedelta

import pytest

from app.services import diagnostic_service

BASE = "/api/workshop/diagnostic/exceptions"


def in_days(n: int) -> str:
    return (date.today() + timedelta(days=n)).isoformat()


async def create(client, headers, **overrides):
    body = {"date": in_days(7), "type": "holiday", "reason": "Feriado municipal", "isFullDay": True}
    body.update(overrides)
    return await client.post(BASE, json=body, headers=headers)


@pytest.mark.asyncio
async def test_create_and_list_exceptions(client, workshop_headers):
    resp = await create(client, workshop_headers)
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["date"] == in_days(7)
    assert data["type"] == "holiday"
    assert data["isFullDay"] is True
    assert data["startTime"] is None

    resp = await client.get(BASE, headers=workshop_headers)
    assert [e["reason"] for e in resp.json()["data"]] == ["Feriado municipal"]


@pytest.mark.asyncio
async def test_duplicate_date_is_rejected(client, workshop_headers):
    assert (await create(client, workshop_headers)).status_code == 201
    resp = await create(client, workshop_headers, type="maintenance", reason="Outra coisa")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Já existe uma exceção para esta data"


@pytest.mark.asyncio
async def test_past_date_and_missing_reason_are_rejected(client, workshop_headers):
    resp = await create(client, workshop_headers, date=in_days(-1))
    assert resp.status_code == 400
    assert resp.json()["errors"]["date"] == "Data deve ser futura"

    resp = await create(client, workshop_headers, reason="")
    assert resp.status_code == 400
    assert resp.json()["errors"]["reason"] == "Motivo é obrigatório"


@pytest.mark.asyncio
async def test_partial_day_exception(client, workshop_headers):
    resp = await create(client, workshop_headers, isFullDay=False, startTime="14:00", endTime="18:00")
    assert resp.status_code == 201
    assert resp.json()["data"]["startTime"] == "14:00"

    resp = await create(client, workshop_headers, date=in_days(8), isFullDay=False)
    assert resp.status_code == 400
    assert "time" in resp.json()["errors"]


@pytest.mark.asyncio
async def test_full_day_exception_drops_times(client, workshop_headers):
    resp = await create(client, workshop_headers, startTime="14:00", endTime="18:00")
    assert resp.status_code == 201
    assert resp.json()["data"]["startTime"] is None


@pytest.mark.asyncio
async def test_update_exception(client, workshop_headers):
    first = (await create(client, workshop_headers)).json()["data"]
    second = (await create(client, workshop_headers, date=in_days(10))).json()["data"]

    resp = await client.put(f"{BASE}/{second['id']}", json={"date": in_days(7)}, headers=workshop_headers)
    assert resp.status_code == 400
    assert "conflict" in resp.json()["errors"]

    resp = await client.put(
        f"{BASE}/{first['id']}", json={"reason": "Férias coletivas", "type": "vacation"}, headers=workshop_headers
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["reason"] == "Férias coletivas"
    assert data["type"] == "vacation"
    assert data["date"] == in_days(7)


@pytest.mark.asyncio
async def test_delete_exception(client, workshop_headers):
    created = (await create(client, workshop_headers)).json()["data"]
    resp = await client.delete(f"{BASE}/{created['id']}", headers=workshop_headers)
    assert resp.status_code == 200
    assert (await client.get(BASE, headers=workshop_headers)).json()["data"] == []

    resp = await client.delete(f"{BASE}/{created['id']}", headers=workshop_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_unknown_exception_returns_404(client, workshop_headers):
    resp = await client.put(f"{BASE}/{uuid.uuid4()}", json={"reason": "x"}, headers=workshop_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_unique_date_constraint_maps_to_conflict(client, workshop_headers, monkeypatch):
    # a concurrent writer can pass validation before the other commits
    monkeypatch.setattr(diagnostic_service, "validate_exception", lambda *args, **kwargs: None)

    assert (await create(client, workshop_headers)).status_code == 201
    resp = await create(client, workshop_headers, reason="Outra coisa")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Já existe uma exceção para esta data"
    assert resp.json()["errors"]["conflict"] == "Já existe uma exceção para esta data"

    second = (await create(client, workshop_headers, date=in_days(9))).json()["data"]
    resp = await client.put(f"{BASE}/{second['id']}", json={"date": in_days(7)}, headers=workshop_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Já existe uma exceção para esta data"

    resp = await client.get(BASE, headers=workshop_headers)
    assert [e["date"] for e in resp.json()["data"]] == [in_days(7), in_days(9)]
