"""Tests for the lead dashboard aggregates and the CSV/JSON export."""

import csv
from datetime import datetime, timedelta, timezone
from io import StringIO

import pytest
import pytest_asyncio

from conftest import make_user
from app.models.lead import Lead, LeadStatus
from app.models.user import UserRole
from app.services.lead_dashboard import CSV_HEADER, resolve_period, status_color

BASE = "/api/admin/leads"


@pytest_asyncio.fixture
async def pipeline(db, admin_user):
    seller = await make_user(db, "bruno@ruidcar.com", UserRole.ADMIN, name="Bruno Vendas")
    rows = [
        Lead(full_name="Novo Um", email="n1@example.com", message="Olá", status=LeadStatus.NEW, lead_score=40),
        Lead(full_name="Novo Dois", email="n2@example.com", message="Olá", status=LeadStatus.NEW, lead_score=45),
        Lead(full_name="Ganho", email="won@example.com", message="Fechado", status=LeadStatus.CLOSED_WON,
             lead_score=90, assigned_to=admin_user.id),
        Lead(full_name="Contatado", email="c@example.com", message="Em conversa", status=LeadStatus.CONTACTED,
             lead_score=60, assigned_to=admin_user.id),
        Lead(full_name="Antigo", email="old@example.com", message="Há muito tempo", status=LeadStatus.CLOSED_WON,
             lead_score=70, assigned_to=seller.id, created_at=datetime.utcnow() - timedelta(days=60)),
    ]
    db.add_all(rows)
    await db.commit()
    return rows


def test_period_defaults_to_last_30_days():
    start, end = resolve_period(None, None)
    assert end - start == timedelta(days=30)

    fixed_end = datetime(2026, 6, 30)
    assert resolve_period(None, fixed_end) == (datetime(2026, 5, 31), fixed_end)


def test_period_bounds_with_offsets_become_utc():
    brt = timezone(timedelta(hours=-3))
    start, end = resolve_period(
        datetime(2026, 3, 1, 21, 0, tzinfo=brt), datetime(2026, 3, 31, 23, 59, tzinfo=timezone.utc)
    )
    assert start == datetime(2026, 3, 2, 0, 0)
    assert end == datetime(2026, 3, 31, 23, 59)
    assert start.tzinfo is None and end.tzinfo is None


def test_unknown_status_gets_fallback_color():
    assert status_color("closed_won") == "#10b981"
    assert status_color("archived") == "#94a3b8"


@pytest.mark.asyncio
async def test_dashboard_metrics(client, admin_headers, pipeline):
    resp = await client.get(f"{BASE}/dashboard", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]

    assert data["metrics"] == {"totalLeads": 4, "newLeads": 2, "conversions": 1, "conversionRate": 25.0}

    assert data["pipeline"] == [
        {"name": "new", "count": 2, "percentage": 50.0, "color": "#3b82f6"},
        {"name": "contacted", "count": 1, "percentage": 25.0, "color": "#f59e0b"},
        {"name": "closed_won", "count": 1, "percentage": 25.0, "color": "#10b981"},
    ]

    assert len(data["daily"]) == 1
    assert data["daily"][0]["leads"] == 4
    assert data["daily"][0]["conversions"] == 1
    assert data["daily"][0]["rate"] == 25.0


@pytest.mark.asyncio
async def test_dashboard_team_ranking(client, admin_headers, pipeline):
    resp = await client.get(f"{BASE}/dashboard", headers=admin_headers)
    team = resp.json()["data"]["team"]

    assert [(m["name"], m["rank"]) for m in team] == [("Ana Admin", 1), ("Bruno Vendas", 2)]
    assert team[0]["totalLeads"] == 2
    assert team[0]["conversions"] == 1
    assert team[0]["conversionRate"] == 50.0
    # the old lead is outside the period
    assert team[1]["totalLeads"] == 0
    assert team[1]["conversionRate"] == 0.0


@pytest.mark.asyncio
async def test_dashboard_explicit_period(client, admin_headers, pipeline):
    start = (datetime.utcnow() - timedelta(days=90)).isoformat()
    resp = await client.get(f"{BASE}/dashboard", params={"startDate": start}, headers=admin_headers)
    metrics = resp.json()["data"]["metrics"]
    assert metrics["totalLeads"] == 5
    assert metrics["conversions"] == 2
    assert metrics["conversionRate"] == 40.0


@pytest.mark.asyncio
async def test_empty_dashboard(client, admin_headers):
    resp = await client.get(f"{BASE}/dashboard", headers=admin_headers)
    data = resp.json()["data"]
    assert data["metrics"]["conversionRate"] == 0.0
    assert data["pipeline"] == []
    assert data["daily"] == []
    assert [m["name"] for m in data["team"]] == ["Ana Admin"]


@pytest.mark.asyncio
async def test_csv_export(client, db, admin_headers, admin_user):
    db.add(Lead(
        full_name="Fábio, o \"Frotista\"",
        email="fabio@example.com",
        company="Frotas & Cia",
        message="Linha um,\nlinha dois",
        status=LeadStatus.PROPOSAL,
        lead_score=70,
        assigned_to=admin_user.id,
    ))
    await db.commit()

    resp = await client.get(f"{BASE}/export", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    disposition = resp.headers["content-disposition"]
    assert disposition.startswith("attachment; filename=leads-")
    assert disposition.endswith(".csv")

    rows = list(csv.reader(StringIO(resp.text)))
    assert rows[0] == CSV_HEADER
    assert len(rows) == 2
    row = dict(zip(CSV_HEADER, rows[1]))
    assert row["Nome"] == "Fábio, o \"Frotista\""
    assert row["Empresa"] == "Frotas & Cia"
    assert row["Status"] == "proposal"
    assert row["Score"] == "70"
    assert row["Responsável"] == "Ana Admin"
    assert row["WhatsApp"] == ""
    assert row["Mensagem"] == "Linha um,\nlinha dois"


@pytest.mark.asyncio
async def test_json_export(client, admin_headers, pipeline):
    resp = await client.get(f"{BASE}/export", params={"format": "json"}, headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert len(body["data"]) == 4
    assert {lead["fullName"] for lead in body["data"]} == {"Novo Um", "Novo Dois", "Ganho", "Contatado"}


@pytest.mark.asyncio
async def test_export_rejects_unknown_format(client, admin_headers):
    resp = await client.get(f"{BASE}/export", params={"format": "xlsx"}, headers=admin_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_export_period_with_offsets(client, db, admin_headers):
    db.add_all([
        Lead(full_name="Cedo", email="cedo@example.com", message="Olá", created_at=datetime(2026, 3, 5, 2, 0)),
        Lead(full_name="Dentro", email="dentro@example.com", message="Olá", created_at=datetime(2026, 3, 5, 5, 0)),
    ])
    await db.commit()

    resp = await client.get(
        f"{BASE}/export",
        params={"format": "json", "startDate": "2026-03-05T06:00:00+03:00", "endDate": "2026-03-05T23:59:59Z"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert [lead["fullName"] for lead in resp.json()["data"]] == ["Dentro"]
