"""Tests for live lead events and the lead WebSocket feed."""

from unittest.mock import AsyncMock

import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app.main import app
from app.services import lead_events


@pytest.fixture
def sockets():
    lead_events._connections.clear()
    yield lead_events._connections
    lead_events._connections.clear()


def test_event_shape():
    event = lead_events.build_event(lead_events.NEW_LEAD, "abc", {"leadScore": 80})
    assert event["type"] == "new_lead"
    assert event["leadId"] == "abc"
    assert event["data"] == {"leadScore": 80}
    assert "timestamp" in event

    stats = lead_events.build_event(lead_events.LEAD_STATS, None)
    assert stats["leadId"] is None
    assert stats["data"] == {}


@pytest.mark.asyncio
async def test_broadcast_drops_dead_sockets(sockets):
    alive = AsyncMock()
    dead = AsyncMock()
    dead.send_json.side_effect = RuntimeError("closed")
    lead_events.register(alive)
    lead_events.register(dead)

    await lead_events.broadcast({"type": "ping"})

    alive.send_json.assert_awaited_once_with({"type": "ping"})
    assert lead_events.connection_count() == 1

    lead_events.unregister(alive)
    assert lead_events.connection_count() == 0


@pytest.mark.asyncio
async def test_publish_without_clients_is_a_noop(sockets, db):
    await lead_events.publish(lead_events.NEW_LEAD, "abc", {}, db=db)


@pytest.mark.asyncio
async def test_new_lead_is_followed_by_stats(sockets, db, lead):
    ws = AsyncMock()
    lead_events.register(ws)

    await lead_events.publish(lead_events.NEW_LEAD, lead.id, {"leadScore": 60}, db=db)

    sent = [call.args[0] for call in ws.send_json.await_args_list]
    assert [m["type"] for m in sent] == ["new_lead", "lead_stats"]
    assert sent[0]["leadId"] == str(lead.id)
    assert sent[1]["data"]["total"] == 1
    assert sent[1]["data"]["byStatus"]["new"] == 1
    assert sent[1]["data"]["byStatus"]["closed_won"] == 0


@pytest.mark.asyncio
async def test_interaction_event_has_no_stats(sockets, db, lead):
    ws = AsyncMock()
    lead_events.register(ws)

    await lead_events.publish(lead_events.NEW_INTERACTION, lead.id, {"type": "call"}, db=db)

    assert ws.send_json.await_count == 1


@pytest.mark.asyncio
async def test_status_change_reaches_connected_dashboards(client, sockets, admin_headers, lead):
    ws = AsyncMock()
    lead_events.register(ws)

    resp = await client.put(
        f"/api/admin/leads/{lead.id}/status", json={"newStatus": "contacted"}, headers=admin_headers
    )
    assert resp.status_code == 200

    sent = [call.args[0] for call in ws.send_json.await_args_list]
    assert sent[0]["type"] == "status_changed"
    assert sent[0]["data"]["oldStatus"] == "new"
    assert sent[0]["data"]["newStatus"] == "contacted"
    assert sent[1]["data"]["byStatus"]["contacted"] == 1


def test_feed_rejects_missing_token():
    client = TestClient(app)
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/api/ws/leads"):
            pass
    assert exc_info.value.code == 1008
