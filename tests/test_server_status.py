"""
게임 서버 상태 조회 / 캐시 / WebSocket 브로드캐스트 테스트.
- 외부 게임 서버는 httpx.MockTransport 로 대체
"""

import asyncio

import httpx
import pytest
from sqlalchemy.exc import OperationalError
from starlette.websockets import WebSocketDisconnect

from app.core.config import settings
from app.db.base import utcnow
from app.models.settings import ServerStatSample, ServerStatusCache, SiteSetting
from app.routers import server_status as status_router
from app.services import server_status as service
from app.services.server_status import StatusBroadcaster, StatusFetchError, StatusPoller, build_snapshot

INFO = {
    "vars": {"sv_hostname": "^1Cool ^7RP", "sv_maxClients": "64"},
    "resources": ["core", "maps", "jobs"],
}
PLAYERS = [
    {"id": 1, "name": "COPE John"},
    {"id": 2, "name": "SAMU Jane"},
    {"id": 3, "name": "[STAFF] Bob"},
    {"id": 4, "name": "Random"},
]


def _game_server(routes: dict) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        response = routes.get(request.url.path)
        if isinstance(response, Exception):
            raise response
        return response or httpx.Response(404)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://game.test")


def _healthy_server() -> httpx.AsyncClient:
    return _game_server({
        "/info.json": httpx.Response(200, json=INFO),
        "/players.json": httpx.Response(200, json=PLAYERS),
    })


def _down_server() -> httpx.AsyncClient:
    return _game_server({"/info.json": httpx.ConnectError("connection refused")})


def test_build_snapshot_classifies_players():
    snapshot = build_snapshot(INFO, PLAYERS, None, ping_ms=12, fetched_at=utcnow())

    assert snapshot["type"] == "server_stats"
    assert snapshot["online"] is True
    assert snapshot["players"] == 4
    assert snapshot["maxPlayers"] == 64
    assert snapshot["serverName"] == "Cool RP"
    assert snapshot["resources"] == 3
    assert snapshot["ping"] == 12
    assert snapshot["playerStats"] == {"total": 4, "police": 1, "medic": 1, "staff": 1}
    assert snapshot["cached"] is False


def test_build_snapshot_prefers_dynamic_resources_and_defaults():
    snapshot = build_snapshot({}, [], {"hostname": "Dyn", "resources": ["a"]}, ping_ms=0, fetched_at=utcnow())

    assert snapshot["serverName"] == "Dyn"
    assert snapshot["resources"] == 1
    assert snapshot["players"] == 0
    assert snapshot["maxPlayers"] == 128


def test_fetch_live_status():
    async def scenario():
        async with _healthy_server() as client:
            return await service.fetch_live_status(client)

    snapshot = asyncio.run(scenario())
    assert snapshot["players"] == 4
    assert snapshot["serverName"] == "Cool RP"


def test_fetch_live_status_errors():
    async def scenario(client):
        async with client:
            return await service.fetch_live_status(client)

    with pytest.raises(StatusFetchError):
        asyncio.run(scenario(_down_server()))

    broken_players = _game_server({
        "/info.json": httpx.Response(200, json=INFO),
        "/players.json": httpx.Response(500),
    })
    with pytest.raises(StatusFetchError):
        asyncio.run(scenario(broken_players))

    not_json = _game_server({"/info.json": httpx.Response(200, text="<html>")})
    with pytest.raises(StatusFetchError):
        asyncio.run(scenario(not_json))


def test_success_is_cached_and_sampled(db):
    async def scenario():
        async with _healthy_server() as client:
            return await service.get_server_status(client)

    snapshot = asyncio.run(scenario())
    assert snapshot["online"] is True

    db.expire_all()
    cache = db.get(ServerStatusCache, 1)
    assert cache is not None
    assert cache.payload["players"] == 4
    samples = db.query(ServerStatSample).all()
    assert [(s.players, s.max_players, s.online) for s in samples] == [(4, 64, True)]


def test_failure_serves_cached_snapshot(db):
    async def scenario(client):
        async with client:
            return await service.get_server_status(client)

    asyncio.run(scenario(_healthy_server()))
    fallback = asyncio.run(scenario(_down_server()))

    assert fallback["cached"] is True
    assert fallback["players"] == 4
    assert fallback["serverName"] == "Cool RP"
    # 실패한 조회는 표본을 남기지 않음
    assert db.query(ServerStatSample).count() == 1


def test_failure_without_cache_uses_site_settings(db):
    db.add_all([
        SiteSetting(key="server_name", value="Fallback RP", category="server"),
        SiteSetting(key="server_max_players", value="48", category="server"),
    ])
    db.commit()

    async def scenario():
        async with _down_server() as client:
            return await service.get_server_status(client)

    snapshot = asyncio.run(scenario())
    assert snapshot["online"] is False
    assert snapshot["players"] == 0
    assert snapshot["maxPlayers"] == 48
    assert snapshot["serverName"] == "Fallback RP"
    assert snapshot["error"] == "Server unavailable"
    assert snapshot["cached"] is False


def _db_down(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("database unreachable"))


def test_live_snapshot_survives_cache_write_failure(db, monkeypatch):
    monkeypatch.setattr(service, "save_snapshot", _db_down)

    async def scenario():
        async with _healthy_server() as client:
            return await service.get_server_status(client)

    snapshot = asyncio.run(scenario())
    assert snapshot["online"] is True
    assert snapshot["players"] == 4
    assert snapshot["cached"] is False
    assert db.query(ServerStatSample).count() == 0


def test_fallback_lookup_failure_serves_default_offline_snapshot(monkeypatch):
    monkeypatch.setattr(service, "fallback_snapshot", _db_down)

    async def scenario():
        async with _down_server() as client:
            return await service.get_server_status(client)

    snapshot = asyncio.run(scenario())
    assert snapshot["online"] is False
    assert snapshot["serverName"] == settings.STATUS_DEFAULT_SERVER_NAME
    assert snapshot["maxPlayers"] == settings.STATUS_DEFAULT_MAX_PLAYERS
    assert snapshot["error"] == "Server unavailable"


def test_status_endpoint_and_websocket_when_database_is_down(client, monkeypatch):
    async def _live(client=None):
        return build_snapshot(INFO, PLAYERS, None, ping_ms=5, fetched_at=utcnow())

    monkeypatch.setattr(service, "fetch_live_status", _live)
    monkeypatch.setattr(service, "save_snapshot", _db_down)
    monkeypatch.setattr(service.broadcaster, "last_snapshot", None)

    r = client.get("/api/server/status")
    assert r.status_code == 200, r.text
    assert r.json()["players"] == 4

    async def _down(client=None):
        raise StatusFetchError("connection refused")

    monkeypatch.setattr(service, "fetch_live_status", _down)
    monkeypatch.setattr(service, "fallback_snapshot", _db_down)

    with client.websocket_connect("/ws") as ws:
        first = ws.receive_json()
        assert first["online"] is False
        assert first["error"] == "Server unavailable"


def test_poller_schedules_first_run_with_aware_time():
    async def scenario():
        poller = StatusPoller(StatusBroadcaster())
        poller.start()
        try:
            return poller.scheduler.get_job("server_status_poll").next_run_time
        finally:
            poller.stop()

    next_run = asyncio.run(scenario())
    assert next_run.tzinfo is not None
    assert abs((next_run - utcnow()).total_seconds()) < 60


class _FakeSocket:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)


def test_broadcast_drops_dead_clients():
    broadcaster = StatusBroadcaster()
    alive, dead = _FakeSocket(), _FakeSocket(fail=True)
    broadcaster.add(alive)
    broadcaster.add(dead)

    asyncio.run(broadcaster.broadcast({"type": "server_stats", "players": 3}))

    assert alive.sent == [{"type": "server_stats", "players": 3}]
    assert broadcaster.client_count == 1
    assert broadcaster.last_snapshot["players"] == 3


@pytest.fixture()
def fake_status(monkeypatch):
    calls = []

    async def _status(client=None):
        calls.append(client)
        return {"type": "server_stats", "online": True, "players": len(calls)}

    monkeypatch.setattr(service, "get_server_status", _status)
    monkeypatch.setattr(status_router, "get_server_status", _status)
    monkeypatch.setattr(service.broadcaster, "last_snapshot", None)
    return calls


def test_status_endpoint(client, fake_status):
    r = client.get("/api/server/status")
    assert r.status_code == 200
    assert r.json()["players"] == 1


def test_websocket_snapshot_refresh_and_errors(client, fake_status):
    with client.websocket_connect("/ws") as ws:
        first = ws.receive_json()
        assert first == {"type": "server_stats", "online": True, "players": 1}
        assert service.broadcaster.client_count == 1

        ws.send_json({"type": "get_server_stats"})
        refreshed = ws.receive_json()
        assert refreshed["players"] == 2

        ws.send_json({"type": "shutdown_server"})
        error = ws.receive_json()
        assert error["type"] == "error"

        ws.send_text("not json")
        with pytest.raises(WebSocketDisconnect) as exc:
            ws.receive_json()
        assert exc.value.code == 1003

    assert service.broadcaster.client_count == 0


def test_websocket_reuses_last_snapshot(client, fake_status):
    service.broadcaster.last_snapshot = {"type": "server_stats", "players": 99}

    with client.websocket_connect("/ws") as ws:
        assert ws.receive_json()["players"] == 99

    assert fake_status == []
