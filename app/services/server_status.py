"""
services/server_status.py

게임 서버 실시간 상태 조회 / 캐시 / 브로드캐스트 서비스.

주요 기능:
- 게임 서버의 info.json / players.json / dynamic.json 을 httpx.AsyncClient 로 조회
- 조회 성공 시 스냅샷을 server_status_cache(id=1)에 저장하고 표본(server_stat_samples) 기록
- 조회 실패 시
    1) 캐시된 스냅샷이 있으면 cached=True 로 표시하여 반환
    2) 없으면 사이트 설정(server_name / server_max_players / server_online) 기반 오프라인 스냅샷
- 연결된 WebSocket 클라이언트 전체에 스냅샷 브로드캐스트 (끊어진 소켓은 제거)
- APScheduler AsyncIOScheduler 로 주기적 폴링

설계 원칙:
- 외부 서버는 신뢰할 수 없는 best-effort 대상: 고정 타임아웃, 재시도는 다음 주기에
- 실패는 로그(WARNING)만 남기고 요청/프로세스를 죽이지 않음 (캐시 DB 장애 포함)
- 캐시는 사이트 설정 테이블과 분리된 전용 테이블 사용
- 동기 DB 작업은 run_in_threadpool 로 이벤트 루프 밖에서 수행

관련 파일:
- app.models.settings          : ServerStatusCache / ServerStatSample / SiteSetting
- app.routers.server_status    : REST /api/server/status, WebSocket /ws
- app.main                     : lifespan 에서 poller.start() / poller.stop()

"""

import logging
import re
import time
from datetime import datetime

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from fastapi import WebSocket
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from app.core.config import settings
from app.db.base import utcnow
from app.db.session import SessionLocal
from app.models.settings import ServerStatSample, ServerStatusCache
from app.services.settings import get_site_value

logger = logging.getLogger(__name__)

CACHE_ROW_ID = 1
# FiveM 호스트명에 들어가는 색상 코드 (^0 ~ ^9)
_COLOR_CODE_RE = re.compile(r"\^\d")


class StatusFetchError(Exception):
    pass


def _to_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _player_names(players: list) -> list[str]:
    return [p["name"] for p in players if isinstance(p, dict) and isinstance(p.get("name"), str)]


"""
조회 결과 → 스냅샷 변환

- maxPlayers  : info.vars.sv_maxClients (없으면 기본값)
- serverName  : info.vars.sv_hostname / dynamic.hostname (색상 코드 제거)
- resources   : dynamic.resources 또는 info.resources 개수
- playerStats : 이름 규칙으로 분류 ("COPE" 포함 → 경찰, "SAMU" 포함 → 의료, "[STAFF]" 시작 → 운영진)

"""

def build_snapshot(
    info: dict,
    players: list,
    dynamic: dict | None,
    *,
    ping_ms: int,
    fetched_at: datetime,
) -> dict:
    variables = info.get("vars") or {}
    dynamic = dynamic or {}

    raw_name = variables.get("sv_hostname") or dynamic.get("hostname") or settings.STATUS_DEFAULT_SERVER_NAME
    server_name = _COLOR_CODE_RE.sub("", str(raw_name)).strip() or settings.STATUS_DEFAULT_SERVER_NAME

    resources = dynamic.get("resources")
    if not isinstance(resources, list):
        resources = info.get("resources")
    resource_count = len(resources) if isinstance(resources, list) else None

    names = _player_names(players)

    return {
        "type": "server_stats",
        "online": True,
        "players": len(players),
        "maxPlayers": _to_int(
            variables.get("sv_maxClients", dynamic.get("sv_maxclients")),
            settings.STATUS_DEFAULT_MAX_PLAYERS,
        ),
        "serverName": server_name,
        "lastRestart": None,
        "ping": ping_ms,
        "resources": resource_count,
        "playerStats": {
            "total": len(players),
            "police": sum(1 for n in names if "COPE" in n),
            "medic": sum(1 for n in names if "SAMU" in n),
            "staff": sum(1 for n in names if n.startswith("[STAFF]")),
        },
        "cached": False,
        "fetchedAt": fetched_at.isoformat(),
    }


"""
게임 서버에서 실시간 상태 조회

- info.json / players.json 실패 시 StatusFetchError
- dynamic.json 은 선택 (실패해도 진행)
- client 를 넘기면 그 클라이언트 사용 (테스트에서 MockTransport 주입)

"""

async def fetch_live_status(client: httpx.AsyncClient | None = None) -> dict:
    http = client or httpx.AsyncClient(
        base_url=settings.game_server_base_url,
        timeout=settings.STATUS_FETCH_TIMEOUT_SECONDS,
    )
    try:
        started = time.perf_counter()
        info_response = await http.get("/info.json")
        ping_ms = round((time.perf_counter() - started) * 1000)
        if info_response.status_code != 200:
            raise StatusFetchError(f"info.json returned {info_response.status_code}")
        info = info_response.json()

        players_response = await http.get("/players.json")
        if players_response.status_code != 200:
            raise StatusFetchError(f"players.json returned {players_response.status_code}")
        players = players_response.json()
        if not isinstance(players, list):
            logger.warning("players.json did not return a list")
            players = []

        dynamic = None
        try:
            dynamic_response = await http.get("/dynamic.json")
            if dynamic_response.status_code == 200:
                dynamic = dynamic_response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.info("dynamic.json unavailable: %s", e)

    except httpx.HTTPError as e:
        raise StatusFetchError(str(e) or type(e).__name__) from e
    except ValueError as e:
        raise StatusFetchError(f"Invalid JSON from game server: {e}") from e
    finally:
        if client is None:
            await http.aclose()

    if not isinstance(info, dict):
        raise StatusFetchError("info.json did not return an object")
    if dynamic is not None and not isinstance(dynamic, dict):
        dynamic = None

    return build_snapshot(info, players, dynamic, ping_ms=ping_ms, fetched_at=utcnow())


def save_snapshot(snapshot: dict) -> None:
    with SessionLocal() as db:
        cache = db.get(ServerStatusCache, CACHE_ROW_ID)
        if cache:
            cache.payload = dict(snapshot)
            cache.fetched_at = utcnow()
        else:
            db.add(ServerStatusCache(id=CACHE_ROW_ID, payload=dict(snapshot), fetched_at=utcnow()))
        db.add(
            ServerStatSample(
                online=bool(snapshot.get("online")),
                players=int(snapshot.get("players") or 0),
                max_players=int(snapshot.get("maxPlayers") or 0),
            )
        )
        db.commit()


"""
조회 실패 시 반환할 스냅샷

- 캐시가 있으면 캐시 + cached=True
- 없으면 사이트 설정 기반 오프라인 스냅샷 + error

"""

def fallback_snapshot() -> dict:
    with SessionLocal() as db:
        cache = db.get(ServerStatusCache, CACHE_ROW_ID)
        if cache and cache.payload:
            snapshot = dict(cache.payload)
            snapshot["cached"] = True
            return snapshot

        server_name = get_site_value(db, "server_name", settings.STATUS_DEFAULT_SERVER_NAME)
        max_players = _to_int(
            get_site_value(db, "server_max_players"), settings.STATUS_DEFAULT_MAX_PLAYERS
        )
        online = get_site_value(db, "server_online", "false") == "true"

    return offline_snapshot(server_name, max_players, online=online)


def offline_snapshot(
    server_name: str | None = None,
    max_players: int | None = None,
    *,
    online: bool = False,
) -> dict:
    """DB 조회 없이 만드는 오프라인 스냅샷 (설정값이 없으면 기본값)."""
    return {
        "type": "server_stats",
        "online": online,
        "players": 0,
        "maxPlayers": max_players if max_players is not None else settings.STATUS_DEFAULT_MAX_PLAYERS,
        "serverName": server_name or settings.STATUS_DEFAULT_SERVER_NAME,
        "lastRestart": None,
        "ping": 0,
        "resources": None,
        "playerStats": {"total": 0, "police": 0, "medic": 0, "staff": 0},
        "cached": False,
        "fetchedAt": utcnow().isoformat(),
        "error": "Server unavailable",
    }


async def get_server_status(client: httpx.AsyncClient | None = None) -> dict:
    try:
        snapshot = await fetch_live_status(client)
    except StatusFetchError as e:
        logger.warning("Game server status fetch failed: %s", e)
        try:
            return await run_in_threadpool(fallback_snapshot)
        except SQLAlchemyError as db_error:
            logger.warning("Status fallback lookup failed: %s", db_error)
            return offline_snapshot()

    # 캐시 저장 실패는 조회 결과에 영향 없음
    try:
        await run_in_threadpool(save_snapshot, snapshot)
    except SQLAlchemyError as e:
        logger.warning("Could not persist server status snapshot: %s", e)
    return snapshot


class StatusBroadcaster:
    """연결된 WebSocket 클라이언트 목록과 마지막 스냅샷을 보관."""

    def __init__(self):
        self._clients: set[WebSocket] = set()
        self.last_snapshot: dict | None = None

    @property
    def client_count(self) -> int:
        return len(self._clients)

    def add(self, websocket: WebSocket) -> None:
        self._clients.add(websocket)

    def remove(self, websocket: WebSocket) -> None:
        self._clients.discard(websocket)

    async def broadcast(self, snapshot: dict) -> None:
        self.last_snapshot = snapshot
        dead = []
        for websocket in list(self._clients):
            try:
                await websocket.send_json(snapshot)
            except Exception as e:  # 끊어진 소켓은 종류와 무관하게 제거
                logger.info("Dropping websocket client: %s", type(e).__name__)
                dead.append(websocket)
        for websocket in dead:
            self._clients.discard(websocket)

    async def refresh(self, client: httpx.AsyncClient | None = None) -> dict:
        snapshot = await get_server_status(client)
        await self.broadcast(snapshot)
        return snapshot


class StatusPoller:
    """
    주기적으로 게임 서버 상태를 조회하여 브로드캐스트하는 스케줄러 래퍼.

    - STATUS_POLL_INTERVAL_SECONDS 간격 IntervalTrigger
    - 시작 직후 1회 즉시 실행 (next_run_time)
    - 이전 실행이 끝나지 않았으면 겹쳐 실행하지 않음 (max_instances=1)
    """

    def __init__(self, broadcaster: StatusBroadcaster):
        self.broadcaster = broadcaster
        self.scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return self.scheduler is not None and self.scheduler.running

    async def _tick(self) -> None:
        try:
            await self.broadcaster.refresh()
        except Exception:
            logger.exception("Server status poll failed")

    def start(self) -> None:
        if self.running:
            logger.warning("Status poller already running")
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self._tick,
            trigger=IntervalTrigger(seconds=settings.STATUS_POLL_INTERVAL_SECONDS),
            id="server_status_poll",
            max_instances=1,
            coalesce=True,
            next_run_time=utcnow(),
        )
        self.scheduler.start()
        logger.info("Status poller started (every %ss)", settings.STATUS_POLL_INTERVAL_SECONDS)

    def stop(self) -> None:
        if self.scheduler is not None and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        self.scheduler = None
        logger.info("Status poller stopped")


broadcaster = StatusBroadcaster()
poller = StatusPoller(broadcaster)
