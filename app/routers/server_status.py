"""
server_status.py

게임 서버 상태 API.

- GET /server/status : 실시간 조회 (실패 시 캐시 / 오프라인 스냅샷)
- WS  /ws            : 접속 즉시 마지막 스냅샷 전송, 이후 폴링 주기마다 브로드캐스트
                       클라이언트가 {"type": "get_server_stats"} 를 보내면 즉시 갱신

WebSocket 은 상태를 변경하는 명령을 받지 않는다 (갱신 요청만 허용).

"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.services.server_status import broadcaster, get_server_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/server", tags=["server"])
ws_router = APIRouter(tags=["server"])

REFRESH_MESSAGE_TYPE = "get_server_stats"


@router.get("/status")
async def server_status():
    return await get_server_status()


@ws_router.websocket("/ws")
async def server_status_ws(websocket: WebSocket):
    await websocket.accept()
    broadcaster.add(websocket)
    try:
        snapshot = broadcaster.last_snapshot
        if snapshot is None:
            snapshot = await get_server_status()
            broadcaster.last_snapshot = snapshot
        await websocket.send_json(snapshot)

        while True:
            message = await websocket.receive_json()
            if isinstance(message, dict) and message.get("type") == REFRESH_MESSAGE_TYPE:
                await broadcaster.refresh()
            else:
                await websocket.send_json({"type": "error", "message": "Unknown message type"})
    except WebSocketDisconnect:
        pass
    except ValueError:
        # JSON 이 아닌 메시지는 연결 종료
        logger.info("Closing websocket after invalid message")
        await websocket.close(code=1003)
    finally:
        broadcaster.remove(websocket)
