# -----------------------------------------------------------------------------
# 파일명 : log_streamer/api/stream.py
# 목적   : 라이브 로그 스트림 WebSocket 엔드포인트
# 설명   : 접속 시 허브에 등록, 클라이언트가 끊을 때까지 수신 루프로 연결 상태만 감시, 종료 시 해제
# -----------------------------------------------------------------------------

from __future__ import annotations

from fastapi import APIRouter, WebSocket

from ..broadcast import BroadcastHub


router = APIRouter(tags=["stream"])


@router.websocket("/ws")
async def stream_logs(websocket: WebSocket) -> None:
    """이벤트 1건 = JSON 텍스트 프레임 1개. 클라이언트가 보내는 메시지는 무시한다."""
    hub: BroadcastHub = websocket.app.state.hub
    await websocket.accept()
    subscriber = await hub.register(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        await hub.unregister(subscriber)
