# -----------------------------------------------------------------------------
# 파일명 : log_streamer/main.py
# 목적   : FastAPI 앱 팩토리. /start /stop / 상태 API 와 /ws 라이브 스트림을 묶는다
# 설명   : 컨트롤러/허브/통계는 앱 1개당 1개씩 만들어 app.state 에 둔다.
#          shutdown 이벤트에서 실행 중인 generator 를 중지하고 drain 완료까지 기다림
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from .api import control, stream
from .broadcast import BroadcastHub
from .controller import LifecycleController
from .core.config import Settings
from .core.stats import Stats
from .sink import BatchSink, build_sink


def create_app(settings: Settings, sink: Optional[BatchSink] = None) -> FastAPI:
    """
    Args:
        settings: 검증이 끝난 실행 설정
        sink: 테스트/주입용 싱크. None 이면 설정에 맞게 생성
    """
    stats = Stats()
    hub = BroadcastHub(
        queue_size=settings.subscriber_queue_size,
        overflow_policy=settings.overflow_policy,
        send_timeout_sec=settings.send_timeout_sec,
        on_drop=stats.add_dropped,
    )
    controller = LifecycleController(
        settings=settings,
        hub=hub,
        sink=sink or build_sink(settings),
        stats=stats,
    )

    app = FastAPI(title="log-streamer")
    app.state.settings = settings
    app.state.stats = stats
    app.state.hub = hub
    app.state.controller = controller

    app.include_router(control.router)
    app.include_router(stream.router)

    @app.get("/ping")
    async def ping():
        return {"status": "ok"}

    @app.on_event("shutdown")
    async def stop_generation() -> None:
        # 실행 중인 generator 를 멈추고 모두 끝난 뒤 구독자 연결을 닫는다
        await controller.shutdown()
        await hub.close()

    return app
