# -----------------------------------------------------------------------------
# 파일명 : log_streamer/api/control.py
# 목적   : 로그 생성 시작/중지 및 상태 조회 REST 엔드포인트
# 설명   : AlreadyRunning → 409, NotRunning → 400 으로 매핑
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..controller import LifecycleController
from ..errors import AlreadyRunning, NotRunning


router = APIRouter(tags=["control"])


def get_controller(request: Request) -> LifecycleController:
    return request.app.state.controller


@router.get("/")
async def status(controller: LifecycleController = Depends(get_controller)) -> Dict[str, Any]:
    """현재 실행 상태, 구독자 수, 누적 통계."""
    run = controller.current_run
    return {
        "running": controller.running,
        "run_id": run.run_id if run else None,
        "draining": bool(run and not controller.running and not run.drained.is_set()),
        "subscribers": controller.hub.subscriber_count,
        "stats": controller.stats.snapshot(),
    }


@router.post("/start")
async def start_generation(
    duration_sec: Optional[float] = Query(
        None,
        gt=0,
        description="지정 시 해당 초가 지나면 자동 중지",
    ),
    controller: LifecycleController = Depends(get_controller),
) -> Dict[str, Any]:
    """
    POST /start
    → generator 4개 시작. 이미 실행 중이면 409.
    """
    try:
        run = await controller.start(duration_sec=duration_sec)
    except AlreadyRunning as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return {"status": "started", "run_id": run.run_id}


@router.post("/stop")
async def stop_generation(
    wait: bool = Query(False, description="true 면 generator 가 모두 끝날 때까지 기다린 뒤 응답"),
    controller: LifecycleController = Depends(get_controller),
) -> Dict[str, Any]:
    """
    POST /stop
    → 취소 신호 전송. 실행 중이 아니면 400.
    """
    try:
        run = await controller.stop()
    except NotRunning as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if wait:
        await run.wait_drained()
    return {
        "status": "stopped" if run.drained.is_set() else "stopping",
        "run_id": run.run_id,
    }
