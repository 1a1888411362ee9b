# -----------------------------------------------------------------------------
# 파일명 : log_streamer/run.py
# 목적   : 웹 서버 없이 1회 실행(run_headless): 지정 시간 동안 생성 → 싱크 전송 후 종료
# 설명   : SIGINT/SIGTERM 또는 duration 만료 시 중지하고, generator 가 모두 끝날 때까지 기다린 뒤 반환
# -----------------------------------------------------------------------------

from __future__ import annotations

import asyncio
import signal
from typing import Optional

from .broadcast import BroadcastHub
from .controller import LifecycleController
from .core.config import Settings
from .core.logger import get_logger
from .core.signalz import GracefulKiller
from .core.stats import Stats, stats_reporter
from .errors import NotRunning
from .sink import BatchSink, build_sink

_logger = get_logger("log_streamer.run")


async def run_headless(settings: Settings, sink: Optional[BatchSink] = None) -> Stats:
    """
    로그 생성기를 1회 실행한다.

    Args:
        settings: 검증이 끝난 실행 설정 (duration_sec 이 None 이면 시그널로만 종료)
        sink: 테스트/주입용 싱크. None 이면 설정에 맞게 생성

    Returns:
        Stats: 실행 동안의 누적 통계
    """
    stats = Stats()
    # 구독자가 없는 허브: publish 는 직렬화만 하고 끝난다
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

    loop = asyncio.get_running_loop()
    pending_stops: set[asyncio.Task] = set()

    async def _stop() -> None:
        try:
            await controller.stop()
        except NotRunning:
            pass

    def _on_signal(sig: signal.Signals) -> None:
        _logger.info("[run] received signal %s, stopping log generation...", sig.name)
        task = loop.create_task(_stop())
        pending_stops.add(task)
        task.add_done_callback(pending_stops.discard)

    killer = GracefulKiller(loop, on_signal=_on_signal)
    try:
        run = await controller.start(duration_sec=settings.duration_sec)
        reporter = asyncio.create_task(
            stats_reporter(stats, run.cancel_event, interval_sec=settings.log_interval_sec),
            name="stats-reporter",
        )
        await run.wait_drained()
        await reporter
    finally:
        killer.restore()
        await controller.shutdown()

    _logger.info("[run] log generation stopped successfully. %s", stats.summary())
    return stats
