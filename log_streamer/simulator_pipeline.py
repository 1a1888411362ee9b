# -----------------------------------------------------------------------------
# 파일명 : log_streamer/simulator_pipeline.py
# 목적   : 카테고리별 generator 루프(고정 주기 tick)를 구성하고 허브/싱크로 흘려보냄
# 설명   :
#   - tick 마다 배치 생성 → 이벤트를 1건씩 허브에 publish → publish 된 이벤트를 Batch 로 싱크에 전달
#   - "다음 tick" 과 "취소 신호" 중 먼저 오는 쪽을 기다린다. 취소되면 즉시 루프 종료
#   - 진행 중이던 tick 에서 취소되면 이미 publish 한 이벤트까지만 싱크로 보낸다
# -----------------------------------------------------------------------------

from __future__ import annotations

import asyncio
from typing import Dict, List

from .broadcast import BroadcastHub
from .core.logger import get_logger
from .core.stats import Stats
from .schema import Batch, LogEvent
from .simulator.base import BaseCategorySimulator
from .sink import BatchSink

_logger = get_logger("log_streamer.simulator_pipeline")


async def _run_tick(
    category: str,
    simulator: BaseCategorySimulator,
    cancel_event: asyncio.Event,
    hub: BroadcastHub,
    sink: BatchSink,
    stats: Stats,
) -> None:
    """tick 1회: 생성 → publish(순서 유지) → 싱크 전달."""
    events = simulator.generate_batch()

    emitted: List[LogEvent] = []
    for event in events:
        if cancel_event.is_set():
            break
        await hub.publish(event)
        emitted.append(event)

    if not emitted:
        return
    stats.add_generated(category, len(emitted))
    stats.add_published(len(emitted))

    batch = Batch(category=category, events=tuple(emitted))
    result = await sink.deliver(batch)
    stats.add_delivery(result.accepted)
    if not result.accepted:
        _logger.warning(
            "[generator] batch dropped category=%s size=%d reason=%s",
            category,
            len(batch),
            result.reason,
        )


async def _generator_loop(
    category: str,
    simulator: BaseCategorySimulator,
    cancel_event: asyncio.Event,
    hub: BroadcastHub,
    sink: BatchSink,
    interval_sec: float,
    stats: Stats,
) -> None:
    """취소 신호가 올 때까지 interval_sec 주기로 tick 을 돈다."""
    loop = asyncio.get_running_loop()
    next_tick = loop.time() + interval_sec
    ticks = 0

    try:
        while not cancel_event.is_set():
            timeout = max(0.0, next_tick - loop.time())
            try:
                await asyncio.wait_for(cancel_event.wait(), timeout=timeout)
                break
            except asyncio.TimeoutError:
                pass

            # 고정 주기 유지. tick 이 밀리면 놓친 tick 은 건너뛴다
            next_tick += interval_sec
            now = loop.time()
            if next_tick <= now:
                next_tick = now + interval_sec

            ticks += 1
            try:
                await _run_tick(category, simulator, cancel_event, hub, sink, stats)
            except Exception:
                _logger.exception("[generator] tick failed category=%s tick=%d", category, ticks)
    finally:
        _logger.info("[generator] stopped category=%s ticks=%d", category, ticks)


def create_generator_tasks(
    simulators: Dict[str, BaseCategorySimulator],
    cancel_event: asyncio.Event,
    hub: BroadcastHub,
    sink: BatchSink,
    interval_sec: float,
    stats: Stats,
    run_id: int = 0,
) -> List[asyncio.Task]:
    """카테고리별 generator 태스크를 생성. 모두 같은 cancel_event 를 공유한다."""
    return [
        asyncio.create_task(
            _generator_loop(
                category=category,
                simulator=simulator,
                cancel_event=cancel_event,
                hub=hub,
                sink=sink,
                interval_sec=interval_sec,
                stats=stats,
            ),
            name=f"generator-{category}-run{run_id}",
        )
        for category, simulator in simulators.items()
    ]
