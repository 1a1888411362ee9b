# -----------------------------------------------------------------------------
# 파일명 : log_streamer/controller.py
# 목적   : generator 묶음의 시작/중지 라이프사이클 관리
# 설명   :
#   - running 플래그와 현재 실행(GenerationRun)은 asyncio.Lock 안에서만 바뀐다
#   - start() 마다 새 cancel_event 를 만들어 그 실행의 generator 4개에만 묶는다
#   - stop() 은 취소 신호만 보내고 바로 반환. drain 완료는 supervisor 태스크가 표시한다
#   - 이전 실행이 drain 되기 전의 start() 는 drain 완료까지 기다린 뒤 새 실행을 만든다
#     (두 generator 세트가 동시에 살아 있는 일이 없도록)
# -----------------------------------------------------------------------------

from __future__ import annotations

import asyncio
import time
from typing import Dict, List, Optional

from .broadcast import BroadcastHub
from .core.config import Settings
from .core.logger import get_logger
from .core.stats import Stats
from .errors import AlreadyRunning, NotRunning
from .simulator.base import BaseCategorySimulator
from .simulator.build_simulators import build_simulators
from .simulator_pipeline import create_generator_tasks
from .sink import BatchSink

_logger = get_logger("log_streamer.controller")


class GenerationRun:
    """start~stop 한 사이클. 취소 신호, generator 태스크, drain 완료 신호를 가진다."""

    def __init__(self, run_id: int) -> None:
        self.run_id = run_id
        self.started_at = time.time()
        self.cancel_event = asyncio.Event()
        self.drained = asyncio.Event()
        self.tasks: List[asyncio.Task] = []

    def __repr__(self) -> str:
        return (
            f"GenerationRun(id={self.run_id}, cancelled={self.cancelled}, "
            f"active={self.active_tasks})"
        )

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    @property
    def active_tasks(self) -> int:
        """아직 끝나지 않은 generator 태스크 수."""
        return sum(1 for task in self.tasks if not task.done())

    def cancel(self) -> None:
        self.cancel_event.set()

    async def wait_drained(self) -> None:
        await self.drained.wait()


class LifecycleController:
    """
    generator 묶음의 단일 소유자.

    Args:
        settings: 실행 설정 (interval, 배치 크기 등)
        hub: 이벤트를 받을 BroadcastHub
        sink: 배치를 받을 싱크
        stats: 누적 통계. None 이면 새로 만든다
        simulators: 카테고리 → 시뮬레이터. None 이면 settings 로 생성
    """

    def __init__(
        self,
        settings: Settings,
        hub: BroadcastHub,
        sink: BatchSink,
        stats: Optional[Stats] = None,
        simulators: Optional[Dict[str, BaseCategorySimulator]] = None,
    ) -> None:
        self.settings = settings
        self.hub = hub
        self.sink = sink
        self.stats = stats or Stats()
        self.simulators = simulators if simulators is not None else build_simulators(settings)
        self._lock = asyncio.Lock()
        self._running = False
        self._run: Optional[GenerationRun] = None
        self._run_seq = 0
        self._background: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._running

    @property
    def current_run(self) -> Optional[GenerationRun]:
        """가장 최근 실행 (중지됐지만 drain 중일 수 있음)."""
        return self._run

    async def start(self, duration_sec: Optional[float] = None) -> GenerationRun:
        """
        generator 4개를 새 실행으로 시작한다.

        Args:
            duration_sec: 지정 시 해당 시간이 지나면 이 실행만 자동 중지
        Raises:
            AlreadyRunning: 이미 실행 중일 때
        """
        async with self._lock:
            if self._running:
                raise AlreadyRunning()

            previous = self._run
            if previous is not None and not previous.drained.is_set():
                _logger.info("[controller] waiting for run=%d to drain", previous.run_id)
                await previous.wait_drained()

            self._run_seq += 1
            run = GenerationRun(self._run_seq)
            run.tasks = create_generator_tasks(
                simulators=self.simulators,
                cancel_event=run.cancel_event,
                hub=self.hub,
                sink=self.sink,
                interval_sec=self.settings.interval_sec,
                stats=self.stats,
                run_id=run.run_id,
            )
            self._spawn(self._supervise(run), name=f"supervisor-run{run.run_id}")
            if duration_sec:
                self._spawn(
                    self._auto_stop(run, duration_sec), name=f"auto-stop-run{run.run_id}"
                )

            self._run = run
            self._running = True

        _logger.info(
            "[controller] started run=%d generators=%d interval=%.3fs duration=%s",
            run.run_id,
            len(run.tasks),
            self.settings.interval_sec,
            duration_sec,
        )
        return run

    async def stop(self) -> GenerationRun:
        """
        현재 실행에 취소 신호를 보낸다. generator 종료를 기다리지 않는다.

        Raises:
            NotRunning: 실행 중이 아닐 때
        """
        async with self._lock:
            if not self._running or self._run is None:
                raise NotRunning()
            run = self._run
            run.cancel()
            self._running = False

        _logger.info("[controller] stop requested run=%d", run.run_id)
        return run

    async def wait_drained(self) -> None:
        """가장 최근 실행의 generator 가 모두 끝날 때까지 대기."""
        run = self._run
        if run is not None:
            await run.wait_drained()

    async def shutdown(self) -> None:
        """실행 중이면 중지하고 drain 완료까지 기다린다 (프로세스 종료용)."""
        try:
            await self.stop()
        except NotRunning:
            pass
        await self.wait_drained()
        # supervisor / auto-stop 은 취소 신호 후 곧바로 끝난다
        await asyncio.gather(*self._background, return_exceptions=True)

    def _spawn(self, coro, name: str) -> asyncio.Task:
        # 태스크 참조를 잡아 두어 GC 되지 않게 한다
        task = asyncio.create_task(coro, name=name)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _supervise(self, run: GenerationRun) -> None:
        """실행의 generator 가 모두 끝나면 drained 를 세트한다."""
        results = await asyncio.gather(*run.tasks, return_exceptions=True)
        for task, result in zip(run.tasks, results):
            if isinstance(result, BaseException) and not isinstance(result, asyncio.CancelledError):
                _logger.error(
                    "[controller] generator crashed task=%s error=%r", task.get_name(), result
                )

        # drained 를 먼저 세트: start() 가 락을 잡은 채 기다리고 있을 수 있다
        run.drained.set()
        async with self._lock:
            if self._run is run and self._running:
                # 취소 없이 generator 가 모두 끝난 경우
                run.cancel()
                self._running = False
        _logger.info(
            "[controller] run=%d drained elapsed=%.2fs",
            run.run_id,
            time.time() - run.started_at,
        )

    async def _auto_stop(self, run: GenerationRun, duration_sec: float) -> None:
        """duration_sec 후 이 실행이 아직 돌고 있으면 중지 (1회성)."""
        try:
            await asyncio.wait_for(run.cancel_event.wait(), timeout=duration_sec)
            return
        except asyncio.TimeoutError:
            pass

        async with self._lock:
            if self._run is not run or not self._running:
                return
            run.cancel()
            self._running = False
        _logger.info("[controller] duration completed, run=%d stopped", run.run_id)
