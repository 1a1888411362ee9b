# -----------------------------------------------------------------------------
# 파일명 : log_streamer/core/stats.py
# 목적   : 생성/전송/브로드캐스트 카운터 및 처리율(EPS) 로그 보조
# 설명   : generator 루프가 add_*() 로 누적하고, stats_reporter가 일정 주기마다 summary() 로그를 남김
# -----------------------------------------------------------------------------
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict

from .logger import get_logger

_logger = get_logger("log_streamer.stats")


@dataclass
class Stats:
    """
    누적 통계.
    - generated_by_category: 카테고리별 생성 건수
    - batches_delivered / batches_failed: 싱크 수락/실패 배치 수
    - events_published: 허브로 보낸 이벤트 수
    - events_dropped: 구독자 큐 overflow 로 버려진 건수
    """
    started_at: float = field(default_factory=time.time)
    generated_by_category: Dict[str, int] = field(default_factory=dict)
    batches_delivered: int = 0
    batches_failed: int = 0
    events_published: int = 0
    events_dropped: int = 0

    @property
    def total_generated(self) -> int:
        return sum(self.generated_by_category.values())

    def add_generated(self, category: str, n: int) -> None:
        """카테고리별/전체 생성량을 누적."""
        self.generated_by_category[category] = self.generated_by_category.get(category, 0) + n

    def add_published(self, n: int = 1) -> None:
        self.events_published += n

    def add_dropped(self, n: int = 1) -> None:
        self.events_dropped += n

    def add_delivery(self, accepted: bool) -> None:
        if accepted:
            self.batches_delivered += 1
        else:
            self.batches_failed += 1

    def snapshot(self) -> Dict[str, Any]:
        """상태 API 응답용 dict."""
        return {
            "total_generated": self.total_generated,
            "generated_by_category": dict(sorted(self.generated_by_category.items())),
            "batches_delivered": self.batches_delivered,
            "batches_failed": self.batches_failed,
            "events_published": self.events_published,
            "events_dropped": self.events_dropped,
        }

    def summary(self) -> str:
        """
        현재까지의 처리율 요약 문자열을 반환.
        - 평균 EPS = total_generated / elapsed
        - 카테고리별 분포 표시
        """
        elapsed = max(1e-6, time.time() - self.started_at)
        eps = self.total_generated / elapsed
        parts = [f"{k}:{v}" for k, v in sorted(self.generated_by_category.items())]
        return (
            f"[stats] total={self.total_generated} avg_eps={eps:.1f} "
            f"batches_ok={self.batches_delivered} batches_failed={self.batches_failed} "
            f"dropped={self.events_dropped} by_category=({', '.join(parts)})"
        )


async def stats_reporter(
    stats: Stats,
    stop_event: asyncio.Event,
    interval_sec: float = 5.0,
    logger: logging.Logger | None = None,
) -> None:
    """
    stop_event 가 세트될 때까지 interval_sec 마다 summary() 를 로그로 남긴다.

    Args:
        stats: 누적 통계 객체
        stop_event: 실행 종료 신호 (보통 GenerationRun.cancel_event)
        interval_sec: 로그 주기(초)
        logger: 기본 logger 대체용
    """
    log = logger or _logger
    while not stop_event.is_set():
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_sec)
        except asyncio.TimeoutError:
            log.info(stats.summary())
