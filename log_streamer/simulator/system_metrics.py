# -----------------------------------------------------------------------------
# 파일명 : log_streamer/simulator/system_metrics.py
# 목적   : 호스트 자원 사용률(CPU/메모리/디스크) 로그 시뮬레이터
# 설명   : 각 사용률은 [0, 100) 균등 분포, 소수 둘째 자리로 반올림
# -----------------------------------------------------------------------------

from __future__ import annotations
import random

from ..schema import LogEvent
from .base import BaseCategorySimulator


class SystemMetricsSimulator(BaseCategorySimulator):
    category = "system_metrics"
    service = "system-metrics"

    def generate_event_one(self) -> LogEvent:
        cpu = round(random.uniform(0, 100), 2)
        memory = round(random.uniform(0, 100), 2)
        disk = round(random.uniform(0, 100), 2)

        return LogEvent(
            timestamp=self.now_utc_iso(),
            level="INFO",
            service=self.service,
            message=f"System metrics: CPU: {cpu:.2f}%, Memory: {memory:.2f}%, Disk: {disk:.2f}%",
            environment=self.pick_environment(),
            metadata={
                "cpu": cpu,
                "memory": memory,
                "disk": disk,
                "host": f"server-{random.randint(1, 10)}",
            },
        )
