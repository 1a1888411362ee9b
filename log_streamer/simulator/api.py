# -----------------------------------------------------------------------------
# 파일명 : log_streamer/simulator/api.py
# 목적   : HTTP API 요청 로그를 흉내 내는 시뮬레이터
# 설명   : 메서드/경로/상태코드를 균등 선택, 처리 시간은 0~999ms 정수
# -----------------------------------------------------------------------------

from __future__ import annotations
import random

from ..schema import LogEvent
from .base import API_PATHS, HTTP_METHODS, STATUS_CODES, BaseCategorySimulator


class ApiSimulator(BaseCategorySimulator):
    """API 요청 완료 로그. status_code/method/path/duration_ms 필드를 채운다."""

    category = "api"

    def generate_event_one(self) -> LogEvent:
        method = self.pick(HTTP_METHODS)
        path = self.pick(API_PATHS)
        status_code = self.pick(STATUS_CODES)
        duration = random.randint(0, 999)

        return LogEvent(
            timestamp=self.now_utc_iso(),
            level=self.pick_level(),
            service=self.pick_service(),
            message=f"HTTP {method} {path} completed in {duration}ms with status {status_code}",
            environment=self.pick_environment(),
            status_code=status_code,
            method=method,
            path=path,
            duration_ms=duration,
        )
