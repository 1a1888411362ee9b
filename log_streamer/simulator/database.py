# -----------------------------------------------------------------------------
# 파일명 : log_streamer/simulator/database.py
# 목적   : DB 쿼리 실행 로그를 흉내 내는 시뮬레이터
# 설명   : 연산/테이블을 균등 선택, 처리 시간 0~499ms, rows 1~100을 metadata에 기록
# -----------------------------------------------------------------------------

from __future__ import annotations
import random

from ..schema import LogEvent
from .base import DB_OPERATIONS, DB_TABLES, BaseCategorySimulator


class DatabaseSimulator(BaseCategorySimulator):
    """
    데이터베이스(database) 로그 시뮬레이터.

    - action 에 연산(SELECT/INSERT/...)을 넣는다.
    - 테이블/연산/rows 는 metadata 로 보낸다.
    """

    category = "database"

    def generate_event_one(self) -> LogEvent:
        operation = self.pick(DB_OPERATIONS)
        table = self.pick(DB_TABLES)
        duration = random.randint(0, 499)

        return LogEvent(
            timestamp=self.now_utc_iso(),
            level=self.pick_level(),
            service=self.pick_service(),
            message=f"Database operation {operation} on table {table} completed in {duration}ms",
            environment=self.pick_environment(),
            duration_ms=duration,
            action=operation,
            metadata={
                "query_type": operation,
                "table": table,
                "rows": random.randint(1, 100),
            },
        )
