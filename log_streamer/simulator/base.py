# -----------------------------------------------------------------------------
# 파일명 : log_streamer/simulator/base.py
# 목적   : 카테고리별 시뮬레이터가 공통으로 사용하는 베이스 클래스/어휘 정의
# 설명   : 레벨/환경/서비스 선택, UTC ISO 시각 생성, 배치 크기 결정 등을 제공
# -----------------------------------------------------------------------------
from __future__ import annotations
from typing import List, Optional, Sequence, Tuple, TypeVar
from datetime import datetime, timezone
import random
from faker import Faker

from ..schema import ENVIRONMENTS, LOG_LEVELS, LogEvent

T = TypeVar("T")

# ---------- 공통 어휘 ----------
SERVICES: Tuple[str, ...] = (
    "auth-service",
    "user-service",
    "payment-service",
    "inventory-service",
    "notification-service",
)
API_PATHS: Tuple[str, ...] = ("/api/users", "/api/products", "/api/orders", "/api/auth", "/api/payments")
HTTP_METHODS: Tuple[str, ...] = ("GET", "POST", "PUT", "DELETE")
STATUS_CODES: Tuple[int, ...] = (200, 201, 400, 401, 403, 404, 500)
DB_OPERATIONS: Tuple[str, ...] = ("SELECT", "INSERT", "UPDATE", "DELETE")
DB_TABLES: Tuple[str, ...] = ("users", "products", "orders", "payments", "inventory")
USER_ACTIONS: Tuple[str, ...] = ("login", "logout", "purchase", "view_item", "update_profile")
BROWSERS: Tuple[str, ...] = ("Chrome", "Firefox", "Safari", "Edge")
PLATFORMS: Tuple[str, ...] = ("Windows", "MacOS", "Linux", "iOS", "Android")

DEFAULT_BATCH_RANGE: Tuple[int, int] = (2, 5)


class BaseCategorySimulator:
    """
    카테고리별 로그 시뮬레이터의 공통 베이스 클래스.

    역할
    - 고정 어휘에서 균등 분포로 값 선택(pick)
    - 공통 유틸(UTC ISO 시각) 제공
    - tick마다 만들 배치 크기 결정: batch_size가 있으면 고정, 없으면 범위 내 랜덤

    사용 패턴
    - 서브클래스에서 category를 설정하고, generate_event_one()만 구현하면 됨.
      예) class ApiSimulator(BaseCategorySimulator): category = "api"
    """

    category: str = "base"

    def __init__(
        self,
        batch_size: Optional[int] = None,
        batch_size_range: Tuple[int, int] = DEFAULT_BATCH_RANGE,
    ):
        """
        Args:
            batch_size: 고정 배치 크기. None이면 batch_size_range에서 랜덤
            batch_size_range: (min, max) 포함 범위
        Raises:
            ValueError: 크기 값이 1 미만이거나 min > max 일 때
        """
        low, high = batch_size_range
        if batch_size is not None and batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if low < 1 or low > high:
            raise ValueError(f"invalid batch_size_range: {batch_size_range}")
        self.batch_size = batch_size
        self.batch_size_range = (low, high)
        self.fake = Faker()

    # ---------- 공통 유틸 ----------

    @staticmethod
    def pick(choices: Sequence[T]) -> T:
        """어휘 목록에서 1개를 균등 확률로 선택한다."""
        return random.choice(choices)

    @staticmethod
    def now_utc_iso() -> str:
        """
        현재 UTC 시각을 ISO8601 문자열로 반환한다. (밀리초 없음, 접미사 Z)
        Returns:
            str: 예) "2025-11-05T07:55:10Z"
        """
        return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    def pick_level(self) -> str:
        return self.pick(LOG_LEVELS)

    def pick_environment(self) -> str:
        return self.pick(ENVIRONMENTS)

    def pick_service(self) -> str:
        return self.pick(SERVICES)

    def pick_batch_size(self) -> int:
        """이번 tick에 만들 이벤트 개수."""
        if self.batch_size is not None:
            return self.batch_size
        return random.randint(*self.batch_size_range)

    # ---------- 생성 템플릿 ----------

    def generate_event_one(self) -> LogEvent:
        """
        단일 로그 이벤트를 생성한다.
        서브클래스에서 카테고리 특화 로직으로 구현해야 한다.
        """
        raise NotImplementedError

    def generate_events(self, count: int) -> List[LogEvent]:
        """
        지정된 개수만큼 단일 이벤트를 생성해 리스트로 반환한다.
        Args:
            count: 생성할 이벤트 개수
        """
        return [self.generate_event_one() for _ in range(count)]

    def generate_batch(self) -> List[LogEvent]:
        """pick_batch_size() 만큼 이벤트를 생성한다. (생성 순서 유지)"""
        return self.generate_events(self.pick_batch_size())
