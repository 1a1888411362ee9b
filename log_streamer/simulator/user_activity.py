# -----------------------------------------------------------------------------
# 파일명 : log_streamer/simulator/user_activity.py
# 목적   : 사용자 행동(login/purchase 등) 로그 시뮬레이터
# 설명   : 브라우저/플랫폼/사설 IP를 metadata에 담는다. IP는 Faker로 생성
# -----------------------------------------------------------------------------

from __future__ import annotations
import random

from ..schema import LogEvent
from .base import BROWSERS, PLATFORMS, USER_ACTIONS, BaseCategorySimulator


class UserActivitySimulator(BaseCategorySimulator):
    """사용자 활동 로그. 레벨은 항상 INFO."""

    category = "user_activity"
    service = "user-activity-service"

    def generate_user_id(self) -> str:
        """ 유저 ID 생성 (user_0 ~ user_999) """
        return f"user_{random.randint(0, 999)}"

    def generate_event_one(self) -> LogEvent:
        user_id = self.generate_user_id()
        action = self.pick(USER_ACTIONS)

        return LogEvent(
            timestamp=self.now_utc_iso(),
            level="INFO",
            service=self.service,
            message=f"User {user_id} performed action: {action}",
            environment=self.pick_environment(),
            user_id=user_id,
            action=action,
            metadata={
                "browser": self.pick(BROWSERS),
                "platform": self.pick(PLATFORMS),
                "ip": self.fake.ipv4_private(),
            },
        )
