# -----------------------------------------------------------------------------
# 패키지 : log_streamer/simulator
# 목적   : 카테고리별 시뮬레이터(API/DB/UserActivity/SystemMetrics)와 REGISTRY 매핑 제공
# 설명   : build_simulators()가 REGISTRY를 참조해 네 개의 generator를 인스턴스화함
# -----------------------------------------------------------------------------

from .api import ApiSimulator
from .database import DatabaseSimulator
from .user_activity import UserActivitySimulator
from .system_metrics import SystemMetricsSimulator

# 카테고리명 → 시뮬레이터 클래스 매핑
REGISTRY = {
    "api": ApiSimulator,
    "database": DatabaseSimulator,
    "user_activity": UserActivitySimulator,
    "system_metrics": SystemMetricsSimulator,
}

__all__ = [
    "ApiSimulator",
    "DatabaseSimulator",
    "UserActivitySimulator",
    "SystemMetricsSimulator",
    "REGISTRY",
]
