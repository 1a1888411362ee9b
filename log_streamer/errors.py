# -----------------------------------------------------------------------------
# 파일명 : log_streamer/errors.py
# 목적   : 라이프사이클/구독자/설정 예외 정의
# 설명   : 싱크 전송 실패와 직렬화 실패는 예외가 아니라 DeliveryResult로 보고됨(sink.py)
# -----------------------------------------------------------------------------

from __future__ import annotations


class LifecycleError(Exception):
    """start/stop 오용. 호출자에게 보고되며 프로세스에는 치명적이지 않다."""


class AlreadyRunning(LifecycleError):
    def __init__(self) -> None:
        super().__init__("Log generation already running")


class NotRunning(LifecycleError):
    def __init__(self) -> None:
        super().__init__("Log generation not running")


class SubscriberSendFailure(Exception):
    """구독자에게 페이로드를 넘길 수 없음(닫힘/끊김). BroadcastHub 안에서만 처리된다."""


class ConfigError(ValueError):
    """시작 시점 설정 검증 실패."""
