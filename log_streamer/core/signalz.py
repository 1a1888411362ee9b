# -----------------------------------------------------------------------------
# 파일명 : log_streamer/core/signalz.py
# 목적   : 종료 시그널(SIGINT/SIGTERM) 처리 도우미 (asyncio 이벤트 루프용)
# 사용   : run_headless() 에서 시그널 수신 시 controller.stop() 을 예약
# -----------------------------------------------------------------------------

from __future__ import annotations
import asyncio
import signal
from typing import Callable, List


class GracefulKiller:
    """
    SIGINT/SIGTERM을 받아 on_signal 콜백을 호출하는 헬퍼.

    사용:
        killer = GracefulKiller(loop, on_signal=request_stop)
        ...
        killer.restore()
    """

    SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        on_signal: Callable[[signal.Signals], None] | None = None,
    ) -> None:
        self._loop = loop
        self._on_signal = on_signal
        self._installed: List[signal.Signals] = []
        for sig in self.SIGNALS:
            try:
                loop.add_signal_handler(sig, self._handle, sig)
            except (NotImplementedError, RuntimeError):
                # Windows 루프 또는 메인 스레드가 아닌 경우
                continue
            self._installed.append(sig)

    def _handle(self, sig: signal.Signals) -> None:
        if self._on_signal is not None:
            self._on_signal(sig)

    def restore(self) -> None:
        """설치한 시그널 핸들러를 해제한다."""
        for sig in self._installed:
            self._loop.remove_signal_handler(sig)
        self._installed.clear()
