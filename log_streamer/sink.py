# -----------------------------------------------------------------------------
# 파일명 : log_streamer/sink.py
# 목적   : 배치를 외부 수집 엔드포인트로 보내는 싱크 어댑터 (HTTP POST / stdout)
# 설명   :
#   - 배치 1개 = JSON 배열 1개 = 요청 1번. Content-Type/Authorization(Bearer) 헤더 포함
#   - 타임아웃(기본 10초) 내 응답이 없거나 2xx 가 아니면 실패로 본다
#   - 재시도/백오프/재전송 버퍼 없음. 호출 측(generator)은 결과를 로그로 남기고 버린다
#   - urllib 호출은 blocking 이라 공용 ThreadPoolExecutor 에서 실행해 이벤트 루프를 막지 않는다
# -----------------------------------------------------------------------------

from __future__ import annotations

import asyncio
import atexit
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Protocol, TextIO, runtime_checkable
from urllib import error, request

from .core.config import Settings
from .core.logger import get_logger
from .schema import Batch

_EXECUTOR: Optional[ThreadPoolExecutor] = None
_EXECUTOR_SHUTDOWN_REGISTERED = False

_logger = get_logger("log_streamer.sink")

# 실패 응답 본문은 로그에 이 길이까지만 남긴다
ERROR_BODY_LIMIT = 512


def get_executor() -> ThreadPoolExecutor:
    """Lazy executor with shutdown hook."""
    global _EXECUTOR, _EXECUTOR_SHUTDOWN_REGISTERED
    if _EXECUTOR is None:
        max_workers = int(os.getenv("LS_SINK_EXECUTOR", "8"))
        _EXECUTOR = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ls-sink")
    if not _EXECUTOR_SHUTDOWN_REGISTERED:
        _EXECUTOR_SHUTDOWN_REGISTERED = True
        atexit.register(lambda: _EXECUTOR.shutdown(wait=False) if _EXECUTOR else None)
    return _EXECUTOR


@dataclass(frozen=True)
class DeliveryResult:
    """싱크 전송 결과. accepted=False 면 reason 에 사유."""

    accepted: bool
    reason: Optional[str] = None
    status: Optional[int] = None

    @classmethod
    def ok(cls, status: Optional[int] = None) -> "DeliveryResult":
        return cls(True, None, status)

    @classmethod
    def failed(cls, reason: str, status: Optional[int] = None) -> "DeliveryResult":
        return cls(False, reason, status)


@runtime_checkable
class BatchSink(Protocol):
    """generator 가 배치를 넘기는 대상. 예외를 던지지 않고 결과로 보고한다."""

    async def deliver(self, batch: Batch) -> DeliveryResult:
        ...


class HttpBatchSink:
    """
    목적지 URL 로 배치를 POST 하는 싱크.

    Args:
        destination: 수집 엔드포인트 URL
        auth_key: Bearer 토큰 값 ("Bearer " 접두사 없이)
        timeout_sec: 요청 하드 타임아웃(초)
    """

    def __init__(self, destination: str, auth_key: str, timeout_sec: float = 10.0) -> None:
        self.destination = destination
        self.timeout_sec = timeout_sec
        self._auth_header = f"Bearer {auth_key}"

    def _post(self, body: bytes) -> DeliveryResult:
        """실제 HTTP I/O (동기). executor 스레드에서 실행된다."""
        req = request.Request(
            self.destination,
            data=body,
            method="POST",
            headers={
                "Content-Type": "application/json",
                "Authorization": self._auth_header,
            },
        )
        try:
            with request.urlopen(req, timeout=self.timeout_sec) as resp:
                status = resp.status
        except error.HTTPError as exc:
            detail = exc.read()[:ERROR_BODY_LIMIT].decode("utf-8", errors="replace")
            _logger.warning("[sink] error from API status=%d response=%s", exc.code, detail)
            return DeliveryResult.failed(f"HTTP {exc.code}", status=exc.code)
        except (error.URLError, TimeoutError, OSError) as exc:
            reason = getattr(exc, "reason", exc)
            return DeliveryResult.failed(f"request failed: {reason}")

        if not 200 <= status < 300:
            return DeliveryResult.failed(f"HTTP {status}", status=status)
        return DeliveryResult.ok(status)

    async def deliver(self, batch: Batch) -> DeliveryResult:
        try:
            body = batch.to_json().encode("utf-8")
        except (TypeError, ValueError) as exc:
            return DeliveryResult.failed(f"serialization error: {exc}")

        loop = asyncio.get_running_loop()
        # urlopen 의 timeout 은 소켓 연산 단위라 요청 전체 상한은 여기서 건다
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(get_executor(), self._post, body),
                timeout=self.timeout_sec,
            )
        except asyncio.TimeoutError:
            return DeliveryResult.failed(f"timeout after {self.timeout_sec}s")


class StdoutSink:
    """dry-run 용. 배치를 JSON 한 줄로 stdout 에 쓰고 항상 수락한다."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    async def deliver(self, batch: Batch) -> DeliveryResult:
        try:
            line = batch.to_json()
        except (TypeError, ValueError) as exc:
            return DeliveryResult.failed(f"serialization error: {exc}")
        stream = self._stream or sys.stdout
        stream.write(line + "\n")
        stream.flush()
        return DeliveryResult.ok()


def build_sink(settings: Settings) -> BatchSink:
    """설정에 맞는 싱크 생성. dry_run 이면 stdout."""
    if settings.dry_run:
        return StdoutSink()
    return HttpBatchSink(
        destination=settings.destination,
        auth_key=settings.auth_key or "",
        timeout_sec=settings.sink_timeout_sec,
    )
