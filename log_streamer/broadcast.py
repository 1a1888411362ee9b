# -----------------------------------------------------------------------------
# 파일명 : log_streamer/broadcast.py
# 목적   : 라이브 구독자(WebSocket 등) 레지스트리와 이벤트 fan-out
# 설명   :
#   - 레지스트리(set)는 asyncio.Lock 하나로만 변경한다 (register/unregister/publish 공통)
#   - publish 는 이벤트를 한 번만 직렬화한 뒤 구독자별 bounded 큐에 넣기만 한다(네트워크 대기 없음)
#   - 구독자마다 전용 writer 태스크가 큐를 비우며 실제 전송을 담당
#   - 큐가 가득 차면 drop_oldest(기본) 또는 drop_new 정책으로 버리고 dropped 를 센다
#   - 전송 실패/닫힌 구독자는 레지스트리에서 제거하고 연결을 닫는다(락 밖에서)
# -----------------------------------------------------------------------------

from __future__ import annotations

import asyncio
import itertools
from typing import Awaitable, Callable, List, Optional, Protocol, Set

from .core.logger import get_logger
from .errors import SubscriberSendFailure
from .schema import LogEvent

_logger = get_logger("log_streamer.broadcast")

DEFAULT_QUEUE_SIZE = 100
DEFAULT_SEND_TIMEOUT_SEC = 5.0

_subscriber_ids = itertools.count(1)


class SubscriberConnection(Protocol):
    """구독자 연결이 제공해야 하는 최소 인터페이스. FastAPI WebSocket 이 그대로 만족한다."""

    async def send_text(self, data: str) -> None:
        ...

    async def close(self, code: int = 1000) -> None:
        ...


class Subscriber:
    """
    연결 1개 + bounded 큐 + writer 태스크.

    Args:
        connection: 실제 전송 대상
        queue_size: 큐 최대 길이
        overflow_policy: "drop_oldest" | "drop_new"
        send_timeout_sec: 전송 1건 타임아웃. 넘기면 끊긴 연결로 본다
        on_failure: writer 가 전송 실패를 감지했을 때 호출 (보통 hub.unregister)
    """

    def __init__(
        self,
        connection: SubscriberConnection,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        overflow_policy: str = "drop_oldest",
        send_timeout_sec: float = DEFAULT_SEND_TIMEOUT_SEC,
        on_failure: Optional[Callable[["Subscriber"], Awaitable[None]]] = None,
    ) -> None:
        if overflow_policy not in ("drop_oldest", "drop_new"):
            raise ValueError(f"unknown overflow policy: {overflow_policy}")
        self.subscriber_id = next(_subscriber_ids)
        self.connection = connection
        self.overflow_policy = overflow_policy
        self.send_timeout_sec = send_timeout_sec
        self.dropped = 0
        self.sent = 0
        self._queue: "asyncio.Queue[str]" = asyncio.Queue(maxsize=queue_size)
        self._on_failure = on_failure
        self._closed = False
        self._writer: Optional[asyncio.Task] = None

    def __repr__(self) -> str:
        return f"Subscriber(id={self.subscriber_id}, closed={self._closed})"

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        """writer 태스크 시작. register() 에서 호출된다."""
        if self._writer is None:
            self._writer = asyncio.create_task(
                self._pump(), name=f"subscriber-writer-{self.subscriber_id}"
            )

    def offer(self, payload: str) -> bool:
        """
        페이로드를 큐에 넣는다. 기다리지 않는다.

        Returns:
            bool: 큐에 들어갔으면 True, overflow 로 새 페이로드를 버렸으면 False
        Raises:
            SubscriberSendFailure: 이미 닫히거나 끊긴 구독자
        """
        if self._closed:
            raise SubscriberSendFailure(f"subscriber {self.subscriber_id} is closed")
        if self._queue.full():
            self.dropped += 1
            if self.overflow_policy == "drop_new":
                return False
            # drop_oldest: 가장 오래된 것 하나를 버리고 자리를 만든다
            self._queue.get_nowait()
            self._queue.task_done()
        self._queue.put_nowait(payload)
        return True

    async def join(self) -> None:
        """큐에 들어간 페이로드가 모두 처리될 때까지 대기 (테스트/종료 시 사용)."""
        await self._queue.join()

    async def _pump(self) -> None:
        """큐 → 연결. 순서대로 전송하며 실패하면 스스로 닫히고 on_failure 를 부른다."""
        while True:
            payload = await self._queue.get()
            try:
                await asyncio.wait_for(
                    self.connection.send_text(payload), timeout=self.send_timeout_sec
                )
                self.sent += 1
            except asyncio.CancelledError:
                self._queue.task_done()
                raise
            except Exception as exc:
                _logger.info(
                    "[hub] send failed subscriber=%d error=%r", self.subscriber_id, exc
                )
                self._closed = True
                self._queue.task_done()
                self._drain_queue()
                if self._on_failure is not None:
                    await self._on_failure(self)
                return
            self._queue.task_done()

    def _drain_queue(self) -> None:
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()

    async def close(self) -> None:
        """writer 를 멈추고 연결 자원을 해제한다. 여러 번 호출해도 된다."""
        self._closed = True
        writer = self._writer
        if writer is not None and writer is not asyncio.current_task() and not writer.done():
            writer.cancel()
            try:
                await writer
            except asyncio.CancelledError:
                pass
        self._drain_queue()
        try:
            await self.connection.close()
        except Exception as exc:
            # 이미 끊긴 연결은 close 가 실패할 수 있다
            _logger.debug("[hub] close failed subscriber=%d error=%r", self.subscriber_id, exc)


class BroadcastHub:
    """
    구독자 레지스트리 + fan-out.

    Args:
        queue_size: 구독자별 큐 길이
        overflow_policy: 구독자 큐 overflow 정책
        send_timeout_sec: 구독자 전송 1건 타임아웃
        on_drop: overflow 로 1건 버릴 때마다 호출 (Stats.add_dropped 등)
    """

    def __init__(
        self,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        overflow_policy: str = "drop_oldest",
        send_timeout_sec: float = DEFAULT_SEND_TIMEOUT_SEC,
        on_drop: Optional[Callable[[int], None]] = None,
    ) -> None:
        self.queue_size = queue_size
        self.overflow_policy = overflow_policy
        self.send_timeout_sec = send_timeout_sec
        self._on_drop = on_drop
        self._subscribers: Set[Subscriber] = set()
        self._lock = asyncio.Lock()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def __contains__(self, subscriber: object) -> bool:
        return subscriber in self._subscribers

    async def register(self, connection: SubscriberConnection) -> Subscriber:
        """연결을 구독자로 등록하고 writer 를 시작한다."""
        subscriber = Subscriber(
            connection,
            queue_size=self.queue_size,
            overflow_policy=self.overflow_policy,
            send_timeout_sec=self.send_timeout_sec,
            on_failure=self.unregister,
        )
        async with self._lock:
            self._subscribers.add(subscriber)
        subscriber.start()
        _logger.info(
            "[hub] subscriber registered id=%d total=%d",
            subscriber.subscriber_id,
            len(self._subscribers),
        )
        return subscriber

    async def unregister(self, subscriber: Subscriber) -> None:
        """레지스트리에서 빼고 연결을 닫는다. 없는 구독자면 닫기만 한다."""
        async with self._lock:
            removed = subscriber in self._subscribers
            self._subscribers.discard(subscriber)
        await subscriber.close()
        if removed:
            _logger.info(
                "[hub] subscriber removed id=%d total=%d",
                subscriber.subscriber_id,
                len(self._subscribers),
            )

    async def publish(self, event: LogEvent) -> int:
        """
        이벤트를 모든 구독자 큐에 넣는다.

        - 직렬화는 한 번만 한다. 실패하면 로그만 남기고 0 반환
        - offer 가 실패한 구독자는 이 호출 안에서 레지스트리에서 제거된다

        Returns:
            int: 큐에 들어간 구독자 수
        """
        try:
            payload = event.to_json()
        except (TypeError, ValueError) as exc:
            _logger.warning("[hub] serialization failed, event dropped: %s", exc)
            return 0

        delivered = 0
        dropped = 0
        dead: List[Subscriber] = []
        async with self._lock:
            for subscriber in list(self._subscribers):
                before = subscriber.dropped
                try:
                    if subscriber.offer(payload):
                        delivered += 1
                except SubscriberSendFailure:
                    self._subscribers.discard(subscriber)
                    dead.append(subscriber)
                    continue
                dropped += subscriber.dropped - before

        # 연결 해제는 락 밖에서
        for subscriber in dead:
            _logger.info("[hub] dropping broken subscriber id=%d", subscriber.subscriber_id)
            await subscriber.close()

        if dropped and self._on_drop is not None:
            self._on_drop(dropped)
        return delivered

    async def close(self) -> None:
        """모든 구독자를 해제한다 (앱 종료 시)."""
        async with self._lock:
            subscribers = list(self._subscribers)
            self._subscribers.clear()
        for subscriber in subscribers:
            await subscriber.close()
