"""Shared fixtures: settings, in-memory sinks, fake subscriber connections, loopback HTTP server."""

from __future__ import annotations

import asyncio
import json
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Dict, List, Optional

import pytest

from log_streamer.core.config import Settings
from log_streamer.schema import Batch, LogEvent
from log_streamer.sink import DeliveryResult


def make_event(i: int, **kwargs) -> LogEvent:
    """Build a small valid event whose message carries its index."""
    values = dict(
        timestamp="2025-11-05T07:55:10Z",
        level="INFO",
        service="auth-service",
        message=f"event-{i}",
        environment="production",
    )
    values.update(kwargs)
    return LogEvent(**values)


class RecordingSink:
    """Accepts every batch and keeps it."""

    def __init__(self) -> None:
        self.batches: List[Batch] = []

    async def deliver(self, batch: Batch) -> DeliveryResult:
        self.batches.append(batch)
        return DeliveryResult.ok(200)

    def by_category(self) -> Dict[str, List[Batch]]:
        grouped: Dict[str, List[Batch]] = {}
        for batch in self.batches:
            grouped.setdefault(batch.category, []).append(batch)
        return grouped


class FailingSink(RecordingSink):
    """Rejects every batch the way a 500 from the ingestion API would."""

    async def deliver(self, batch: Batch) -> DeliveryResult:
        self.batches.append(batch)
        return DeliveryResult.failed("HTTP 500", status=500)


class FakeConnection:
    """Stand-in for a WebSocket. Records text frames; can fail or block on send."""

    def __init__(self, fail: bool = False, gate: Optional[asyncio.Event] = None) -> None:
        self.fail = fail
        self.gate = gate
        self.sent: List[str] = []
        self.closed = False

    async def send_text(self, data: str) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise ConnectionResetError("peer went away")
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.closed = True

    @property
    def messages(self) -> List[str]:
        return [json.loads(payload)["message"] for payload in self.sent]


@pytest.fixture
def settings() -> Settings:
    """Fast cadence settings for lifecycle tests."""
    return Settings(
        auth_key="test-key",
        duration_sec=None,
        batch_size=3,
        interval_ms=50,
        log_interval_sec=0.05,
    )


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def failing_sink() -> FailingSink:
    return FailingSink()


class _IngestHandler(BaseHTTPRequestHandler):
    def do_POST(self):  # noqa: N802
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length)
        self.server.requests.append({"headers": dict(self.headers), "body": body})
        if self.server.delay:
            time.sleep(self.server.delay)
        payload = b'{"error": "boom"}' if self.server.status >= 300 else b'{"ok": true}'
        self.send_response(self.server.status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def ingest_server():
    """Loopback ingestion endpoint. Set .status / .delay before posting."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _IngestHandler)
    server.daemon_threads = True
    server.status = 200
    server.delay = 0.0
    server.requests = []
    server.url = f"http://127.0.0.1:{server.server_address[1]}/logs"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()
