"""Tests for the HTTP batch sink against a loopback server, and the stdout sink."""

import io
import json
import socket
import threading
import time

import pytest

from log_streamer.core.config import Settings
from log_streamer.schema import Batch
from log_streamer.sink import BatchSink, DeliveryResult, HttpBatchSink, StdoutSink, build_sink

from .conftest import make_event


def _batch(n: int = 3) -> Batch:
    return Batch(category="api", events=tuple(make_event(i) for i in range(n)))


@pytest.mark.asyncio
async def test_accepted_batch_is_one_post_with_auth_headers(ingest_server):
    sink = HttpBatchSink(ingest_server.url, "secret", timeout_sec=2)

    result = await sink.deliver(_batch())

    assert result == DeliveryResult(True, None, 200)
    assert len(ingest_server.requests) == 1
    request = ingest_server.requests[0]
    assert request["headers"]["Authorization"] == "Bearer secret"
    assert request["headers"]["Content-Type"] == "application/json"
    body = json.loads(request["body"])
    assert [item["message"] for item in body] == ["event-0", "event-1", "event-2"]


@pytest.mark.asyncio
async def test_server_error_is_reported_not_raised(ingest_server, caplog):
    ingest_server.status = 500
    sink = HttpBatchSink(ingest_server.url, "secret", timeout_sec=2)

    result = await sink.deliver(_batch())

    assert not result.accepted
    assert result.status == 500
    assert result.reason == "HTTP 500"
    assert "boom" in caplog.text


@pytest.mark.asyncio
async def test_unreachable_destination():
    sink = HttpBatchSink("http://127.0.0.1:1/logs", "secret", timeout_sec=1)

    result = await sink.deliver(_batch())

    assert not result.accepted
    assert result.reason.startswith("request failed")


@pytest.mark.asyncio
async def test_timeout_is_a_failure(ingest_server):
    ingest_server.delay = 1.0
    sink = HttpBatchSink(ingest_server.url, "secret", timeout_sec=0.2)

    result = await sink.deliver(_batch())

    assert not result.accepted
    assert result.status is None


@pytest.fixture
def slow_header_server():
    """Answers 200 at once, then trickles one header line every 0.3s."""
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    done = threading.Event()

    def serve():
        conn, _ = listener.accept()
        with conn:
            conn.recv(65536)
            conn.sendall(b"HTTP/1.1 200 OK\r\n")
            for i in range(10):
                if done.wait(0.3):
                    return
                conn.sendall(f"X-Slow-{i}: 1\r\n".encode())
            conn.sendall(b"Content-Length: 0\r\n\r\n")

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{listener.getsockname()[1]}/logs"
    done.set()
    thread.join(timeout=2)
    listener.close()


@pytest.mark.asyncio
async def test_slow_response_headers_hit_overall_timeout(slow_header_server):
    sink = HttpBatchSink(slow_header_server, "secret", timeout_sec=0.5)

    started = time.monotonic()
    result = await sink.deliver(_batch())
    elapsed = time.monotonic() - started

    assert not result.accepted
    assert result.reason.startswith("timeout")
    assert elapsed < 1.5


@pytest.mark.asyncio
async def test_serialization_error_skips_request(ingest_server):
    sink = HttpBatchSink(ingest_server.url, "secret")
    batch = Batch(category="system_metrics", events=(make_event(1, metadata={"cpu": float("nan")}),))

    result = await sink.deliver(batch)

    assert not result.accepted
    assert result.reason.startswith("serialization error")
    assert ingest_server.requests == []


@pytest.mark.asyncio
async def test_stdout_sink_writes_one_line_per_batch():
    stream = io.StringIO()
    sink = StdoutSink(stream)

    assert (await sink.deliver(_batch(2))).accepted
    assert (await sink.deliver(_batch(1))).accepted

    lines = stream.getvalue().splitlines()
    assert [len(json.loads(line)) for line in lines] == [2, 1]


def test_build_sink_picks_by_mode():
    http = build_sink(Settings(auth_key="k", sink_timeout_sec=3))
    dry = build_sink(Settings(dry_run=True))

    assert isinstance(http, HttpBatchSink)
    assert http.timeout_sec == 3
    assert isinstance(dry, StdoutSink)
    assert isinstance(dry, BatchSink)
