"""Tests for LogEvent / Batch validation and serialization."""

import json

import pytest

from log_streamer.schema import Batch, LogEvent

from .conftest import make_event


def test_rejects_unknown_level():
    with pytest.raises(ValueError, match="invalid level"):
        make_event(1, level="TRACE")


def test_rejects_unknown_environment():
    with pytest.raises(ValueError, match="invalid environment"):
        make_event(1, environment="qa")


def test_rejects_empty_timestamp():
    with pytest.raises(ValueError):
        make_event(1, timestamp="")


def test_to_dict_omits_unset_fields_but_keeps_zero():
    event = make_event(1, duration_ms=0, method="GET")

    data = event.to_dict()

    assert data["duration_ms"] == 0
    assert data["method"] == "GET"
    for key in ("status_code", "path", "user_id", "action", "metadata"):
        assert key not in data


def test_required_keys_come_first():
    event = make_event(1, status_code=200)

    assert list(event.to_dict())[:5] == ["timestamp", "level", "service", "message", "environment"]


def test_metadata_is_read_only_copy():
    source = {"cpu": 12.5}
    event = make_event(1, metadata=source)
    source["cpu"] = 99.0

    assert event.metadata["cpu"] == 12.5
    with pytest.raises(TypeError):
        event.metadata["cpu"] = 1.0


def test_event_is_frozen():
    event = make_event(1)
    with pytest.raises(AttributeError):
        event.level = "ERROR"


def test_to_json_rejects_nan():
    event = make_event(1, metadata={"cpu": float("nan")})
    with pytest.raises(ValueError):
        event.to_json()


def test_batch_serializes_as_ordered_array():
    batch = Batch(category="api", events=tuple(make_event(i) for i in range(3)))

    decoded = json.loads(batch.to_json())

    assert len(batch) == 3
    assert [item["message"] for item in decoded] == ["event-0", "event-1", "event-2"]


def test_unicode_is_kept_verbatim():
    event = LogEvent(
        timestamp="2025-11-05T07:55:10Z",
        level="WARN",
        service="user-service",
        message="로그인 실패",
        environment="staging",
    )
    assert "로그인 실패" in event.to_json()
