"""Tests for BroadcastHub fan-out, subscriber removal and overflow policies."""

import asyncio

import pytest

from log_streamer.broadcast import BroadcastHub, Subscriber
from log_streamer.errors import SubscriberSendFailure

from .conftest import FakeConnection, make_event


async def _settle(rounds: int = 10) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_registered_subscriber_observes_event_until_unregistered():
    hub = BroadcastHub()
    conn = FakeConnection()
    sub = await hub.register(conn)

    assert await hub.publish(make_event(1)) == 1
    await sub.join()
    assert conn.messages == ["event-1"]

    await hub.unregister(sub)
    assert await hub.publish(make_event(2)) == 0
    await _settle()

    assert conn.messages == ["event-1"]
    assert conn.closed
    assert hub.subscriber_count == 0


@pytest.mark.asyncio
async def test_two_subscribers_receive_same_events_in_order():
    hub = BroadcastHub()
    first, second = FakeConnection(), FakeConnection()
    subs = [await hub.register(first), await hub.register(second)]

    for i in range(10):
        await hub.publish(make_event(i))
    for sub in subs:
        await sub.join()

    expected = [f"event-{i}" for i in range(10)]
    assert first.messages == expected
    assert second.messages == expected


@pytest.mark.asyncio
async def test_closed_subscriber_removed_by_the_publish_that_finds_it():
    hub = BroadcastHub()
    healthy = FakeConnection()
    broken = FakeConnection()
    await hub.register(healthy)
    dead = await hub.register(broken)
    await dead.close()

    delivered = await hub.publish(make_event(1))

    assert delivered == 1
    assert dead not in hub
    assert hub.subscriber_count == 1

    await hub.publish(make_event(2))
    await _settle()
    assert broken.sent == []
    assert healthy.messages == ["event-1", "event-2"]


@pytest.mark.asyncio
async def test_send_failure_unregisters_subscriber():
    hub = BroadcastHub()
    conn = FakeConnection(fail=True)
    sub = await hub.register(conn)

    await hub.publish(make_event(1))
    await _settle()

    assert sub.closed
    assert sub not in hub
    assert conn.closed
    with pytest.raises(SubscriberSendFailure):
        sub.offer("{}")


@pytest.mark.asyncio
async def test_send_timeout_counts_as_failure():
    hub = BroadcastHub(send_timeout_sec=0.05)
    conn = FakeConnection(gate=asyncio.Event())
    sub = await hub.register(conn)

    await hub.publish(make_event(1))
    await asyncio.sleep(0.2)

    assert sub not in hub
    assert conn.closed


@pytest.mark.asyncio
async def test_drop_oldest_keeps_newest_events():
    drops = []
    gate = asyncio.Event()
    hub = BroadcastHub(queue_size=2, overflow_policy="drop_oldest", on_drop=drops.append)
    conn = FakeConnection(gate=gate)
    sub = await hub.register(conn)

    # event-1 is picked up by the writer and blocks in send
    await hub.publish(make_event(1))
    await _settle()
    for i in (2, 3, 4):
        await hub.publish(make_event(i))

    assert sub.dropped == 1
    assert drops == [1]

    gate.set()
    await sub.join()
    assert conn.messages == ["event-1", "event-3", "event-4"]


@pytest.mark.asyncio
async def test_drop_new_keeps_queued_events():
    gate = asyncio.Event()
    hub = BroadcastHub(queue_size=2, overflow_policy="drop_new")
    conn = FakeConnection(gate=gate)
    sub = await hub.register(conn)

    await hub.publish(make_event(1))
    await _settle()
    results = [await hub.publish(make_event(i)) for i in (2, 3, 4)]

    assert results == [1, 1, 0]
    assert sub.dropped == 1

    gate.set()
    await sub.join()
    assert conn.messages == ["event-1", "event-2", "event-3"]


@pytest.mark.asyncio
async def test_unserializable_event_is_dropped():
    hub = BroadcastHub()
    conn = FakeConnection()
    sub = await hub.register(conn)

    assert await hub.publish(make_event(1, metadata={"cpu": float("inf")})) == 0
    await sub.join()
    assert conn.sent == []


@pytest.mark.asyncio
async def test_close_releases_all_subscribers():
    hub = BroadcastHub()
    conns = [FakeConnection() for _ in range(3)]
    for conn in conns:
        await hub.register(conn)

    await hub.close()

    assert hub.subscriber_count == 0
    assert all(conn.closed for conn in conns)


def test_unknown_overflow_policy():
    with pytest.raises(ValueError):
        Subscriber(FakeConnection(), overflow_policy="block")
