#!/usr/bin/env python3
"""
core/test_event_bus.py
DualBot - EventBus Tests

Topic matching, bounded channels (drop-oldest), history ring buffer.
"""

import threading

from core.event_bus import EventBus


def test_publish_reaches_matching_subscribers_only():
    bus = EventBus()
    spot = bus.subscribe("log.spot")
    all_logs = bus.subscribe("log.*")
    errors = bus.subscribe("error.*")

    bus.publish("log.spot", {"message": "scan"})
    bus.publish("log.leverage", {"message": "[LEVERAGE] scan"})

    assert [e.data["message"] for e in spot.drain()] == ["scan"]
    assert len(all_logs.drain()) == 2
    assert errors.drain() == []


def test_full_channel_drops_oldest_without_blocking():
    bus = EventBus({"subscriber_queue_size": 3})
    slow = bus.subscribe("log.*")

    for i in range(5):
        bus.publish("log.spot", i)

    assert [e.data for e in slow.drain()] == [2, 3, 4]
    assert slow.dropped == 2
    assert bus.get_stats()["total_dropped"] == 2
    assert bus.get_stats()["total_published"] == 5


def test_history_is_a_ring_buffer():
    bus = EventBus({"history_size": 100})
    for i in range(150):
        bus.publish("log.spot", i)

    history = bus.get_history()
    assert len(history) == 100
    assert history[0].data == 50
    assert history[-1].data == 149
    assert bus.get_stats()["history_capacity"] == 100


def test_history_filter_and_clear():
    bus = EventBus()
    bus.publish("log.spot", "a")
    bus.publish("error.spot", "b")
    bus.publish("log.leverage", "c")

    assert [e.data for e in bus.get_history("log.*")] == ["a", "c"]
    assert [e.data for e in bus.get_history(limit=1)] == ["c"]

    bus.clear_history("error.*")
    assert [e.data for e in bus.get_history()] == ["a", "c"]

    bus.clear_history()
    assert bus.get_history() == []


def test_get_waits_for_event_from_other_thread():
    bus = EventBus()
    sub = bus.subscribe("log.*")

    timer = threading.Timer(0.05, bus.publish, args=("log.spot", "late"))
    timer.start()
    event = sub.get(timeout=2.0)
    timer.join()

    assert event is not None and event.data == "late"
    assert sub.get(timeout=0.01) is None


def test_unsubscribe_closes_channel():
    bus = EventBus()
    sub = bus.subscribe("log.*")

    assert bus.unsubscribe(sub) is True
    assert sub.closed
    assert bus.unsubscribe(sub) is False

    bus.publish("log.spot", "ignored")
    assert sub.drain() == []
    assert bus.get_stats()["total_subscribers"] == 0
