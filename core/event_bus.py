#!/usr/bin/env python3
"""
core/event_bus.py

DualBot - Event Bus
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Event Bus - fan-out of bot logs and system errors to live viewers

Features:
- Pub/Sub pattern with fnmatch topics ("log.spot", "log.*", "error.*")
- One bounded channel per subscriber (drop-oldest, never blocks the publisher)
- Event history ring buffer (last N events, default 100)
- Stats (published / delivered / dropped)

Usage:
    from core.event_bus import EventBus

    bus = EventBus({"history_size": 100})
    sub = bus.subscribe("log.*")
    bus.publish("log.spot", {"level": "SCAN", "message": "..."})
    event = sub.get(timeout=1.0)

Dependencies:
    - python>=3.10
"""

import itertools
import time
from collections import deque
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import Path
from threading import Condition, Lock
from typing import Any, Dict, List, Optional

if __name__ == "__main__" and __package__ is None:  # pragma: no cover
    import sys

    project_root = Path(__file__).resolve().parent.parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

from core.logger_engine import get_logger

DEFAULT_HISTORY_SIZE = 100
DEFAULT_QUEUE_SIZE = 100

_event_counter = itertools.count(1)


@dataclass
class Event:
    """Event data structure"""
    topic: str
    data: Any
    timestamp: float = field(default_factory=time.time)
    source: Optional[str] = None
    event_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "data": self.data,
            "timestamp": self.timestamp,
            "source": self.source,
            "event_id": self.event_id
        }


class Subscription:
    """
    Bounded channel owned by one subscriber

    offer() never blocks: when the channel is full the oldest event is
    evicted and counted in `dropped`.
    """

    def __init__(self, pattern: str, maxsize: int = DEFAULT_QUEUE_SIZE):
        self.pattern = pattern
        self.maxsize = maxsize
        self.dropped = 0
        self.closed = False
        self._queue: deque = deque(maxlen=maxsize)
        self._cond = Condition(Lock())

    def matches(self, topic: str) -> bool:
        return fnmatch(topic, self.pattern)

    def offer(self, event: Event) -> bool:
        with self._cond:
            if self.closed:
                return False
            if len(self._queue) == self.maxsize:
                self.dropped += 1
            self._queue.append(event)
            self._cond.notify()
            return True

    def get(self, timeout: Optional[float] = None) -> Optional[Event]:
        """Wait for the next event (None on timeout or close)"""
        with self._cond:
            if not self._queue and not self.closed:
                self._cond.wait_for(lambda: self._queue or self.closed, timeout=timeout)
            if self._queue:
                return self._queue.popleft()
            return None

    def drain(self) -> List[Event]:
        """Pop everything currently buffered"""
        with self._cond:
            events = list(self._queue)
            self._queue.clear()
            return events

    def close(self):
        with self._cond:
            self.closed = True
            self._cond.notify_all()

    def __len__(self) -> int:
        return len(self._queue)


class EventBus:
    """
    Event Bus - Pub/Sub messaging

    Publishers are the two bot threads; subscribers are live log viewers.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, logger=None):
        """
        Args:
            config: eventbus section (history_size, subscriber_queue_size)
        """
        self.config = config or {}
        self.logger = logger or get_logger("core.event_bus")

        self.subscriptions: List[Subscription] = []
        self.lock = Lock()

        self.history_size = self.config.get("history_size", DEFAULT_HISTORY_SIZE)
        self.queue_size = self.config.get("subscriber_queue_size", DEFAULT_QUEUE_SIZE)
        self.event_history: deque = deque(maxlen=self.history_size)

        self.stats = {
            "total_published": 0,
            "total_delivered": 0,
            "total_dropped": 0
        }

        self.logger.debug(f"✅ EventBus initialized (history={self.history_size})")

    def subscribe(self, pattern: str, maxsize: Optional[int] = None) -> Subscription:
        """
        Open a channel for a topic pattern

        Args:
            pattern: Topic pattern (e.g. "log.*" or "error.leverage")
            maxsize: Channel capacity (default: subscriber_queue_size)
        """
        subscription = Subscription(pattern, maxsize or self.queue_size)
        with self.lock:
            self.subscriptions.append(subscription)
        self.logger.debug(f"✅ Subscribed to topic: {pattern}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        with self.lock:
            if subscription not in self.subscriptions:
                self.logger.warning(f"❌ Subscription not found: {subscription.pattern}")
                return False
            self.subscriptions.remove(subscription)
        subscription.close()
        self.logger.debug(f"✅ Unsubscribed from topic: {subscription.pattern}")
        return True

    def publish(self, topic: str, data: Any, source: Optional[str] = None) -> Event:
        """
        Publish an event

        Returns:
            Event: The published event
        """
        event = Event(
            topic=topic,
            data=data,
            source=source,
            event_id=f"{topic}_{next(_event_counter)}"
        )

        with self.lock:
            self.event_history.append(event)
            self.stats["total_published"] += 1
            subscriptions = list(self.subscriptions)

        delivered = 0
        for subscription in subscriptions:
            if subscription.matches(topic):
                before = subscription.dropped
                if subscription.offer(event):
                    delivered += 1
                    if subscription.dropped > before:
                        self._count("total_dropped")

        if delivered:
            self._count("total_delivered", delivered)
        return event

    def _count(self, key: str, amount: int = 1):
        with self.lock:
            self.stats[key] += amount

    def get_history(self, topic: Optional[str] = None, limit: int = DEFAULT_HISTORY_SIZE) -> List[Event]:
        """
        Args:
            topic: Topic pattern (None for all)
            limit: Max number of events (newest last)
        """
        with self.lock:
            events = list(self.event_history)
        if topic:
            events = [e for e in events if fnmatch(e.topic, topic)]
        return events[-limit:] if limit else []

    def get_stats(self) -> Dict[str, Any]:
        with self.lock:
            return {
                **self.stats,
                "total_subscribers": len(self.subscriptions),
                "history_size": len(self.event_history),
                "history_capacity": self.history_size
            }

    def clear_history(self, topic: Optional[str] = None):
        """Clear the ring buffer (only events matching topic when given)"""
        with self.lock:
            if topic is None:
                self.event_history.clear()
            else:
                kept = [e for e in self.event_history if not fnmatch(e.topic, topic)]
                self.event_history.clear()
                self.event_history.extend(kept)
        self.logger.debug("✅ Event history cleared")


if __name__ == "__main__":
    print("=" * 60)
    print("🧪 EventBus Test")
    print("=" * 60)

    bus = EventBus({"history_size": 5, "subscriber_queue_size": 3})
    sub = bus.subscribe("log.*")

    for i in range(10):
        bus.publish("log.spot", {"message": f"entry {i}"})

    print(f"   History: {[e.data['message'] for e in bus.get_history()]}")
    print(f"   Channel: {[e.data['message'] for e in sub.drain()]} (dropped={sub.dropped})")
    print(f"   Stats: {bus.get_stats()}")

    print("\n✅ EventBus test completed!")
    print("=" * 60)
