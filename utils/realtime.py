"""
In-process change feed.

Routes publish a ChangeEvent on a named channel after each successful
commit; page controllers and the /events stream subscribe to channels and
must unsubscribe when they are done.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional

from flask import current_app

logger = logging.getLogger(__name__)

EVENT_TYPES = ("INSERT", "UPDATE", "DELETE")


@dataclass
class ChangeEvent:
    event_type: str
    table: str
    new: dict = field(default_factory=dict)
    old: Optional[dict] = None

    def to_dict(self):
        return {
            "eventType": self.event_type,
            "table": self.table,
            "new": self.new,
            "old": self.old,
        }


class Subscription:

    def __init__(self, feed, channel: str, handler: Callable[[ChangeEvent], None]):
        self.feed = feed
        self.channel = channel
        self.handler = handler
        self.active = True

    def unsubscribe(self):
        if not self.active:
            return
        self.active = False
        self.feed._remove(self)


class ChangeFeed:

    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: dict[str, list[Subscription]] = {}

    def subscribe(self, channel: str, handler) -> Subscription:
        sub = Subscription(self, channel, handler)
        with self._lock:
            self._subscribers.setdefault(channel, []).append(sub)
        logger.debug("Subscribed to %s", channel)
        return sub

    def _remove(self, sub: Subscription):
        with self._lock:
            subs = self._subscribers.get(sub.channel, [])
            if sub in subs:
                subs.remove(sub)
            if not subs:
                self._subscribers.pop(sub.channel, None)
        logger.debug("Unsubscribed from %s", sub.channel)

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._subscribers.get(channel, []))

    def publish(self, channel: str, event: ChangeEvent) -> int:
        if event.event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown change event type: {event.event_type}")

        with self._lock:
            subs = list(self._subscribers.get(channel, []))

        delivered = 0
        for sub in subs:
            try:
                sub.handler(event)
                delivered += 1
            except Exception:
                # one broken listener must not starve the others
                logger.exception("Change handler failed on channel %s", channel)
        return delivered


def init_feed(app) -> ChangeFeed:
    feed = ChangeFeed()
    app.extensions["change_feed"] = feed
    return feed


def get_feed() -> ChangeFeed:
    return current_app.extensions["change_feed"]


def publish_change(channel: str, event_type: str, table: str, new=None, old=None) -> int:
    return get_feed().publish(channel, ChangeEvent(event_type, table, new or {}, old))
