import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from contentgen.models import ChangeEventPublic, get_datetime_utc

logger = logging.getLogger(__name__)

EVENT_TYPES = ("INSERT", "UPDATE", "DELETE")
ANY_EVENT = "*"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event_type: str
    record_id: uuid.UUID | None = None
    user_id: uuid.UUID | None = None
    commit_timestamp: datetime = field(default_factory=get_datetime_utc)

    def to_public(self) -> ChangeEventPublic:
        return ChangeEventPublic(
            table=self.table,
            event_type=self.event_type,
            record_id=self.record_id,
            user_id=self.user_id,
            commit_timestamp=self.commit_timestamp,
        )


ChangeCallback = Callable[[ChangeEvent], None]


class Subscription:
    """Handle for one (table, event) listener registered on a ChangeFeed."""

    def __init__(self, feed: "ChangeFeed", table: str, event_type: str, callback: ChangeCallback):
        self.id = uuid.uuid4()
        self.table = table
        self.event_type = event_type
        self.callback = callback
        self._feed = feed
        self.closed = False

    def matches(self, event: ChangeEvent) -> bool:
        if event.table != self.table:
            return False
        return self.event_type == ANY_EVENT or self.event_type == event.event_type

    def close(self) -> None:
        if self.closed:
            return
        self._feed._remove(self)
        self.closed = True


class ChangeFeed:
    """
    In-process publish/subscribe bus keyed by table name and event type.

    The data service publishes after each committed write; subscribers get
    every matching event synchronously on the publishing thread.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: dict[uuid.UUID, Subscription] = {}

    def subscribe(self, table: str, callback: ChangeCallback, *, event_type: str = ANY_EVENT) -> Subscription:
        event_type = event_type.upper()
        if event_type != ANY_EVENT and event_type not in EVENT_TYPES:
            raise ValueError(f"Unsupported change event type: {event_type}")
        subscription = Subscription(self, table, event_type, callback)
        with self._lock:
            self._subscriptions[subscription.id] = subscription
        logger.debug("Subscribed %s to %s:%s", subscription.id, table, event_type)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscriptions.pop(subscription.id, None)
        logger.debug("Removed subscription %s", subscription.id)

    @property
    def active_subscriptions(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, event: ChangeEvent) -> int:
        """Deliver the event to every matching subscriber; returns the delivery count."""
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.matches(event)]
        delivered = 0
        for subscription in targets:
            try:
                subscription.callback(event)
                delivered += 1
            except Exception as exc:
                # A broken listener must not fail the write that triggered it.
                logger.warning(
                    "Change feed callback for %s failed on %s:%s: %s",
                    subscription.id,
                    event.table,
                    event.event_type,
                    exc,
                )
        return delivered


_change_feed_instance: ChangeFeed | None = None


def get_change_feed() -> ChangeFeed:
    """Process-wide change feed shared by the API routes and the SSE stream."""
    global _change_feed_instance
    if _change_feed_instance is None:
        _change_feed_instance = ChangeFeed()
    return _change_feed_instance
