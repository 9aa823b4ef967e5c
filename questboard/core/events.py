"""
In-process change feed.

Services call emit() after every successful mutation of a campaign-scoped
resource. Subscribers (a realtime bridge, an audit log, tests) receive
ChangeEvent objects. Delivery is fire-and-forget: a subscriber that raises is
logged and skipped, and never fails the mutation that produced the event.
"""
import threading
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    resource_type: str
    campaign_id: str
    action: str
    payload: Dict[str, Any] = field(default_factory=dict)
    emitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Subscriber = Callable[[ChangeEvent], None]


class ChangeFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: List[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a subscriber; returns a callable that removes it."""
        with self._lock:
            self._subscribers.append(subscriber)

        def unsubscribe():
            with self._lock:
                if subscriber in self._subscribers:
                    self._subscribers.remove(subscriber)
        return unsubscribe

    def emit(self, resource_type: str, campaign_id: str, payload: Dict[str, Any], action: str = "update") -> None:
        event = ChangeEvent(resource_type=resource_type, campaign_id=campaign_id, action=action, payload=payload)
        logger.debug(f"Change event {resource_type}:{action} for campaign {campaign_id}")
        with self._lock:
            subscribers = list(self._subscribers)
        for subscriber in subscribers:
            try:
                subscriber(event)
            except Exception as e:
                logger.error(f"Change feed subscriber failed for {resource_type}:{action}: {e}")


change_feed = ChangeFeed()


def get_change_feed() -> ChangeFeed:
    return change_feed
