"""Thread-safe registry of campaign_id -> lock; one writer at a time per campaign."""
import threading
import logging
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)
_lock = threading.Lock()
_registry: dict[str, threading.RLock] = {}


def get_lock(campaign_id: str) -> threading.RLock:
    with _lock:
        lock = _registry.get(campaign_id)
        if lock is None:
            lock = threading.RLock()
            _registry[campaign_id] = lock
        return lock


def discard(campaign_id: str) -> None:
    """Forget the lock of a deleted campaign."""
    with _lock:
        _registry.pop(campaign_id, None)
        logger.debug(f"Discarded lock for campaign {campaign_id}")


@contextmanager
def campaign_lock(campaign_id: str) -> Iterator[None]:
    """Serialize mutations of one campaign. Re-entrant, so a service may nest calls."""
    lock = get_lock(campaign_id)
    with lock:
        yield
