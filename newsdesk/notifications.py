"""Change notification for listening read pages.

Read pages subscribe by key (``"articles"`` for the collection,
``"article:<slug>"`` for one record) and receive a ChangeEvent carrying the
changed record's identifier. A database trigger publishes row changes on the
``articles_changes`` channel; PostgresChangeListener relays them here.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import psycopg

from newsdesk.errors import StoreUnavailable
from newsdesk.storage.postgres_schema import CHANGES_CHANNEL

logger = logging.getLogger(__name__)

COLLECTION_KEY = "articles"


def article_key(slug: str) -> str:
    return f"article:{slug}"


@dataclass(frozen=True)
class ChangeEvent:
    key: str
    record_id: int
    operation: str = "UPDATE"
    slug: Optional[str] = None


Subscriber = Callable[[ChangeEvent], None]


class ChangeNotifier:
    def __init__(self):
        self._subscribers: Dict[str, List[Subscriber]] = {}
        self._lock = threading.Lock()

    def subscribe(self, key: str, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for ``key``; returns an unsubscribe function."""
        with self._lock:
            self._subscribers.setdefault(key, []).append(callback)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(key, [])
                if callback in callbacks:
                    callbacks.remove(callback)
                if not callbacks:
                    self._subscribers.pop(key, None)

        return unsubscribe

    def publish(self, event: ChangeEvent) -> int:
        with self._lock:
            callbacks = list(self._subscribers.get(event.key, []))
        delivered = 0
        for cb in callbacks:
            try:
                cb(event)
                delivered += 1
            except Exception:
                logger.exception(f"Change subscriber failed for {event.key}")
        return delivered

    def subscriber_count(self, key: str) -> int:
        with self._lock:
            return len(self._subscribers.get(key, []))


def events_from_payload(payload: str) -> List[ChangeEvent]:
    """Translate a trigger payload into collection + per-article events."""
    try:
        data = json.loads(payload or "")
    except ValueError:
        logger.warning(f"Ignoring malformed change payload: {payload!r}")
        return []
    if not isinstance(data, dict) or data.get("id") is None:
        return []
    record_id = int(data["id"])
    operation = str(data.get("operation") or "UPDATE").upper()
    slug = data.get("slug") or None
    events = [ChangeEvent(key=COLLECTION_KEY, record_id=record_id, operation=operation, slug=slug)]
    if slug:
        events.append(ChangeEvent(key=article_key(slug), record_id=record_id, operation=operation, slug=slug))
    return events


class PostgresChangeListener:
    """LISTEN on the articles channel and forward events to a notifier."""

    def __init__(self, pg_dsn: str, notifier: ChangeNotifier, *, channel: str = CHANGES_CHANNEL):
        self.pg_dsn = pg_dsn
        self.notifier = notifier
        self.channel = channel
        self._stop = threading.Event()

    def stop(self) -> None:
        self._stop.set()

    def listen(self, *, poll_timeout: float = 5.0) -> None:
        try:
            with psycopg.connect(self.pg_dsn, autocommit=True) as conn:
                conn.execute(f"LISTEN {self.channel}")
                logger.info(f"Listening for changes on {self.channel}")
                while not self._stop.is_set():
                    for notify in conn.notifies(timeout=poll_timeout):
                        for event in events_from_payload(notify.payload):
                            self.notifier.publish(event)
                        if self._stop.is_set():
                            break
        except psycopg.Error as e:
            raise StoreUnavailable(f"change listener failed: {e}") from e
