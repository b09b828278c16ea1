"""Per-article read counter.

The increment is a single store-side statement (views = views + 1), never a
read-then-write here. Failures are logged and counted, never raised, so the
read path renders regardless.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from newsdesk.errors import StoreUnavailable
from newsdesk.storage.base import NewsStore

logger = logging.getLogger(__name__)


class ViewCounter:
    def __init__(self, store: NewsStore, *, max_workers: int = 4):
        self.store = store
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()
        self.failures = 0

    def record_view(self, slug: str) -> bool:
        """Add one view to ``slug``; True when a row was updated."""
        if not slug:
            return False
        try:
            views = self.store.increment_views(slug)
        except StoreUnavailable as e:
            with self._lock:
                self.failures += 1
            logger.error(f"View increment failed for {slug}: {e}")
            return False
        if views is None:
            logger.debug(f"View increment ignored for unknown slug {slug}")
            return False
        return True

    def record_view_later(self, slug: str) -> Future:
        """Fire-and-forget variant for the read path."""
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="views")
            executor = self._executor
        return executor.submit(self.record_view, slug)

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)
