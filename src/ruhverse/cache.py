from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future
from typing import Callable

from .models import EditionPair

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 6 * 60 * 60


class DatasetCache:
    """
    Process-wide cache of the full two-language dataset.

    Only one upstream fetch runs at a time; callers that arrive while it is
    in flight wait on the same future and see the same value or exception.
    """

    def __init__(
        self,
        loader: Callable[[], EditionPair],
        ttl: float = CACHE_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self.ttl = float(ttl)
        self._clock = clock
        self._lock = threading.Lock()
        # (value, fetched_at) replaced as a whole, never mutated.
        self._entry: tuple[EditionPair, float] | None = None
        self._inflight: Future[EditionPair] | None = None
        self.fetch_count = 0

    def _fresh(self, entry: tuple[EditionPair, float] | None) -> EditionPair | None:
        if entry is None:
            return None
        value, fetched_at = entry
        if self._clock() - fetched_at < self.ttl:
            return value
        return None

    def peek(self) -> EditionPair | None:
        """Return the last successful value, fresh or stale."""
        entry = self._entry
        return entry[0] if entry is not None else None

    def is_fresh(self) -> bool:
        return self._fresh(self._entry) is not None

    def get_full_dataset(self) -> EditionPair:
        value = self._fresh(self._entry)
        if value is not None:
            return value

        with self._lock:
            value = self._fresh(self._entry)
            if value is not None:
                return value
            future = self._inflight
            leader = future is None
            if future is None:
                future = Future()
                self._inflight = future
                self.fetch_count += 1

        if not leader:
            return future.result()

        try:
            value = self._loader()
        except Exception as exc:
            logger.warning("Upstream dataset fetch failed: %s", exc)
            with self._lock:
                self._inflight = None
            future.set_exception(exc)
            raise
        with self._lock:
            self._entry = (value, self._clock())
            self._inflight = None
        future.set_result(value)
        logger.info("Dataset cache refreshed (ttl=%ss)", int(self.ttl))
        return value

    def clear(self) -> None:
        with self._lock:
            self._entry = None
