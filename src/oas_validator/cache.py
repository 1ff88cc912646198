"""Spec cache: memoizes loaded contract documents by spec identifier.

Parsing a contract is expensive and the result is immutable, so one
document is shared by every session that names the same spec. Entries
are evicted least-recently-used when the cache is full, and after an
idle period so that externally updated specs are eventually reloaded.
"""

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from concurrent.futures import Future

from oas_validator import settings
from oas_validator.spec.loader import SpecLoader
from oas_validator.spec.models import SpecDocument

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 1024
DEFAULT_IDLE_TIMEOUT = 600.0


class SpecCache:
    """Thread-safe LRU cache of SpecDocuments with single-flight loading.

    Concurrent misses for the same key trigger exactly one call to the
    loader; every caller receives the same document or the same
    exception. Failed loads are not remembered.
    """

    def __init__(
        self,
        loader: Callable[[str], SpecDocument] | None = None,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.loader = loader or SpecLoader()
        self.max_entries = max_entries
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._lock = threading.Lock()
        # spec_id -> (last access time, document), oldest access first
        self._entries: OrderedDict[str, tuple[float, SpecDocument]] = OrderedDict()
        self._inflight: dict[str, Future] = {}
        self._closed = False

    def get(self, spec_id: str) -> SpecDocument:
        """Return the document for spec_id, loading it on first use."""
        with self._lock:
            if self._closed:
                raise RuntimeError("spec cache is closed")
            now = self._clock()
            self._expire(now)
            entry = self._entries.get(spec_id)
            if entry is not None:
                self._entries[spec_id] = (now, entry[1])
                self._entries.move_to_end(spec_id)
                logger.debug("Spec cache hit for %s", spec_id[:80])
                return entry[1]

            future = self._inflight.get(spec_id)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[spec_id] = future

        if not owner:
            return future.result()

        try:
            document = self.loader(spec_id)
        except BaseException as e:
            with self._lock:
                del self._inflight[spec_id]
            logger.warning("Failed to load spec %s: %s", spec_id[:80], e)
            future.set_exception(e)
            raise

        with self._lock:
            del self._inflight[spec_id]
            if not self._closed:
                self._entries[spec_id] = (self._clock(), document)
                self._entries.move_to_end(spec_id)
                while len(self._entries) > self.max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    logger.debug("Evicted spec %s (cache full)", evicted[:80])
        future.set_result(document)
        return document

    def invalidate(self, spec_id: str) -> None:
        with self._lock:
            self._entries.pop(spec_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def close(self) -> None:
        """Drop every entry; later calls to get() raise RuntimeError."""
        with self._lock:
            self._entries.clear()
            self._closed = True

    def __len__(self) -> int:
        with self._lock:
            self._expire(self._clock())
            return len(self._entries)

    def __contains__(self, spec_id: str) -> bool:
        with self._lock:
            self._expire(self._clock())
            return spec_id in self._entries

    def _expire(self, now: float) -> None:
        # Entries are ordered by last access, so stop at the first fresh one.
        while self._entries:
            spec_id, (accessed, _) = next(iter(self._entries.items()))
            if now - accessed < self.idle_timeout:
                break
            del self._entries[spec_id]
            logger.debug("Evicted spec %s (idle)", spec_id[:80])


_default_cache: SpecCache | None = None
_default_lock = threading.Lock()


def default_cache() -> SpecCache:
    """Process-wide cache built from settings, created on first use."""
    global _default_cache
    with _default_lock:
        if _default_cache is None:
            _default_cache = SpecCache(
                max_entries=settings.CACHE_MAX_ENTRIES,
                idle_timeout=settings.CACHE_IDLE_SECONDS,
            )
        return _default_cache
