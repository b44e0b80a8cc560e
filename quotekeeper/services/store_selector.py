"""Durable-versus-fallback store selection."""

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass

from sqlalchemy.engine import Engine

from quotekeeper.database import check_connection
from quotekeeper.stores.base import QuoteStore
from quotekeeper.stores.memory import MemoryStore

logger = logging.getLogger(__name__)

Probe = Callable[[], bool]


class StoreSelector:
    """Decides whether calls should use the durable store or the in-memory fallback.

    The decision is cached for ``freshness_seconds`` so a burst of calls during an
    outage costs one probe, not one per call. A probe that returns False, raises, or
    exceeds its timeout is treated as "unreachable"; nothing propagates to the caller.
    """

    def __init__(
        self,
        probe: Probe,
        freshness_seconds: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.probe = probe
        self.freshness_seconds = freshness_seconds
        self.clock = clock
        self._lock = threading.Lock()
        self._use_fallback: bool | None = None
        self._checked_at = 0.0

    def should_use_fallback(self) -> bool:
        """Return True when the fallback store should serve the current call."""
        with self._lock:
            now = self.clock()
            if self._use_fallback is not None and now - self._checked_at < self.freshness_seconds:
                return self._use_fallback

            try:
                reachable = bool(self.probe())
            except Exception as e:
                logger.warning(f"Durable store probe failed: {e}")
                reachable = False

            if self._use_fallback is None or self._use_fallback == reachable:
                # First decision, or the decision flipped
                if reachable:
                    logger.info("Durable store reachable")
                else:
                    logger.warning("Durable store unreachable, using in-memory fallback")

            self._use_fallback = not reachable
            self._checked_at = self.clock()
            return self._use_fallback

    def invalidate(self) -> None:
        """Forget the cached decision so the next call probes again."""
        with self._lock:
            self._use_fallback = None


class DatabaseProbe:
    """Runs ``SELECT 1`` on a worker thread and gives up after ``timeout`` seconds.

    A check that outlives its timeout keeps running; until it finishes, further calls
    report the store unreachable instead of queueing another check behind it.
    """

    def __init__(self, engine: Engine, timeout: float):
        self.engine = engine
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="store-probe")
        self._lock = threading.Lock()
        self._pending: Future | None = None

    def __call__(self) -> bool:
        with self._lock:
            if self._pending is not None and not self._pending.done():
                logger.warning("Previous durable store check still running")
                return False
            future = self._executor.submit(check_connection, self.engine)
            self._pending = future
        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError:
            logger.warning(f"Durable store probe timed out after {self.timeout}s")
            return False


@dataclass(frozen=True)
class ActiveStore:
    """The store chosen for one call, and whether it is the fallback."""

    store: QuoteStore
    fallback: bool


class StorageBackend:
    """Holds the selector and the fallback store.

    One instance lives for the life of the application; tests build their own.
    """

    def __init__(self, selector: StoreSelector, fallback: MemoryStore | None = None):
        self.selector = selector
        self.fallback = fallback or MemoryStore()

    def resolve(self, durable: QuoteStore) -> ActiveStore:
        """Pick the store for the current call: ``durable`` unless it is unreachable."""
        if self.selector.should_use_fallback():
            return ActiveStore(store=self.fallback, fallback=True)
        return ActiveStore(store=durable, fallback=False)
