"""Per-year read-through cache shared by the solar-term and lunar tables.

At most one computation per key is in flight: later callers for the same key
block on the first caller's result. Failed computations are not stored, so the
next caller retries. Cached values must be immutable since they are handed to
every caller as-is.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Generic, Hashable, TypeVar

from ..observability.metrics import TABLE_CACHE_HITS, TABLE_CACHE_MISSES

__all__ = ["YearTableCache"]

LOG = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(slots=True)
class _InFlight(Generic[V]):
    done: threading.Event = field(default_factory=threading.Event)
    value: V | None = None
    error: BaseException | None = None


class YearTableCache(Generic[K, V]):
    """Process-local LRU keyed by year with in-flight de-duplication."""

    __slots__ = ("name", "maxsize", "_data", "_pending", "_lock")

    def __init__(self, name: str, maxsize: int = 256) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be positive")
        self.name = name
        self.maxsize = maxsize
        self._data: "OrderedDict[K, V]" = OrderedDict()
        self._pending: dict[K, _InFlight[V]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def get_or_compute(self, key: K, compute: Callable[[K], V]) -> V:
        """Return the cached value for ``key``, computing it once if absent."""

        with self._lock:
            if key in self._data:
                self._data.move_to_end(key)
                TABLE_CACHE_HITS.labels(table=self.name).inc()
                return self._data[key]
            waiting = self._pending.get(key)
            if waiting is None:
                pending: _InFlight[V] = _InFlight()
                self._pending[key] = pending
                TABLE_CACHE_MISSES.labels(table=self.name).inc()

        if waiting is not None:
            waiting.done.wait()
            if waiting.error is not None:
                raise waiting.error
            TABLE_CACHE_HITS.labels(table=self.name).inc()
            return waiting.value  # type: ignore[return-value]

        try:
            value = compute(key)
        except BaseException as exc:
            pending.error = exc
            LOG.debug("%s computation for %r failed: %s", self.name, key, exc)
            raise
        else:
            pending.value = value
            with self._lock:
                self._data[key] = value
                self._data.move_to_end(key)
                while len(self._data) > self.maxsize:
                    self._data.popitem(last=False)
            return value
        finally:
            with self._lock:
                self._pending.pop(key, None)
            pending.done.set()

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
