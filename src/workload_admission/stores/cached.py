"""CachedStore — bounded TTL cache in front of another policy store."""

from __future__ import annotations

from collections import OrderedDict

from workload_admission._internal.clock import Clock, SystemClock
from workload_admission.stores.base import PolicyStore


class CachedStore(PolicyStore):
    """Serves recent lookups from memory for ``ttl_seconds``.

    Only successful lookups are cached; a failure always reaches the
    caller and is retried against the inner store on the next call.  The
    least recently used key is evicted once ``max_entries`` is reached.
    Callers receive copies, so a snapshot cannot be altered through the
    cache.

    Parameters:
        inner:       Store to read through to.
        ttl_seconds: Lifetime of a cached mapping.
        max_entries: Maximum number of cached keys.
        clock:       Injectable clock for testing.
    """

    def __init__(
        self,
        inner: PolicyStore,
        *,
        ttl_seconds: float = 30.0,
        max_entries: int = 64,
        clock: Clock | None = None,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._inner = inner
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock or SystemClock()
        self._entries: OrderedDict[str, tuple[float, dict[str, str]]] = OrderedDict()

    async def get(self, key: str, *, timeout: float | None = None) -> dict[str, str]:
        now = self._clock.monotonic()
        cached = self._entries.get(key)
        if cached is not None and cached[0] > now:
            self._entries.move_to_end(key)
            return dict(cached[1])

        value = await self._inner.get(key, timeout=timeout)

        self._entries[key] = (now + self._ttl, dict(value))
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
        return dict(value)

    def invalidate(self, key: str | None = None) -> None:
        """Drop *key* (or everything) from the cache."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    async def close(self) -> None:
        await self._inner.close()
