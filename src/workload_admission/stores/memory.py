"""InMemoryStore — zero-config, dict-backed policy store for development and testing."""

from __future__ import annotations

from collections.abc import Mapping

from workload_admission.exceptions import StoreLookupError
from workload_admission.stores.base import PolicyStore


class InMemoryStore(PolicyStore):
    """In-memory store using nested dicts.  Data is lost on process exit."""

    def __init__(self, data: Mapping[str, Mapping[str, str]] | None = None) -> None:
        self._data: dict[str, dict[str, str]] = {k: dict(v) for k, v in (data or {}).items()}

    async def get(self, key: str, *, timeout: float | None = None) -> dict[str, str]:
        if key not in self._data:
            raise StoreLookupError("get", f"key '{key}' not found")
        return dict(self._data[key])

    async def set(self, key: str, value: Mapping[str, str]) -> None:
        self._data[key] = dict(value)

    async def delete(self, key: str) -> None:
        """Delete a key.  No-op if it does not exist."""
        self._data.pop(key, None)
