"""PolicyStore protocol — read-only lookup of namespace-scoped policy data."""

from __future__ import annotations

from abc import ABC, abstractmethod


class PolicyStore(ABC):
    """Abstract base for all policy-store backends.

    A store maps a configuration key (e.g. ``"validator-config"``) to a
    ``namespace -> opaque limit data`` mapping.  Rules call :meth:`get`
    once per evaluation and treat the result as a read-only snapshot.

    Retry policy, if any, belongs to the store, never to the rules.
    """

    @abstractmethod
    async def get(self, key: str, *, timeout: float | None = None) -> dict[str, str]:
        """Return the mapping stored under *key*.

        Args:
            key:     Configuration key to read.
            timeout: Seconds allowed for the lookup (``None`` = no limit).

        Raises:
            StoreLookupError: If the key does not exist or the backend
                cannot be reached within *timeout*.
        """
        ...

    async def close(self) -> None:
        """Release backend resources.  No-op by default."""
