"""Clock abstraction for testable time-dependent logic."""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Protocol for reading a monotonic time source.  Inject a fake in tests."""

    def monotonic(self) -> float: ...


class SystemClock:
    """Default clock backed by ``time.monotonic``."""

    def monotonic(self) -> float:
        return time.monotonic()
