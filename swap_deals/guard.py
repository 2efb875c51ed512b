"""
Per-deal non-reentrancy latch.

    with deal.guard.hold("withdraw"):
        ...  # critical section; a nested hold() raises ReentrancyError

The latch is released on every exit path, successful or failing.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from swap_core import logging as slog
from swap_core.errors import ReentrancyError

log = slog.get_logger(__name__)


class ReentrancyGuard:
    def __init__(self) -> None:
        self._held_by: Optional[str] = None

    @property
    def held(self) -> bool:
        return self._held_by is not None

    @property
    def held_by(self) -> Optional[str]:
        return self._held_by

    def enter(self, op: str) -> None:
        if self._held_by is not None:
            log.warning("reentrant call rejected", extra={"op": op, "held_by": self._held_by})
            raise ReentrancyError(f"{op} called while {self._held_by} is in progress", op=op, held_by=self._held_by)
        self._held_by = op

    def exit(self) -> None:
        self._held_by = None

    @contextmanager
    def hold(self, op: str) -> Iterator[None]:
        self.enter(op)
        try:
            yield
        finally:
            self.exit()


__all__ = ["ReentrancyGuard"]
