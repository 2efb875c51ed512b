"""
swap_ledger.journal — journaled books, checkpoints, revert/commit.

This module provides a deterministic, in-memory write journal over a set of
named *books*. A book is either a key/value map (balances, allowances) or an
append-only log (notifications). It supports nested checkpoints via a stack of
undo layers. Writes apply immediately; while a checkpoint is open every write
also records how to undo itself in the top layer. `commit()` hands the top
layer's undo entries to its parent (or drops them when the parent is the root),
`revert()` replays them in reverse order and discards the layer.

Key properties
--------------
- Pure Python, no I/O; reads are plain dict lookups (no overlay walk).
- Nested checkpoints with O(changes) revert cost.
- Writes made outside any checkpoint are permanent (the root keeps no undo log).

Intended usage
--------------
    j = Journal()
    with j.checkpoint():
        j.set("balances", key, 10)
        j.append("events", ev)
        raise SomeError          # → both writes are undone, error propagates

Notes
-----
- This journal does not enforce economic rules; callers (ledger, adapters)
  validate amounts and balances before writing.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterator, List, Mapping, Tuple

_MISSING = object()


@dataclass
class _Layer:
    """A single checkpoint: undo entries in write order."""

    undo: List[Tuple[str, str, Any, Any]] = field(default_factory=list)


class Journal:
    """
    Undo-log journal with nested checkpoints.

    API highlights
    --------------
    - get() / set() / delete() / items()        on map books
    - append() / log()                          on log books
    - begin() / commit() / revert() / depth()
    - checkpoint()                              context manager (commit or revert)
    - revert_to(marker) / commit_to(marker)
    """

    def __init__(self) -> None:
        self._maps: Dict[str, Dict[Hashable, Any]] = {}
        self._logs: Dict[str, List[Any]] = {}
        # Root layer; never popped.
        self._layers: List[_Layer] = [_Layer()]

    # --------------------------------------------------------------------- #
    # Checkpointing
    # --------------------------------------------------------------------- #

    def depth(self) -> int:
        """Number of layers (>= 1). 1 means no open checkpoint."""
        return len(self._layers)

    def begin(self) -> int:
        """Start a new checkpoint. Returns the new depth marker."""
        self._layers.append(_Layer())
        return len(self._layers)

    def commit(self) -> None:
        """Fold the top checkpoint into its parent."""
        if len(self._layers) <= 1:
            raise RuntimeError("no open checkpoint to commit")
        top = self._layers.pop()
        if len(self._layers) > 1:
            self._layers[-1].undo.extend(top.undo)

    def revert(self) -> None:
        """Undo every write recorded in the top checkpoint and discard it."""
        if len(self._layers) <= 1:
            raise RuntimeError("no open checkpoint to revert")
        top = self._layers.pop()
        for kind, book, key, prior in reversed(top.undo):
            if kind == "map":
                m = self._maps[book]
                if prior is _MISSING:
                    m.pop(key, None)
                else:
                    m[key] = prior
            else:
                del self._logs[book][prior:]

    def commit_to(self, marker: int) -> None:
        while len(self._layers) > marker:
            self.commit()

    def revert_to(self, marker: int) -> None:
        while len(self._layers) > marker:
            self.revert()

    @contextmanager
    def checkpoint(self) -> Iterator[int]:
        """
        Open a checkpoint for the scope. Commits on normal exit; reverts and
        re-raises on any exception.
        """
        marker = self.begin()
        try:
            yield marker
        except BaseException:
            self.revert_to(marker - 1)
            raise
        else:
            self.commit_to(marker - 1)

    # --------------------------------------------------------------------- #
    # Map books
    # --------------------------------------------------------------------- #

    def _map(self, book: str) -> Dict[Hashable, Any]:
        m = self._maps.get(book)
        if m is None:
            m = {}
            self._maps[book] = m
        return m

    def _record(self, kind: str, book: str, key: Any, prior: Any) -> None:
        if len(self._layers) > 1:
            self._layers[-1].undo.append((kind, book, key, prior))

    def get(self, book: str, key: Hashable, default: Any = None) -> Any:
        return self._maps.get(book, {}).get(key, default)

    def set(self, book: str, key: Hashable, value: Any) -> None:
        m = self._map(book)
        self._record("map", book, key, m.get(key, _MISSING))
        m[key] = value

    def delete(self, book: str, key: Hashable) -> None:
        m = self._map(book)
        if key not in m:
            return
        self._record("map", book, key, m[key])
        del m[key]

    def items(self, book: str) -> Mapping[Hashable, Any]:
        """Read-only snapshot of a map book."""
        return dict(self._maps.get(book, {}))

    # --------------------------------------------------------------------- #
    # Log books
    # --------------------------------------------------------------------- #

    def append(self, book: str, value: Any) -> int:
        """Append to a log book; returns the entry's index."""
        log = self._logs.get(book)
        if log is None:
            log = []
            self._logs[book] = log
        self._record("log", book, None, len(log))
        log.append(value)
        return len(log) - 1

    def log(self, book: str) -> Tuple[Any, ...]:
        return tuple(self._logs.get(book, ()))


__all__ = ["Journal"]
