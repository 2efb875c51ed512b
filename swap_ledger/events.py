"""
swap_ledger.events — append-only notification sink.

Deals, tokens and the registry emit notifications here; off-chain monitors read
them back. The sink writes through the ledger journal, so notifications emitted
by a call that later fails are discarded together with the call's balance
changes. Ordering is total per ledger (hence per emitter).

Validation mirrors what receipts need: names are short identifiers, arg keys
are identifier-like, values are bytes / bool / int / str.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from swap_core.errors import InvalidArgument

from .journal import Journal

MAX_EVENT_NAME_LEN = 64
MAX_KEY_LEN = 64
MAX_INT_BITS = 256

_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_BOOK = "events"


@dataclass(frozen=True)
class Event:
    """A committed (or pending, inside a call) notification."""

    seq: int
    address: bytes
    name: str
    args: Dict[str, Any] = field(default_factory=dict)
    timestamp: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """
        Canonical JSON-friendly form:
            bytes → 0x-hex, ints/bools/str unchanged.
        """
        return {
            "seq": self.seq,
            "address": "0x" + self.address.hex(),
            "name": self.name,
            "args": {k: ("0x" + v.hex() if isinstance(v, bytes) else v) for k, v in self.args.items()},
            "timestamp": self.timestamp,
        }


def _check_name(name: Any) -> str:
    if not isinstance(name, str) or not name:
        raise InvalidArgument("event name must be a non-empty str", arg="name")
    if len(name) > MAX_EVENT_NAME_LEN or not _NAME_RE.match(name):
        raise InvalidArgument(f"bad event name {name!r}", arg="name")
    return name


def _check_key(key: Any) -> str:
    if not isinstance(key, str) or not key or len(key) > MAX_KEY_LEN or not _KEY_RE.match(key):
        raise InvalidArgument(f"bad event arg key {key!r}", arg="key")
    return key


def _check_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, bool):
        # bool is a subclass of int, so check it before int.
        return value
    if isinstance(value, int):
        if value.bit_length() > MAX_INT_BITS:
            raise InvalidArgument("event int arg out of range", arg="value")
        return value
    if isinstance(value, str):
        return value
    raise InvalidArgument(f"unsupported event arg type {type(value).__name__}", arg="value")


class EventSink:
    """Journaled, ordered notification log."""

    def __init__(self, journal: Journal) -> None:
        self._journal = journal

    def emit(self, address: bytes, name: str, args: Optional[Mapping[str, Any]] = None, *, timestamp: int = 0) -> Event:
        checked = {_check_key(k): _check_value(v) for k, v in (args or {}).items()}
        ev = Event(
            seq=len(self._journal.log(_BOOK)),
            address=bytes(address),
            name=_check_name(name),
            args=checked,
            timestamp=int(timestamp),
        )
        self._journal.append(_BOOK, ev)
        return ev

    def events(self, address: Optional[bytes] = None, name: Optional[str] = None) -> List[Event]:
        """All notifications, optionally filtered by emitter and/or name, in emission order."""
        out: List[Event] = []
        for ev in self._journal.log(_BOOK):
            if address is not None and ev.address != bytes(address):
                continue
            if name is not None and ev.name != name:
                continue
            out.append(ev)
        return out

    def since(self, seq: int) -> List[Event]:
        """Polling cursor for monitors: every notification with `seq >= seq`."""
        return list(self._journal.log(_BOOK)[max(0, int(seq)):])

    def __len__(self) -> int:
        return len(self._journal.log(_BOOK))


__all__ = ["Event", "EventSink", "MAX_EVENT_NAME_LEN", "MAX_KEY_LEN", "MAX_INT_BITS"]
