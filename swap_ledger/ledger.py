"""
swap_ledger.ledger — the single sequential ledger deals live on.

A `Ledger` holds, for every asset class (native currency and each fungible
token), a balance book keyed by holder and an allowance book keyed by
(owner, spender). It also owns the clock deals compare their deadlines against
and the notification sink.

Execution model
---------------
Calls are sequential: a call runs to completion before the next one starts.
Mutating calls open a journal checkpoint (`Ledger.checkpoint()`); if the call
raises, every journal write made inside it is undone: balances, allowances,
notifications, and the `deals` and `registry` books the deal layer keeps its
state in.
There is no wall clock: `timestamp` only moves when the host advances it.

Asset ids
---------
`NATIVE_ASSET` identifies the native currency. Tokens are identified by their
own address bytes.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Dict, Iterator, Optional

from swap_core import logging as slog
from swap_core.config import SwapConfig, load_config
from swap_core.encoding import to_address
from swap_core.errors import InvalidArgument, TransferError

from .events import Event, EventSink
from .journal import Journal

if TYPE_CHECKING:
    from .assets import FungibleToken, NativeCurrency

log = slog.get_logger(__name__)

NATIVE_ASSET = b"native"

_BALANCES = "balances"
_ALLOWANCES = "allowances"


class Ledger:
    """
    In-memory sequential ledger.

    Parameters
    ----------
    config : SwapConfig | None
        Address width and amount caps; defaults to `load_config()`.
    timestamp : int
        Initial clock value (seconds).
    """

    def __init__(self, config: Optional[SwapConfig] = None, *, timestamp: int = 0) -> None:
        self.config = config or load_config()
        if not isinstance(timestamp, int) or isinstance(timestamp, bool) or timestamp < 0:
            raise InvalidArgument("timestamp must be a non-negative int", arg="timestamp")
        self._timestamp = timestamp
        self.journal = Journal()
        self.sink = EventSink(self.journal)
        self._tokens: Dict[bytes, "FungibleToken"] = {}
        self._native: Optional["NativeCurrency"] = None

    # ------------------------------------------------------------------ clock

    @property
    def timestamp(self) -> int:
        return self._timestamp

    def now(self) -> int:
        return self._timestamp

    def advance(self, seconds: int) -> int:
        """Move the clock forward by `seconds`; returns the new timestamp."""
        if not isinstance(seconds, int) or isinstance(seconds, bool) or seconds < 0:
            raise InvalidArgument("clock can only move forward", arg="seconds")
        self._timestamp += seconds
        return self._timestamp

    def set_time(self, timestamp: int) -> None:
        if not isinstance(timestamp, int) or isinstance(timestamp, bool) or timestamp < self._timestamp:
            raise InvalidArgument("clock can only move forward", arg="timestamp")
        self._timestamp = timestamp

    # ---------------------------------------------------------------- atomics

    @contextmanager
    def checkpoint(self) -> Iterator[int]:
        """All-or-nothing scope over every journal book."""
        with self.journal.checkpoint() as marker:
            yield marker

    # ----------------------------------------------------------------- assets

    @property
    def native(self) -> "NativeCurrency":
        if self._native is None:
            from .assets import NativeCurrency

            self._native = NativeCurrency(self)
        return self._native

    def register_token(self, token: "FungibleToken") -> None:
        if token.address in self._tokens or token.address == NATIVE_ASSET:
            raise InvalidArgument("asset address already registered", arg="address")
        self._tokens[token.address] = token

    def token(self, address: bytes) -> "FungibleToken":
        tok = self._tokens.get(bytes(address))
        if tok is None:
            raise InvalidArgument("unknown asset", arg="asset")
        return tok

    def has_token(self, address: bytes) -> bool:
        return bytes(address) in self._tokens

    # --------------------------------------------------------------- validate

    def address(self, value: object, name: str = "address") -> bytes:
        return to_address(value, length=self.config.address_len, name=name)

    def check_amount(self, amount: object, *, positive: bool = False) -> int:
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise InvalidArgument("amount must be int", arg="amount")
        if amount < 0 or (positive and amount == 0):
            raise InvalidArgument(
                "amount must be positive" if positive else "amount must be non-negative", arg="amount"
            )
        if amount > self.config.max_amount:
            raise InvalidArgument(f"amount exceeds {self.config.max_amount_bits}-bit limit", arg="amount")
        return amount

    # --------------------------------------------------------------- balances

    def balance(self, asset: bytes, holder: bytes) -> int:
        return int(self.journal.get(_BALANCES, (bytes(asset), bytes(holder)), 0))

    def supply(self, asset: bytes) -> int:
        """Sum of all balances of `asset` (conservation checks)."""
        a = bytes(asset)
        return sum(v for (aid, _), v in self.journal.items(_BALANCES).items() if aid == a)

    def holders(self, asset: bytes) -> Dict[bytes, int]:
        a = bytes(asset)
        return {h: v for (aid, h), v in self.journal.items(_BALANCES).items() if aid == a and v}

    def mint(self, asset: bytes, to: bytes, amount: int) -> None:
        """Host/testing helper: create `amount` of `asset` at `to`."""
        amt = self.check_amount(amount)
        cur = self.balance(asset, to)
        if cur + amt > self.config.max_amount:
            raise InvalidArgument("balance overflow", arg="amount")
        self.journal.set(_BALANCES, (bytes(asset), bytes(to)), cur + amt)

    def move(self, asset: bytes, frm: bytes, to: bytes, amount: int) -> None:
        """
        Debit `frm` and credit `to`. Raises TransferError on insufficient
        balance; nothing is written in that case.
        """
        amt = self.check_amount(amount)
        if amt == 0:
            return
        a, f, t = bytes(asset), bytes(frm), bytes(to)
        cur_from = self.balance(a, f)
        if amt > cur_from:
            log.warning(
                "transfer rejected: insufficient balance",
                extra={"asset": a, "holder": f, "amount": amt, "balance": cur_from},
            )
            raise TransferError("insufficient balance", asset=a, amount=amt, data={"balance": cur_from})
        if f == t:
            return
        cur_to = self.balance(a, t)
        if cur_to + amt > self.config.max_amount:
            raise TransferError("balance overflow", asset=a, amount=amt)
        self.journal.set(_BALANCES, (a, f), cur_from - amt)
        self.journal.set(_BALANCES, (a, t), cur_to + amt)

    # ------------------------------------------------------------- allowances

    def allowance(self, asset: bytes, owner: bytes, spender: bytes) -> int:
        return int(self.journal.get(_ALLOWANCES, (bytes(asset), bytes(owner), bytes(spender)), 0))

    def set_allowance(self, asset: bytes, owner: bytes, spender: bytes, amount: int) -> None:
        amt = self.check_amount(amount)
        key = (bytes(asset), bytes(owner), bytes(spender))
        if amt == 0:
            self.journal.delete(_ALLOWANCES, key)
        else:
            self.journal.set(_ALLOWANCES, key, amt)

    # ----------------------------------------------------------------- events

    def emit(self, address: bytes, name: str, **args: object) -> Event:
        return self.sink.emit(address, name, args, timestamp=self._timestamp)


__all__ = ["Ledger", "NATIVE_ASSET"]
