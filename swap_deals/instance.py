"""
swap_deals.instance — one two-party conditional exchange.

Party A escrows native currency, party B escrows a fungible asset. Once both
have deposited and both have signed, each withdraws the *other* side's
deposit; whichever withdraws second also tears the deal down in the same call.
If the deal cannot close (a party rescinds before signing, or a deadline passes
with a deposit or signature missing) the refund path returns the live escrowed
balances: native to A, asset to B.

Entry points
------------
    deposit_native(sender, amount) -> CallResult     party A
    deposit_asset(sender, amount)  -> CallResult     party B (pulls via allowance)
    sign(sender)                   -> CallResult     A or B
    rescind(sender)                -> CallResult     A or B
    withdraw(sender)               -> CallResult     A or B

Every entry point runs, in this order:

1. reentrancy latch (ReentrancyError)
2. caller must be the bound party (AuthorizationError)
3. deal must still be open (StateError)
4. argument validation (InvalidArgument)
5. lazy expiry check: if the deal can no longer close, the refund path runs,
   commits, and the call returns Outcome.REFUNDED
6. lifecycle precondition for the caller (StateError)

All of it runs inside a ledger checkpoint. Party records and the deal outcome
are stored in the ledger journal (`deals` book, keyed by `(deal_address,
field)`), next to balances, allowances and notifications, so a raised error
reverts all of them together. The same holds when this deal was entered from
inside another call that later fails: the outer checkpoint undoes both.

Notifications: Deposit(party, amount), Sign(party), Withdraw(party, amount),
FundsReturned(party, amount).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional, Tuple

from swap_core import logging as slog
from swap_core.encoding import to_bytes
from swap_core.errors import AuthorizationError, InvalidArgument, StateError, TransferError

from .guard import ReentrancyGuard
from .status import CallResult, DealOutcome, Outcome, PartyRecord, PartyStatus, Refund
from .window import TimeWindow, is_expired

if TYPE_CHECKING:
    from swap_ledger.assets import AssetAdapter, FungibleToken
    from swap_ledger.ledger import Ledger

log = slog.get_logger(__name__)

_BOOK = "deals"
_OUTCOME = "outcome"

_A = "A"
_B = "B"

_RANK = {
    PartyStatus.EMPTY: 0,
    PartyStatus.DEPOSITED: 1,
    PartyStatus.SIGNED: 2,
    PartyStatus.SETTLED: 3,
    PartyStatus.REFUNDED: 4,
}


class DealInstance:
    """
    Deal state machine bound to a ledger. Normally built by
    `DealFactory.create_deal`, which also derives `address`.

    The object itself only carries immutable wiring (id, address, asset,
    party addresses, window). Mutable state is read from and written to the
    ledger journal; a deal nobody has called yet reads as both parties EMPTY
    and outcome OPEN.
    """

    def __init__(
        self,
        ledger: "Ledger",
        *,
        deal_id: int,
        address: bytes,
        asset: "FungibleToken",
        party_a: bytes,
        party_b: bytes,
        window: TimeWindow,
    ) -> None:
        self.ledger = ledger
        self.deal_id = deal_id
        self.address = bytes(address)
        self.asset = asset
        self.native = ledger.native
        self._addresses = {_A: bytes(party_a), _B: bytes(party_b)}
        self.window = window
        self.guard = ReentrancyGuard()

    def __repr__(self) -> str:
        return f"DealInstance(id={self.deal_id}, 0x{self.address.hex()}, {self.outcome.value})"

    # ---------------------------------------------------------------- storage

    def _load(self, role: str) -> PartyRecord:
        rec = self.ledger.journal.get(_BOOK, (self.address, role))
        return rec if rec is not None else PartyRecord(self._addresses[role])

    def _store(self, role: str, rec: PartyRecord) -> PartyRecord:
        self.ledger.journal.set(_BOOK, (self.address, role), rec)
        return rec

    def _set_outcome(self, outcome: DealOutcome) -> None:
        self.ledger.journal.set(_BOOK, (self.address, _OUTCOME), outcome)

    # ------------------------------------------------------------------ views

    @property
    def party_a(self) -> PartyRecord:
        return self._load(_A)

    @property
    def party_b(self) -> PartyRecord:
        return self._load(_B)

    @property
    def outcome(self) -> DealOutcome:
        return self.ledger.journal.get(_BOOK, (self.address, _OUTCOME), DealOutcome.OPEN)

    @property
    def terminated(self) -> bool:
        return self.outcome is not DealOutcome.OPEN

    def balance_native(self) -> int:
        return self.native.balance_of(self.address)

    def balance_asset(self) -> int:
        return self.asset.balance_of(self.address)

    def status_of(self, addr: Any) -> PartyStatus:
        a = to_bytes(addr)
        for role in (_A, _B):
            if a == self._addresses[role]:
                return self._load(role).status
        raise InvalidArgument("address is not a party to this deal", arg="addr")

    def is_expired(self) -> bool:
        return is_expired(self.window, self.ledger.now(), self.party_a.status, self.party_b.status)

    def state(self) -> Dict[str, Any]:
        """JSON-friendly snapshot for tooling."""
        return {
            "deal_id": self.deal_id,
            "address": "0x" + self.address.hex(),
            "asset": "0x" + self.asset.address.hex(),
            "outcome": self.outcome.value,
            "party_a": self.party_a.to_dict(),
            "party_b": self.party_b.to_dict(),
            "window": {
                "created_at": self.window.created_at,
                "deposit_deadline": self.window.deposit_deadline,
                "signing_deadline": self.window.signing_deadline,
            },
            "balance_native": self.balance_native(),
            "balance_asset": self.balance_asset(),
            "expired": self.is_expired(),
        }

    # ----------------------------------------------------------- entry points

    def deposit_native(self, sender: Any, amount: int) -> CallResult:
        op = "deposit_native"
        with self._entry(op, sender, only=_A) as (me, _other):
            amt = self.ledger.check_amount(amount, positive=True)
            if self.is_expired():
                return self._refund_result(op, me)
            rec = self._require(me, PartyStatus.EMPTY, op)
            self._settle_ok(self.native.transfer(rec.address, self.address, amt), self.native, amt)
            return self._deposited(op, me, amt)

    def deposit_asset(self, sender: Any, amount: int) -> CallResult:
        """Pull `amount` from party B; B must have approved the deal address first."""
        op = "deposit_asset"
        with self._entry(op, sender, only=_B) as (me, _other):
            amt = self.ledger.check_amount(amount, positive=True)
            if self.is_expired():
                return self._refund_result(op, me)
            rec = self._require(me, PartyStatus.EMPTY, op)
            ok = self.asset.transfer_from(self.address, rec.address, self.address, amt)
            self._settle_ok(ok, self.asset, amt)
            return self._deposited(op, me, amt)

    def sign(self, sender: Any) -> CallResult:
        op = "sign"
        with self._entry(op, sender) as (me, _other):
            if self.is_expired():
                return self._refund_result(op, me)
            rec = self._require(me, PartyStatus.DEPOSITED, op)
            self._store(me, rec.advance(PartyStatus.SIGNED, op=op))
            self.ledger.emit(self.address, "Sign", party=rec.address)
            log.debug("party signed", extra={"party": rec.address})
            return CallResult(Outcome.SIGNED, rec.address)

    def rescind(self, sender: Any) -> CallResult:
        """Abort before signing. Returns both live balances and terminates."""
        op = "rescind"
        with self._entry(op, sender) as (me, _other):
            if not self.is_expired():
                self._require(me, PartyStatus.DEPOSITED, op)
            return self._refund_result(op, me)

    def withdraw(self, sender: Any) -> CallResult:
        """
        Pay the caller the counterparty's deposit. Requires both signatures.
        The second withdrawal sweeps any residue and terminates the deal.
        """
        op = "withdraw"
        with self._entry(op, sender) as (me, other):
            if self.is_expired():
                return self._refund_result(op, me)
            rec = self._require(me, PartyStatus.SIGNED, op)
            peer = self._load(other)
            if not peer.status.has_signed:
                raise StateError(
                    "counterparty has not signed", status=peer.status.value, op=op
                )

            paid = self._payout_to(me)
            self._store(me, self._load(me).advance(PartyStatus.SETTLED, op=op))
            self.ledger.emit(self.address, "Withdraw", party=rec.address, amount=paid)

            if peer.status is PartyStatus.SETTLED:
                self._teardown()
                log.info("deal exchanged", extra={"party": rec.address, "amount": paid})
                return CallResult(Outcome.PAID_AND_TERMINATED, rec.address, paid)

            log.info("party withdrew", extra={"party": rec.address, "amount": paid})
            return CallResult(Outcome.PAID, rec.address, paid)

    # -------------------------------------------------------------- internals

    @contextmanager
    def _entry(self, op: str, sender: Any, *, only: Optional[str] = None) -> Iterator[Tuple[str, str]]:
        with self.guard.hold(op), slog.bound(deal="0x" + self.address.hex(), op=op):
            me, other = self._authorize(op, sender, only)
            if self.terminated:
                raise StateError("deal is terminated", status=self.outcome.value, op=op)
            with self.ledger.checkpoint():
                yield me, other

    def _authorize(self, op: str, sender: Any, only: Optional[str]) -> Tuple[str, str]:
        s = to_bytes(sender)
        a, b = self._addresses[_A], self._addresses[_B]
        if only is None and s == a == b:
            # Self-dealing: shared entry points act for the role that is
            # further behind, A on a tie.
            if _RANK[self.party_b.status] < _RANK[self.party_a.status]:
                return _B, _A
            return _A, _B
        if s == a and only in (None, _A):
            return _A, _B
        if s == b and only in (None, _B):
            return _B, _A
        raise AuthorizationError(f"caller may not {op} on this deal", caller=s, op=op)

    def _require(self, role: str, expected: PartyStatus, op: str) -> PartyRecord:
        rec = self._load(role)
        if rec.status is not expected:
            raise StateError(
                f"{op} requires {expected.value}, party is {rec.status.value}",
                status=rec.status.value,
                op=op,
            )
        return rec

    @staticmethod
    def _settle_ok(ok: Any, adapter: "AssetAdapter", amount: int) -> None:
        if not ok:
            raise TransferError("asset declined the transfer", asset=adapter.asset_id, amount=amount)

    def _send(self, adapter: "AssetAdapter", to: bytes, amount: int) -> None:
        if amount:
            self._settle_ok(adapter.transfer(self.address, to, amount), adapter, amount)

    def _deposited(self, op: str, me: str, amount: int) -> CallResult:
        rec = self._store(me, self._load(me).advance(PartyStatus.DEPOSITED, op=op, deposited_amount=amount))
        self.ledger.emit(self.address, "Deposit", party=rec.address, amount=amount)
        log.debug("deposit escrowed", extra={"party": rec.address, "amount": amount})
        return CallResult(Outcome.DEPOSITED, rec.address, amount)

    def _payout_to(self, me: str) -> int:
        # A receives what B escrowed and vice versa.
        to = self._addresses[me]
        if me == _A:
            amount = self.balance_asset()
            self._send(self.asset, to, amount)
        else:
            amount = self.balance_native()
            self._send(self.native, to, amount)
        return amount

    def _teardown(self) -> None:
        """Sweep whatever is still escrowed to its counterparty and close."""
        a, b = self._addresses[_A], self._addresses[_B]
        residual_native = self.balance_native()
        residual_asset = self.balance_asset()
        self._send(self.native, b, residual_native)
        self._send(self.asset, a, residual_asset)
        if residual_native:
            self.ledger.emit(self.address, "Withdraw", party=b, amount=residual_native)
        if residual_asset:
            self.ledger.emit(self.address, "Withdraw", party=a, amount=residual_asset)
        self._set_outcome(DealOutcome.EXCHANGED)

    def _refund(self, op: str) -> Refund:
        a, b = self._addresses[_A], self._addresses[_B]
        native_amt = self.balance_native()
        asset_amt = self.balance_asset()
        self._send(self.native, a, native_amt)
        self._send(self.asset, b, asset_amt)
        for role in (_A, _B):
            self._store(role, self._load(role).advance(PartyStatus.REFUNDED, op=op))
        self._set_outcome(DealOutcome.REFUNDED)
        self.ledger.emit(self.address, "FundsReturned", party=a, amount=native_amt)
        self.ledger.emit(self.address, "FundsReturned", party=b, amount=asset_amt)
        log.info("deal refunded", extra={"native_returned": native_amt, "asset_returned": asset_amt})
        return Refund(native_amt, asset_amt)

    def _refund_result(self, op: str, me: str) -> CallResult:
        return CallResult(Outcome.REFUNDED, self._addresses[me], 0, self._refund(op))


__all__ = ["DealInstance"]
