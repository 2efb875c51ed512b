"""
Asset adapters: the native currency and fungible tokens.

Both expose the same minimal, explicit-caller surface the deal uses:

    balance_of(holder) -> int
    transfer(sender, to, amount) -> bool
    transfer_from(spender, owner, to, amount) -> bool

Failures raise `TransferError`. A token may also be put in *declining* mode, in
which it returns False instead of raising (the way some real tokens report
failure); callers must treat a falsy return as a failed move.

Notifications (emitted through the ledger sink, keyed by the token address):
    Transfer { frm, to, value }
    Approval { owner, spender, value }

Tokens accept an optional post-transfer `hook(token, op, frm, to, amount)`,
invoked after balances moved and before the call returns. Tests use it to model
an asset implementation that calls back into whoever invoked it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional, Protocol

from swap_core import logging as slog
from swap_core.errors import InvalidArgument, TransferError

from .ledger import NATIVE_ASSET

if TYPE_CHECKING:
    from .ledger import Ledger

log = slog.get_logger(__name__)

TransferHook = Callable[["FungibleToken", str, bytes, bytes, int], None]


class AssetAdapter(Protocol):
    """Structural type for anything a deal can hold."""

    @property
    def asset_id(self) -> bytes: ...

    def balance_of(self, holder: bytes) -> int: ...

    def transfer(self, sender: bytes, to: bytes, amount: int) -> bool: ...

    def transfer_from(self, spender: bytes, owner: bytes, to: bytes, amount: int) -> bool: ...


# ---------------------------------------------------------------------------
# Native currency
# ---------------------------------------------------------------------------


class NativeCurrency:
    """
    The ledger's built-in currency. Value is attached to a call by the sender,
    so there is no allowance model; `transfer_from` always fails.
    """

    symbol = "NATIVE"

    def __init__(self, ledger: "Ledger") -> None:
        self._ledger = ledger

    @property
    def asset_id(self) -> bytes:
        return NATIVE_ASSET

    def balance_of(self, holder: bytes) -> int:
        return self._ledger.balance(NATIVE_ASSET, holder)

    def transfer(self, sender: bytes, to: bytes, amount: int) -> bool:
        self._ledger.move(NATIVE_ASSET, sender, to, amount)
        return True

    def transfer_from(self, spender: bytes, owner: bytes, to: bytes, amount: int) -> bool:
        raise TransferError("native currency has no allowances", asset=NATIVE_ASSET, amount=amount)

    def mint(self, to: bytes, amount: int) -> None:
        """Credit `to` out of thin air (genesis / test funding)."""
        self._ledger.mint(NATIVE_ASSET, to, amount)


# ---------------------------------------------------------------------------
# Fungible token
# ---------------------------------------------------------------------------


class FungibleToken:
    """
    Allowance-based fungible token living on a `Ledger`.

    The token registers itself with the ledger on construction so deals can
    resolve it by address.
    """

    def __init__(
        self,
        ledger: "Ledger",
        address: bytes,
        symbol: str = "TKN",
        *,
        hook: Optional[TransferHook] = None,
    ) -> None:
        self._ledger = ledger
        self.address = ledger.address(address, "asset")
        if not isinstance(symbol, str) or not symbol:
            raise InvalidArgument("symbol must be a non-empty str", arg="symbol")
        self.symbol = symbol.upper()
        self.hook = hook
        self.declining = False
        ledger.register_token(self)

    @property
    def asset_id(self) -> bytes:
        return self.address

    def __repr__(self) -> str:
        return f"FungibleToken({self.symbol}, 0x{self.address.hex()})"

    # -- views ---------------------------------------------------------------

    def balance_of(self, holder: bytes) -> int:
        return self._ledger.balance(self.address, holder)

    def allowance(self, owner: bytes, spender: bytes) -> int:
        return self._ledger.allowance(self.address, owner, spender)

    def total_supply(self) -> int:
        return self._ledger.supply(self.address)

    # -- mutations -----------------------------------------------------------

    def mint(self, to: bytes, amount: int) -> None:
        self._ledger.mint(self.address, to, amount)
        self._ledger.emit(self.address, "Transfer", frm=bytes(len(self.address)), to=to, value=amount)

    def approve(self, owner: bytes, spender: bytes, amount: int) -> bool:
        self._ledger.set_allowance(self.address, owner, spender, amount)
        self._ledger.emit(self.address, "Approval", owner=owner, spender=spender, value=amount)
        return True

    def transfer(self, sender: bytes, to: bytes, amount: int) -> bool:
        if self.declining:
            log.warning("token declined transfer", extra={"asset": self.address, "amount": amount})
            return False
        self._ledger.move(self.address, sender, to, amount)
        self._ledger.emit(self.address, "Transfer", frm=sender, to=to, value=amount)
        self._after("transfer", sender, to, amount)
        return True

    def transfer_from(self, spender: bytes, owner: bytes, to: bytes, amount: int) -> bool:
        """`spender` moves `amount` of `owner`'s balance to `to` against an allowance."""
        if self.declining:
            log.warning("token declined transfer_from", extra={"asset": self.address, "amount": amount})
            return False
        amt = self._ledger.check_amount(amount)
        current = self.allowance(owner, spender)
        if current < amt:
            raise TransferError(
                "allowance too low", asset=self.address, amount=amt, data={"allowance": current}
            )
        self._ledger.move(self.address, owner, to, amt)
        self._ledger.set_allowance(self.address, owner, spender, current - amt)
        self._ledger.emit(self.address, "Transfer", frm=owner, to=to, value=amt)
        self._after("transfer_from", owner, to, amt)
        return True

    def _after(self, op: str, frm: bytes, to: bytes, amount: int) -> None:
        if self.hook is not None:
            self.hook(self, op, frm, to, amount)


__all__ = ["AssetAdapter", "NativeCurrency", "FungibleToken", "TransferHook"]
