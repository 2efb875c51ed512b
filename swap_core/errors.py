"""
swap_core.errors — typed failures for deal entry points, the ledger and the registry.

Every failure surfaced to a caller is a subclass of `SwapError`. Entry points
communicate failure *only* by raising; a raised error means the whole call was
rolled back (no balance moved, no party state changed, no notification kept).

Hierarchy
---------
SwapError (base)
 ├─ AuthorizationError : caller is not the bound party for the entry point
 ├─ StateError         : lifecycle precondition not met (incl. terminated deals)
 ├─ InvalidArgument    : zero/negative/oversized amount, null asset, bad address
 ├─ TransferError      : underlying asset move failed or was declined
 ├─ ReentrancyError    : nested call into a deal while its guard is held
 └─ DealNotFound       : registry lookup for an unknown id or address

Notes
-----
* None of these are retried automatically. Off-chain callers fix the
  precondition (approve, wait, use the right identity) and call again.
* Classes avoid importing other swap_* modules so they can be used from the
  lowest layers (ledger books, adapters) without cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class SwapError(Exception):
    """
    Base swap error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'SWAP/BAD_STATE').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "swap error"
    code: str = "SWAP/ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for logs/tooling."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


def _merge(data: Optional[Dict[str, Any]], **extra: Any) -> Optional[Dict[str, Any]]:
    d: Dict[str, Any] = {}
    if data:
        d.update(data)
    for k, v in extra.items():
        if v is None:
            continue
        d.setdefault(k, v.hex() if isinstance(v, (bytes, bytearray)) else v)
    return d or None


class AuthorizationError(SwapError):
    """Wrong caller for the entry point (not a party, or the wrong party)."""

    def __init__(
        self,
        message: str = "unauthorized caller",
        *,
        caller: Optional[bytes] = None,
        op: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="SWAP/UNAUTHORIZED", data=_merge(data, caller=caller, op=op))


class StateError(SwapError):
    """
    Lifecycle precondition not met.

    Raised for calls against a terminated deal as well; a terminated deal never
    silently no-ops.
    """

    def __init__(
        self,
        message: str = "bad state",
        *,
        status: Optional[str] = None,
        op: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="SWAP/BAD_STATE", data=_merge(data, status=status, op=op))


class InvalidArgument(SwapError):
    def __init__(
        self,
        message: str = "invalid argument",
        *,
        arg: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="SWAP/INVALID_ARGUMENT", data=_merge(data, arg=arg))


class TransferError(SwapError):
    """
    Underlying asset move failed (insufficient balance, missing approval,
    rejected by the asset implementation).
    """

    def __init__(
        self,
        message: str = "transfer failed",
        *,
        asset: Optional[bytes] = None,
        amount: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="SWAP/TRANSFER_FAILED", data=_merge(data, asset=asset, amount=amount))


class ReentrancyError(SwapError):
    def __init__(
        self,
        message: str = "reentrant call",
        *,
        op: Optional[str] = None,
        held_by: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="SWAP/REENTRANT", data=_merge(data, op=op, held_by=held_by))


class DealNotFound(SwapError):
    def __init__(
        self,
        message: str = "deal not found",
        *,
        deal_id: Optional[int] = None,
        address: Optional[bytes] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="SWAP/NOT_FOUND", data=_merge(data, deal_id=deal_id, address=address))


# -------- helper utilities ---------------------------------------------------


def error_to_receipt_fields(err: SwapError) -> Dict[str, Any]:
    """
    Map a SwapError to receipt-like fields for tooling output.

    Returns:
        {
          "status": "UNAUTHORIZED" | "BAD_STATE" | "INVALID_ARGUMENT" | ...,
          "error":  {code, message, data?}
        }
    """
    status = err.code.split("/", 1)[-1]
    return {"status": status, "error": err.to_dict()}


__all__ = [
    "SwapError",
    "AuthorizationError",
    "StateError",
    "InvalidArgument",
    "TransferError",
    "ReentrancyError",
    "DealNotFound",
    "error_to_receipt_fields",
]
