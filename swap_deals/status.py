"""
swap_deals.status — per-party lifecycle, deal outcome and tagged call results.

Per-party status machine
------------------------

    EMPTY ──deposit──▶ DEPOSITED ──sign──▶ SIGNED ──withdraw──▶ SETTLED
      │                   │                  │
      └──────── refund ───┴───── refund ─────┴──▶ REFUNDED

SETTLED and REFUNDED are terminal. A deal whose parties are both SETTLED has
outcome EXCHANGED; a deal that ran the refund path has outcome REFUNDED. The two
are mutually exclusive.

`PartyRecord.flags` projects the status onto the legacy
`(deposited, signed, rescinded)` triple for tooling that still speaks it.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from swap_core.errors import StateError


class PartyStatus(str, enum.Enum):
    EMPTY = "EMPTY"
    DEPOSITED = "DEPOSITED"
    SIGNED = "SIGNED"
    SETTLED = "SETTLED"
    REFUNDED = "REFUNDED"

    @property
    def terminal(self) -> bool:
        return self in (PartyStatus.SETTLED, PartyStatus.REFUNDED)

    @property
    def has_signed(self) -> bool:
        return self in (PartyStatus.SIGNED, PartyStatus.SETTLED)


_TRANSITIONS: Mapping[PartyStatus, FrozenSet[PartyStatus]] = {
    PartyStatus.EMPTY: frozenset({PartyStatus.DEPOSITED, PartyStatus.REFUNDED}),
    PartyStatus.DEPOSITED: frozenset({PartyStatus.SIGNED, PartyStatus.REFUNDED}),
    PartyStatus.SIGNED: frozenset({PartyStatus.SETTLED, PartyStatus.REFUNDED}),
    PartyStatus.SETTLED: frozenset(),
    PartyStatus.REFUNDED: frozenset(),
}


def can_transition(src: PartyStatus, dst: PartyStatus) -> bool:
    return dst in _TRANSITIONS[src]


class DealOutcome(str, enum.Enum):
    OPEN = "OPEN"
    EXCHANGED = "EXCHANGED"
    REFUNDED = "REFUNDED"


@dataclass(frozen=True)
class PartyRecord:
    """
    One side of a deal, as stored in the ledger journal. Immutable: `advance`
    returns the successor record and leaves this one untouched.
    """

    address: bytes
    status: PartyStatus = PartyStatus.EMPTY
    deposited_amount: int = 0
    # status held just before the refund path ran (legacy projection only)
    refunded_from: Optional[PartyStatus] = field(default=None, repr=False)

    def advance(self, dst: PartyStatus, *, op: str, **changes: Any) -> "PartyRecord":
        if not can_transition(self.status, dst):
            raise StateError(
                f"cannot move party from {self.status.value} to {dst.value}",
                status=self.status.value,
                op=op,
            )
        if dst is PartyStatus.REFUNDED:
            changes["refunded_from"] = self.status
        return replace(self, status=dst, **changes)

    @property
    def flags(self) -> Tuple[bool, bool, bool]:
        """Legacy `(deposited, signed, rescinded)` view."""
        s = self.status
        if s is PartyStatus.REFUNDED:
            prior = self.refunded_from or PartyStatus.EMPTY
            return (prior is not PartyStatus.EMPTY, prior.has_signed, True)
        return (
            s is not PartyStatus.EMPTY,
            s.has_signed,
            s is PartyStatus.SETTLED,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": "0x" + self.address.hex(),
            "status": self.status.value,
            "deposited_amount": self.deposited_amount,
            "flags": list(self.flags),
        }


# ---- call results ------------------------------------------------------------


class Outcome(str, enum.Enum):
    DEPOSITED = "DEPOSITED"
    SIGNED = "SIGNED"
    REFUNDED = "REFUNDED"
    PAID = "PAID"
    PAID_AND_TERMINATED = "PAID_AND_TERMINATED"


@dataclass(frozen=True)
class Refund:
    native_returned: int
    asset_returned: int


@dataclass(frozen=True)
class CallResult:
    """
    What a mutating entry point did.

    `amount` is the value moved for `party` (deposit size or payout); for a
    refund it is 0 and `refund` carries both returned balances.
    """

    outcome: Outcome
    party: bytes
    amount: int = 0
    refund: Optional[Refund] = None

    @property
    def terminated(self) -> bool:
        return self.outcome in (Outcome.REFUNDED, Outcome.PAID_AND_TERMINATED)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "outcome": self.outcome.value,
            "party": "0x" + self.party.hex(),
            "amount": self.amount,
        }
        if self.refund is not None:
            out["refund"] = {
                "native_returned": self.refund.native_returned,
                "asset_returned": self.refund.asset_returned,
            }
        return out


__all__ = [
    "PartyStatus",
    "DealOutcome",
    "PartyRecord",
    "Outcome",
    "Refund",
    "CallResult",
    "can_transition",
]
