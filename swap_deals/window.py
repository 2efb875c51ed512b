"""
Deal time windows and the lazy expiry predicate.

There is no scheduler. Deadlines are compared against the ledger clock at the
top of each mutating call; a deal nobody calls into after its deadline simply
keeps its balances until the next call runs the refund path.
"""

from __future__ import annotations

from dataclasses import dataclass

from swap_core.errors import InvalidArgument

from .status import PartyStatus


@dataclass(frozen=True)
class TimeWindow:
    created_at: int
    deposit_deadline: int
    signing_deadline: int

    @classmethod
    def open(cls, now: int, deposit_offset: int, signing_offset: int) -> "TimeWindow":
        for name, v in (("deposit_offset", deposit_offset), ("signing_offset", signing_offset)):
            if not isinstance(v, int) or isinstance(v, bool) or v < 0:
                raise InvalidArgument(f"{name} must be a non-negative int", arg=name)
        deposit_deadline = now + deposit_offset
        return cls(
            created_at=now,
            deposit_deadline=deposit_deadline,
            signing_deadline=deposit_deadline + signing_offset,
        )


def is_expired(window: TimeWindow, now: int, status_a: PartyStatus, status_b: PartyStatus) -> bool:
    """
    True when the deal can no longer close: a deposit is missing past the
    deposit deadline, or a signature is missing past the signing deadline.
    Never true once both parties have signed.
    """
    statuses = (status_a, status_b)
    if all(s.has_signed for s in statuses):
        return False
    if now > window.deposit_deadline and PartyStatus.EMPTY in statuses:
        return True
    if now > window.signing_deadline and any(
        s in (PartyStatus.EMPTY, PartyStatus.DEPOSITED) for s in statuses
    ):
        return True
    return False


__all__ = ["TimeWindow", "is_expired"]
