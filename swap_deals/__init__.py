"""
swap_deals — two-party conditional asset exchange.

- status   : PartyStatus / DealOutcome / CallResult
- window   : TimeWindow and the lazy expiry predicate
- guard    : per-deal reentrancy latch
- address  : deterministic deal address derivation
- instance : the deal state machine
- registry : DealFactory (create, lookup, resolve)
"""

from __future__ import annotations

from .address import derive_deal_address
from .instance import DealInstance
from .registry import DealFactory, RegistryRecord
from .status import CallResult, DealOutcome, Outcome, PartyRecord, PartyStatus, Refund
from .window import TimeWindow, is_expired

__all__ = [
    "CallResult",
    "DealFactory",
    "DealInstance",
    "DealOutcome",
    "Outcome",
    "PartyRecord",
    "PartyStatus",
    "Refund",
    "RegistryRecord",
    "TimeWindow",
    "derive_deal_address",
    "is_expired",
]
