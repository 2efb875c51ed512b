"""
swap_ledger — the sequential host ledger deals run on.

Submodules:
- journal : undo-log books with nested checkpoints
- events  : journaled notification sink
- ledger  : balances, allowances, clock
- assets  : native currency and fungible token adapters
"""

from __future__ import annotations

from .assets import AssetAdapter, FungibleToken, NativeCurrency
from .events import Event, EventSink
from .journal import Journal
from .ledger import NATIVE_ASSET, Ledger

__all__ = [
    "AssetAdapter",
    "Event",
    "EventSink",
    "FungibleToken",
    "Journal",
    "Ledger",
    "NativeCurrency",
    "NATIVE_ASSET",
]
