"""
swap_deals.registry
===================

Factory and registry for deal instances.

The factory hands out deal ids from a monotonic counter starting at 0, derives
each deal's address from `(party_a, party_b, asset, deal_id)` and keeps an
append-only table of records in the ledger journal. A committed record is never
removed or reused: a terminated deal stays resolvable by id and address. A
creation rolled back by an enclosing checkpoint leaves no record, no
notification and no consumed id.

API
---
- create_deal(asset, party_a, party_b, deposit_offset=None, signing_offset=None) -> DealInstance
- lookup(deal_id) -> address            (contract_ids is an alias)
- resolve(address) -> DealInstance
- record(deal_id) -> RegistryRecord
- predict_address(asset, party_a, party_b, deal_id=None) -> address
- list_page(start, limit) -> (records, next_cursor)
- next_id, len(), iteration over records in id order

Events (emitted from the factory address)
-----------------------------------------
- DealCreated {deal, asset, party_a, party_b, deal_id}

Errors
------
- InvalidArgument  : bad/unknown asset, bad party address, self-dealing, bad offsets
- DealNotFound     : unknown id or address
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from swap_core import logging as slog
from swap_core.encoding import to_bytes
from swap_core.errors import DealNotFound, InvalidArgument, StateError
from swap_core.hash import tagged_hash
from swap_ledger.ledger import Ledger

from .address import derive_deal_address
from .instance import DealInstance
from .window import TimeWindow

log = slog.get_logger(__name__)

FACTORY_TAG = b"swapdeal/factory/v1"
MAX_PAGE = 1000

_BOOK = "registry"
_COUNT = "count"
_ID = "id"
_ADDR = "addr"


@dataclass(frozen=True)
class RegistryRecord:
    deal_id: int
    address: bytes
    asset: bytes
    party_a: bytes
    party_b: bytes
    created_at: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deal_id": self.deal_id,
            "address": "0x" + self.address.hex(),
            "asset": "0x" + self.asset.hex(),
            "party_a": "0x" + self.party_a.hex(),
            "party_b": "0x" + self.party_b.hex(),
            "created_at": self.created_at,
        }


class DealFactory:
    """
    Creates deals on one ledger and indexes them by id and address.

    Registry rows live in the ledger journal (`registry` book, keys prefixed
    with the factory address), so a creation made inside a checkpoint that
    later reverts disappears together with its DealCreated notification and
    its id is handed out again.
    """

    def __init__(self, ledger: Ledger, *, address: Optional[bytes] = None) -> None:
        self.ledger = ledger
        n = ledger.config.address_len
        self.address = ledger.address(address, "factory") if address is not None else tagged_hash(FACTORY_TAG, b"")[-n:]

    # -------------------------------------------------------------- storage

    def _get(self, *key: Any) -> Any:
        return self.ledger.journal.get(_BOOK, (self.address,) + key)

    def _put(self, value: Any, *key: Any) -> None:
        self.ledger.journal.set(_BOOK, (self.address,) + key, value)

    def _row(self, deal_id: int) -> Tuple[RegistryRecord, DealInstance]:
        if not isinstance(deal_id, int) or isinstance(deal_id, bool) or not 0 <= deal_id < len(self):
            raise DealNotFound("no deal with that id", deal_id=deal_id if isinstance(deal_id, int) else None)
        return self._get(_ID, deal_id)

    # ------------------------------------------------------------- creation

    @property
    def next_id(self) -> int:
        return len(self)

    def predict_address(self, asset: Any, party_a: Any, party_b: Any, deal_id: Optional[int] = None) -> bytes:
        """Address the deal will get; defaults to the id the next creation receives."""
        return derive_deal_address(
            party_a,
            party_b,
            asset,
            self.next_id if deal_id is None else deal_id,
            address_len=self.ledger.config.address_len,
        )

    def create_deal(
        self,
        asset: Any,
        party_a: Any,
        party_b: Any,
        deposit_offset: Optional[int] = None,
        signing_offset: Optional[int] = None,
    ) -> DealInstance:
        cfg = self.ledger.config
        asset_addr = self.ledger.address(asset, "asset")
        if not self.ledger.has_token(asset_addr):
            raise InvalidArgument("asset is not a registered token", arg="asset")
        a = self.ledger.address(party_a, "party_a")
        b = self.ledger.address(party_b, "party_b")
        if a == b and not cfg.allow_self_dealing:
            raise InvalidArgument("party_a and party_b must differ", arg="party_b")

        window = TimeWindow.open(
            self.ledger.now(),
            cfg.deposit_window_secs if deposit_offset is None else deposit_offset,
            cfg.signing_window_secs if signing_offset is None else signing_offset,
        )

        deal_id = self.next_id
        addr = self.predict_address(asset_addr, a, b, deal_id)
        if self._get(_ADDR, addr) is not None:
            raise StateError("derived deal address already in use", op="create_deal")

        deal = DealInstance(
            self.ledger,
            deal_id=deal_id,
            address=addr,
            asset=self.ledger.token(asset_addr),
            party_a=a,
            party_b=b,
            window=window,
        )
        rec = RegistryRecord(deal_id, addr, asset_addr, a, b, window.created_at)
        with self.ledger.checkpoint():
            self._put((rec, deal), _ID, deal_id)
            self._put(deal_id, _ADDR, addr)
            self._put(deal_id + 1, _COUNT)
            self.ledger.emit(self.address, "DealCreated", deal=addr, asset=asset_addr, party_a=a, party_b=b, deal_id=deal_id)

        log.info("deal created", extra={"deal_id": deal_id, "deal": addr, "asset": asset_addr})
        return deal

    # --------------------------------------------------------------- lookup

    def lookup(self, deal_id: int) -> bytes:
        return self.record(deal_id).address

    contract_ids = lookup

    def record(self, deal_id: int) -> RegistryRecord:
        return self._row(deal_id)[0]

    def instance(self, deal_id: int) -> DealInstance:
        return self._row(deal_id)[1]

    def resolve(self, address: Any) -> DealInstance:
        addr = to_bytes(address)
        deal_id = self._get(_ADDR, addr)
        if deal_id is None:
            raise DealNotFound("no deal at that address", address=addr)
        return self._get(_ID, deal_id)[1]

    def list_page(self, start: int = 0, limit: int = 100) -> Tuple[List[RegistryRecord], Optional[int]]:
        """Records from `start` (inclusive); cursor is None when exhausted."""
        if start < 0 or limit <= 0:
            raise InvalidArgument("bad page bounds", arg="limit" if limit <= 0 else "start")
        total = len(self)
        end = min(start + min(limit, MAX_PAGE), total)
        page = [self._get(_ID, i)[0] for i in range(start, end)]
        return page, (end if end < total else None)

    def __len__(self) -> int:
        return self._get(_COUNT) or 0

    def __iter__(self) -> Iterator[RegistryRecord]:
        return iter([self._get(_ID, i)[0] for i in range(len(self))])


__all__ = ["DealFactory", "RegistryRecord", "FACTORY_TAG"]
