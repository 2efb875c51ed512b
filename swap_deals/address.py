"""
Deterministic deal addresses.

    address = sha3_256(b"swapdeal/deal/v1" || canonical_cbor([party_a, party_b, asset, deal_id]))[-address_len:]

The function is pure and needs no ledger, so a counterparty can compute the
address of a deal before the creation call lands and pre-approve it as the
spender of its asset deposit.
"""

from __future__ import annotations

from typing import Optional

from swap_core.config import load_config
from swap_core.encoding import BytesLike, canonical_dumps, to_address
from swap_core.errors import InvalidArgument
from swap_core.hash import sha3_256

DEAL_ADDRESS_TAG = b"swapdeal/deal/v1"


def deal_salt(party_a: bytes, party_b: bytes, asset: bytes, deal_id: int) -> bytes:
    """Canonical CBOR preimage of the derivation (without the domain tag)."""
    if not isinstance(deal_id, int) or isinstance(deal_id, bool) or deal_id < 0:
        raise InvalidArgument("deal_id must be a non-negative int", arg="deal_id")
    return canonical_dumps([bytes(party_a), bytes(party_b), bytes(asset), deal_id])


def derive_deal_address(
    party_a: BytesLike,
    party_b: BytesLike,
    asset: BytesLike,
    deal_id: int,
    *,
    address_len: Optional[int] = None,
) -> bytes:
    n = address_len if address_len is not None else load_config().address_len
    a = to_address(party_a, length=n, name="party_a")
    b = to_address(party_b, length=n, name="party_b")
    t = to_address(asset, length=n, name="asset")
    digest = sha3_256(DEAL_ADDRESS_TAG + deal_salt(a, b, t, deal_id))
    return digest[-n:]


__all__ = ["DEAL_ADDRESS_TAG", "deal_salt", "derive_deal_address"]
