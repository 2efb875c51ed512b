from __future__ import annotations

import pytest

from swap_core.config import load_config
from swap_core.errors import DealNotFound, InvalidArgument
from swap_deals.registry import DealFactory
from swap_deals.status import DealOutcome, Outcome
from swap_ledger.assets import FungibleToken
from swap_ledger.ledger import Ledger


def test_ids_are_monotonic_and_lookups_agree(factory, token, alice, bob, mallory) -> None:
    d0 = factory.create_deal(token.address, alice, bob)
    d1 = factory.create_deal(token.address, alice, bob)
    d2 = factory.create_deal(token.address, mallory, bob)

    assert [d.deal_id for d in (d0, d1, d2)] == [0, 1, 2]
    assert len({d0.address, d1.address, d2.address}) == 3
    assert factory.next_id == 3 and len(factory) == 3
    assert factory.lookup(1) == d1.address
    assert factory.contract_ids(2) == d2.address
    assert factory.resolve(d0.address) is d0
    assert factory.resolve("0x" + d0.address.hex()) is d0
    assert factory.instance(2) is d2
    assert [r.deal_id for r in factory] == [0, 1, 2]


def test_unknown_ids_and_addresses(factory) -> None:
    for bad in (0, -1, True, "0"):
        with pytest.raises(DealNotFound):
            factory.lookup(bad)
    with pytest.raises(DealNotFound):
        factory.resolve(b"\x12" * 20)


def test_predicted_address_matches_created(factory, token, alice, bob) -> None:
    predicted = factory.predict_address(token.address, alice, bob)
    assert factory.create_deal(token.address, alice, bob).address == predicted
    assert factory.predict_address(token.address, alice, bob, 0) == predicted
    assert factory.predict_address(token.address, alice, bob) != predicted


def test_record_and_notification(ledger, factory, token, alice, bob) -> None:
    deal = factory.create_deal(token.address, alice, bob, 10, 20)
    rec = factory.record(0)
    assert rec.address == deal.address
    assert (rec.asset, rec.party_a, rec.party_b) == (token.address, alice, bob)
    assert rec.created_at == ledger.now()
    assert rec.to_dict()["deal_id"] == 0

    (ev,) = ledger.sink.events(address=factory.address, name="DealCreated")
    assert ev.args == {
        "deal": deal.address,
        "asset": token.address,
        "party_a": alice,
        "party_b": bob,
        "deal_id": 0,
    }


def test_default_offsets_come_from_config(ledger, factory, token, alice, bob) -> None:
    deal = factory.create_deal(token.address, alice, bob)
    assert deal.window.deposit_deadline == ledger.now() + 86_400
    assert deal.window.signing_deadline == ledger.now() + 2 * 86_400


def test_creation_moves_nothing(ledger, factory, token, alice, bob) -> None:
    deal = factory.create_deal(token.address, alice, bob)
    assert deal.balance_native() == 0 and deal.balance_asset() == 0
    assert ledger.native.balance_of(alice) == 1_000
    assert deal.outcome is DealOutcome.OPEN


@pytest.mark.parametrize("which", ["asset", "party_a", "party_b"])
def test_null_or_malformed_inputs(factory, token, alice, bob, which) -> None:
    args = {"asset": token.address, "party_a": alice, "party_b": bob}
    args[which] = b"\x00" * 20
    with pytest.raises(InvalidArgument):
        factory.create_deal(**args)
    args[which] = b"\x01" * 3
    with pytest.raises(InvalidArgument):
        factory.create_deal(**args)
    assert len(factory) == 0


def test_unregistered_asset_rejected(factory, alice, bob) -> None:
    with pytest.raises(InvalidArgument):
        factory.create_deal(b"\x42" * 20, alice, bob)


def test_negative_offsets_rejected(factory, token, alice, bob) -> None:
    with pytest.raises(InvalidArgument):
        factory.create_deal(token.address, alice, bob, -1, 0)
    assert factory.next_id == 0


def test_self_dealing_rejected_by_default(factory, token, alice) -> None:
    with pytest.raises(InvalidArgument):
        factory.create_deal(token.address, alice, alice)


def test_self_dealing_when_allowed_runs_both_roles(addr) -> None:
    ledger = Ledger(load_config(allow_self_dealing=True))
    token = FungibleToken(ledger, addr("token"), "TKN")
    factory = DealFactory(ledger)
    solo = addr("solo")
    ledger.native.mint(solo, 10)
    token.mint(solo, 100)
    token.approve(solo, factory.predict_address(token.address, solo, solo), 100)

    deal = factory.create_deal(token.address, solo, solo)
    deal.deposit_native(solo, 10)
    deal.deposit_asset(solo, 100)
    deal.sign(solo)
    deal.sign(solo)
    assert deal.withdraw(solo).outcome is Outcome.PAID
    assert deal.withdraw(solo).outcome is Outcome.PAID_AND_TERMINATED
    assert ledger.native.balance_of(solo) == 10
    assert token.balance_of(solo) == 100


def test_list_page(factory, token, alice, bob) -> None:
    for _ in range(5):
        factory.create_deal(token.address, alice, bob)
    page, cursor = factory.list_page(0, 2)
    assert [r.deal_id for r in page] == [0, 1] and cursor == 2
    page, cursor = factory.list_page(cursor, 10)
    assert [r.deal_id for r in page] == [2, 3, 4] and cursor is None
    with pytest.raises(InvalidArgument):
        factory.list_page(0, 0)


def test_terminated_deals_stay_registered(factory, token, alice, bob) -> None:
    deal = factory.create_deal(token.address, alice, bob)
    token.approve(bob, deal.address, 1)
    deal.deposit_native(alice, 1)
    deal.rescind(alice)
    assert factory.resolve(deal.address).terminated
    assert factory.lookup(0) == deal.address


def test_creation_reverted_by_enclosing_checkpoint_leaves_no_record(ledger, factory, token, alice, bob) -> None:
    with pytest.raises(RuntimeError):
        with ledger.checkpoint():
            lost = factory.create_deal(token.address, alice, bob)
            raise RuntimeError("enclosing call failed")

    assert len(factory) == 0 and factory.next_id == 0
    assert list(factory) == []
    assert ledger.sink.events(address=factory.address, name="DealCreated") == []
    with pytest.raises(DealNotFound):
        factory.resolve(lost.address)
    with pytest.raises(DealNotFound):
        factory.lookup(0)

    again = factory.create_deal(token.address, alice, bob)
    assert again.deal_id == 0 and again.address == lost.address
    assert factory.resolve(again.address) is again
    assert len(factory) == len(ledger.sink.events(address=factory.address, name="DealCreated")) == 1
