"""
Shared pytest fixtures:
- Clean SWAPDEAL_* environment and config cache per test
- Deterministic addresses (sha3 of a label)
- A ledger with a registered token, two funded parties and an outsider
- A factory and a fresh deal with party B's approval already in place
"""
from __future__ import annotations

import os
from typing import Callable

import pytest

from swap_core.config import SwapConfig, load_config, reset_config_cache
from swap_core.hash import sha3_256
from swap_deals.instance import DealInstance
from swap_deals.registry import DealFactory
from swap_ledger.assets import FungibleToken
from swap_ledger.ledger import Ledger

START_TIME = 1_000
DEPOSIT_OFFSET = 100
SIGNING_OFFSET = 100
NATIVE_FUNDS = 1_000
ASSET_FUNDS = 1_000


def det_address(label: str, length: int = 20) -> bytes:
    return sha3_256(b"swapdeal-test/" + label.encode())[:length]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    for k in list(os.environ):
        if k.startswith("SWAPDEAL_"):
            monkeypatch.delenv(k, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture
def cfg() -> SwapConfig:
    return load_config()


@pytest.fixture
def addr() -> Callable[[str], bytes]:
    return det_address


@pytest.fixture
def ledger(cfg: SwapConfig) -> Ledger:
    return Ledger(cfg, timestamp=START_TIME)


@pytest.fixture
def token(ledger: Ledger) -> FungibleToken:
    return FungibleToken(ledger, det_address("token"), "TKN")


@pytest.fixture
def alice(ledger: Ledger) -> bytes:
    a = det_address("alice")
    ledger.native.mint(a, NATIVE_FUNDS)
    return a


@pytest.fixture
def bob(token: FungibleToken) -> bytes:
    b = det_address("bob")
    token.mint(b, ASSET_FUNDS)
    return b


@pytest.fixture
def mallory(ledger: Ledger, token: FungibleToken) -> bytes:
    m = det_address("mallory")
    ledger.native.mint(m, NATIVE_FUNDS)
    token.mint(m, ASSET_FUNDS)
    return m


@pytest.fixture
def factory(ledger: Ledger) -> DealFactory:
    return DealFactory(ledger)


@pytest.fixture
def deal(factory: DealFactory, token: FungibleToken, alice: bytes, bob: bytes) -> DealInstance:
    token.approve(bob, factory.predict_address(token.address, alice, bob), ASSET_FUNDS)
    return factory.create_deal(token.address, alice, bob, DEPOSIT_OFFSET, SIGNING_OFFSET)


@pytest.fixture
def both_signed(deal: DealInstance, alice: bytes, bob: bytes) -> DealInstance:
    deal.deposit_native(alice, 10)
    deal.deposit_asset(bob, 100)
    deal.sign(alice)
    deal.sign(bob)
    return deal
