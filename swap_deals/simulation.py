"""
In-memory walkthroughs of a deal on a fresh ledger.

Used by the `swap-deal simulate` command and handy in a REPL:

    >>> from swap_deals.simulation import run_scenario
    >>> report = run_scenario("exchange")
    >>> report["outcome"]
    'EXCHANGED'
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

from swap_core.config import SwapConfig, load_config
from swap_core.hash import tagged_hash
from swap_ledger.assets import FungibleToken
from swap_ledger.ledger import Ledger

from .instance import DealInstance
from .registry import DealFactory
from .status import CallResult

SCENARIOS = ("exchange", "expire", "rescind")


def demo_address(label: str, *, length: int = 20) -> bytes:
    """Stable throwaway address for a label."""
    return tagged_hash(b"swapdeal/demo", label.encode("utf-8"))[-length:]


def _exchange(deal: DealInstance, a: bytes, b: bytes, native_amount: int, asset_amount: int) -> List[CallResult]:
    return [
        deal.deposit_native(a, native_amount),
        deal.deposit_asset(b, asset_amount),
        deal.sign(a),
        deal.sign(b),
        deal.withdraw(a),
        deal.withdraw(b),
    ]


def _expire(deal: DealInstance, a: bytes, b: bytes, native_amount: int, asset_amount: int) -> List[CallResult]:
    out = [deal.deposit_native(a, native_amount)]
    deal.ledger.set_time(deal.window.deposit_deadline + 1)
    out.append(deal.sign(a))
    return out


def _rescind(deal: DealInstance, a: bytes, b: bytes, native_amount: int, asset_amount: int) -> List[CallResult]:
    return [
        deal.deposit_native(a, native_amount),
        deal.deposit_asset(b, asset_amount),
        deal.rescind(a),
    ]


_RUNNERS: Dict[str, Callable[..., List[CallResult]]] = {
    "exchange": _exchange,
    "expire": _expire,
    "rescind": _rescind,
}


def setup(config: Optional[SwapConfig] = None, *, native_amount: int = 10, asset_amount: int = 100) -> Tuple[Ledger, FungibleToken, DealFactory, bytes, bytes]:
    """Fresh ledger with a token, a factory and two funded parties."""
    cfg = config or load_config()
    n = cfg.address_len
    ledger = Ledger(cfg)
    token = FungibleToken(ledger, demo_address("token", length=n), "DEMO")
    factory = DealFactory(ledger)
    a = demo_address("party-a", length=n)
    b = demo_address("party-b", length=n)
    ledger.native.mint(a, native_amount)
    token.mint(b, asset_amount)
    return ledger, token, factory, a, b


def run_scenario(name: str, *, native_amount: int = 10, asset_amount: int = 100, config: Optional[SwapConfig] = None) -> Dict[str, Any]:
    if name not in _RUNNERS:
        raise ValueError(f"unknown scenario {name!r}; choose from {', '.join(SCENARIOS)}")
    ledger, token, factory, a, b = setup(config, native_amount=native_amount, asset_amount=asset_amount)

    predicted = factory.predict_address(token.address, a, b)
    token.approve(b, predicted, asset_amount)
    deal = factory.create_deal(token.address, a, b)

    results = _RUNNERS[name](deal, a, b, native_amount, asset_amount)

    def _balances(who: bytes) -> Dict[str, int]:
        return {"native": ledger.native.balance_of(who), "asset": token.balance_of(who)}

    return {
        "scenario": name,
        "deal": deal.state(),
        "outcome": deal.outcome.value,
        "calls": [r.to_dict() for r in results],
        "balances": {
            "party_a": _balances(a),
            "party_b": _balances(b),
            "deal": _balances(deal.address),
        },
        "events": [ev.to_dict() for ev in ledger.sink.events()],
    }


__all__ = ["SCENARIOS", "demo_address", "run_scenario", "setup"]
