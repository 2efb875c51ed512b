from __future__ import annotations

import json
import logging

import pytest
from typer.testing import CliRunner

from swap_deals.address import derive_deal_address
from swap_deals.cli.deal import app

runner = CliRunner()

A = "0x" + "aa" * 20
B = "0x" + "bb" * 20
T = "0x" + "cc" * 20


@pytest.fixture(autouse=True)
def _drop_cli_log_handlers():
    yield
    for name in ("swap_core", "swap_ledger", "swap_deals"):
        lg = logging.getLogger(name)
        for h in list(lg.handlers):
            lg.removeHandler(h)
        lg.setLevel(logging.NOTSET)


def test_address_prints_derived_hex() -> None:
    r = runner.invoke(app, ["address", A, B, T, "3"])
    assert r.exit_code == 0, r.output
    expected = derive_deal_address(A, B, T, 3)
    assert r.stdout.strip() == "0x" + expected.hex()


def test_address_json() -> None:
    r = runner.invoke(app, ["address", A, B, T, "0", "--json"])
    assert r.exit_code == 0, r.output
    assert json.loads(r.stdout) == {"deal_id": 0, "address": "0x" + derive_deal_address(A, B, T, 0).hex()}


def test_address_rejects_bad_party() -> None:
    r = runner.invoke(app, ["address", "0x1234", B, T, "0"])
    assert r.exit_code == 2


@pytest.mark.parametrize(
    "scenario, outcome, a_bal, b_bal",
    [
        ("exchange", "EXCHANGED", {"native": 0, "asset": 100}, {"native": 10, "asset": 0}),
        ("expire", "REFUNDED", {"native": 10, "asset": 0}, {"native": 0, "asset": 100}),
        ("rescind", "REFUNDED", {"native": 10, "asset": 0}, {"native": 0, "asset": 100}),
    ],
)
def test_simulate_json(scenario, outcome, a_bal, b_bal) -> None:
    r = runner.invoke(app, ["simulate", "--scenario", scenario, "--json"])
    assert r.exit_code == 0, r.output
    report = json.loads(r.stdout)
    assert report["outcome"] == outcome
    assert report["balances"]["party_a"] == a_bal
    assert report["balances"]["party_b"] == b_bal
    assert report["balances"]["deal"] == {"native": 0, "asset": 0}
    assert any(ev["name"] == "DealCreated" for ev in report["events"])


def test_simulate_text_and_amounts() -> None:
    r = runner.invoke(app, ["simulate", "--native", "3", "--asset", "7"])
    assert r.exit_code == 0, r.output
    assert "outcome  : EXCHANGED" in r.stdout
    assert "PAID_AND_TERMINATED" in r.stdout


def test_simulate_unknown_scenario() -> None:
    r = runner.invoke(app, ["simulate", "--scenario", "nope"])
    assert r.exit_code == 2


def test_config_command() -> None:
    r = runner.invoke(app, ["config"])
    assert r.exit_code == 0, r.output
    assert json.loads(r.stdout)["address_len"] == 20
