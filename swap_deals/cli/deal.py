from __future__ import annotations

"""
swap_deals.cli.deal
-------------------

Operator tooling for two-party swap deals.

- `address`  : predict a deal's address before it is created, so the asset
               side can approve it as spender ahead of time.
- `simulate` : run a complete deal on a throwaway in-memory ledger and print
               the resulting balances and notification log.
- `config`   : show the effective configuration (env + defaults).

Examples
--------
# Address of deal #0 between two parties for a given token
swap-deal address 0xaaaa...aa 0xbbbb...bb 0xcccc...cc 0

# Walk through a full exchange, JSON output
swap-deal simulate --scenario exchange --json

# What happens when B never shows up
swap-deal simulate --scenario expire
"""

import json
from typing import Any, Dict, Optional

import typer

from swap_core import logging as slog
from swap_core.config import load_config
from swap_core.errors import SwapError, error_to_receipt_fields
from swap_deals.address import derive_deal_address
from swap_deals.simulation import SCENARIOS, run_scenario

app = typer.Typer(
    name="swap-deal",
    add_completion=False,
    no_args_is_help=True,
    help="Predict, inspect and simulate two-party swap deals.",
)


# -------------------- utils --------------------


def _fail(err: SwapError) -> None:
    typer.echo(json.dumps(error_to_receipt_fields(err), sort_keys=True), err=True)
    raise typer.Exit(2)


def _short(h: str, n: int = 14) -> str:
    if len(h) <= n:
        return h
    return h[: n - 1] + "…"


def _print_report(report: Dict[str, Any]) -> None:
    typer.echo(f"scenario : {report['scenario']}")
    typer.echo(f"deal     : {report['deal']['address']} (id {report['deal']['deal_id']})")
    typer.echo(f"outcome  : {report['outcome']}")
    typer.echo("")
    typer.echo("calls:")
    for c in report["calls"]:
        line = f"  {c['outcome']:<20} {_short(c['party'])}  amount={c['amount']}"
        if "refund" in c:
            r = c["refund"]
            line += f"  refund(native={r['native_returned']}, asset={r['asset_returned']})"
        typer.echo(line)
    typer.echo("")
    typer.echo(f"{'holder':<10} {'native':>10} {'asset':>10}")
    for who, bal in report["balances"].items():
        typer.echo(f"{who:<10} {bal['native']:>10} {bal['asset']:>10}")
    typer.echo("")
    typer.echo("events:")
    for ev in report["events"]:
        args = " ".join(f"{k}={_short(str(v)) if isinstance(v, str) else v}" for k, v in ev["args"].items())
        typer.echo(f"  #{ev['seq']:<3} {ev['name']:<14} {args}")


# -------------------- commands --------------------


@app.command("address")
def address_cmd(
    party_a: str = typer.Argument(..., help="Party A address (hex)."),
    party_b: str = typer.Argument(..., help="Party B address (hex)."),
    asset: str = typer.Argument(..., help="Asset token address (hex)."),
    deal_id: int = typer.Argument(..., min=0, help="Registry id the deal will receive."),
    address_len: Optional[int] = typer.Option(None, "--address-len", min=8, max=32, help="Address width in bytes."),
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Print the deterministic address of a (future) deal."""
    try:
        addr = derive_deal_address(party_a, party_b, asset, deal_id, address_len=address_len)
    except SwapError as e:
        _fail(e)
        return
    if json_out:
        typer.echo(json.dumps({"deal_id": deal_id, "address": "0x" + addr.hex()}, sort_keys=True))
    else:
        typer.echo("0x" + addr.hex())


@app.command("simulate")
def simulate_cmd(
    scenario: str = typer.Option("exchange", "--scenario", "-s", help=f"One of: {', '.join(SCENARIOS)}."),
    native_amount: int = typer.Option(10, "--native", min=1, help="Native units party A escrows."),
    asset_amount: int = typer.Option(100, "--asset", min=1, help="Asset units party B escrows."),
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Run a deal end to end on an in-memory ledger."""
    if scenario not in SCENARIOS:
        typer.echo(f"unknown scenario {scenario!r}; choose from {', '.join(SCENARIOS)}", err=True)
        raise typer.Exit(2)
    try:
        with slog.trace_scope():
            report = run_scenario(scenario, native_amount=native_amount, asset_amount=asset_amount)
    except SwapError as e:
        _fail(e)
        return
    if json_out:
        typer.echo(json.dumps(report, indent=2, sort_keys=True))
    else:
        _print_report(report)


@app.command("config")
def config_cmd() -> None:
    """Show the effective configuration."""
    typer.echo(json.dumps(load_config().as_dict(), indent=2, sort_keys=True))


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level for this run (stderr)."),
) -> None:
    slog.configure_from_config(load_config(log_level=log_level))


if __name__ == "__main__":  # pragma: no cover
    app()
