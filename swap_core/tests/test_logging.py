from __future__ import annotations

import io
import json
import logging

import pytest

from swap_core import logging as slog
from swap_core.config import load_config


@pytest.fixture(autouse=True)
def _reset_context():
    slog.clear_context()
    yield
    slog.clear_context()
    for name in ("swap_core", "swap_ledger", "swap_deals"):
        lg = logging.getLogger(name)
        for h in list(lg.handlers):
            lg.removeHandler(h)
        lg.setLevel(logging.NOTSET)


def _lines(buf: io.StringIO):
    return [json.loads(line) for line in buf.getvalue().splitlines() if line.strip()]


def test_json_lines_carry_context_and_extras() -> None:
    buf = io.StringIO()
    slog.configure(json=True, level="DEBUG", stream=buf)
    log = slog.get_logger("swap_deals.instance")

    with slog.trace_scope("t-1"), slog.bound(deal=b"\xab\xcd", op="sign"):
        log.info("party signed", extra={"party": b"\x01", "amount": 3})

    (rec,) = _lines(buf)
    assert rec["msg"] == "party signed"
    assert rec["level"] == "INFO"
    assert rec["logger"] == "swap_deals.instance"
    assert rec["trace_id"] == "t-1"
    assert rec["deal"] == "0xabcd"
    assert rec["op"] == "sign"
    assert rec["party"] == "0x01"
    assert rec["amount"] == 3


def test_scopes_restore_previous_context() -> None:
    slog.bind(component="registry")
    with slog.bound(op="withdraw"):
        assert slog.context() == {"component": "registry", "op": "withdraw"}
    assert slog.context() == {"component": "registry"}
    slog.unbind("component")
    assert slog.context() == {}


def test_level_filtering() -> None:
    buf = io.StringIO()
    slog.configure(json=True, level="WARNING", stream=buf)
    log = slog.get_logger("swap_ledger.ledger")
    log.info("hidden")
    log.warning("shown")
    assert [r["msg"] for r in _lines(buf)] == ["shown"]


def test_text_formatter_one_liner() -> None:
    buf = io.StringIO()
    slog.configure(json=False, level="INFO", stream=buf)
    with slog.bound(deal="0x01"):
        slog.get_logger("swap_deals").info("deal refunded", extra={"native_returned": 10})
    line = buf.getvalue().strip()
    assert "| INFO  | swap_deals |" in line
    assert "deal=0x01" in line
    assert "native_returned=10" in line
    assert line.endswith("| deal refunded")


def test_configure_from_config_honors_format(monkeypatch: pytest.MonkeyPatch) -> None:
    buf = io.StringIO()
    monkeypatch.setattr("sys.stderr", buf)
    slog.configure_from_config(load_config(log_format="json", log_level="DEBUG"))
    slog.get_logger("swap_core.x").debug("hello")
    assert _lines(buf)[0]["msg"] == "hello"


def test_with_fields_adapter() -> None:
    buf = io.StringIO()
    slog.configure(json=True, level="INFO", stream=buf)
    log = slog.with_fields(slog.get_logger("swap_core"), component="cli")
    log.info("ready", extra={"n": 1})
    rec = _lines(buf)[0]
    assert rec["component"] == "cli"
    assert rec["n"] == 1
