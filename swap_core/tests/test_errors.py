from __future__ import annotations

import pytest

from swap_core.errors import (
    AuthorizationError,
    DealNotFound,
    InvalidArgument,
    ReentrancyError,
    StateError,
    SwapError,
    TransferError,
    error_to_receipt_fields,
)


@pytest.mark.parametrize(
    "err, code",
    [
        (AuthorizationError(), "SWAP/UNAUTHORIZED"),
        (StateError(), "SWAP/BAD_STATE"),
        (InvalidArgument(), "SWAP/INVALID_ARGUMENT"),
        (TransferError(), "SWAP/TRANSFER_FAILED"),
        (ReentrancyError(), "SWAP/REENTRANT"),
        (DealNotFound(), "SWAP/NOT_FOUND"),
    ],
)
def test_codes_and_base_class(err: SwapError, code: str) -> None:
    assert isinstance(err, SwapError)
    assert isinstance(err, Exception)
    assert err.code == code
    assert err.to_dict()["code"] == code


def test_extras_are_merged_and_bytes_hexed() -> None:
    err = AuthorizationError("nope", caller=b"\x01\x02", op="sign", data={"hint": "x"})
    assert err.data == {"hint": "x", "caller": "0102", "op": "sign"}
    assert "SWAP/UNAUTHORIZED" in str(err)


def test_none_extras_are_dropped() -> None:
    err = StateError("bad")
    assert err.data is None
    assert "data" not in err.to_dict()


def test_transfer_error_keeps_explicit_data_over_extras() -> None:
    err = TransferError("low", asset=b"\xaa", amount=5, data={"amount": 7})
    assert err.data["amount"] == 7
    assert err.data["asset"] == "aa"


def test_error_to_receipt_fields() -> None:
    out = error_to_receipt_fields(InvalidArgument("zero", arg="amount"))
    assert out["status"] == "INVALID_ARGUMENT"
    assert out["error"] == {
        "code": "SWAP/INVALID_ARGUMENT",
        "message": "zero",
        "data": {"arg": "amount"},
    }


def test_raises_like_an_exception() -> None:
    with pytest.raises(StateError) as ei:
        raise StateError("terminated", status="REFUNDED", op="sign")
    assert ei.value.data["status"] == "REFUNDED"
