from __future__ import annotations

import hashlib

import pytest

from swap_core.encoding import canonical_dumps, canonical_loads, to_address, to_bytes, to_hex
from swap_core.errors import InvalidArgument
from swap_core.hash import sha3_256, tagged_hash


def test_to_bytes_accepts_hex_and_bytes_like() -> None:
    assert to_bytes("0xdeadbeef") == b"\xde\xad\xbe\xef"
    assert to_bytes("DEADBEEF") == b"\xde\xad\xbe\xef"
    assert to_bytes(bytearray(b"\x01")) == b"\x01"
    assert to_bytes(memoryview(b"\x02")) == b"\x02"
    assert to_hex(b"\x00\xff") == "0x00ff"


@pytest.mark.parametrize("bad", ["0xabc", "zz", 5, None])
def test_to_bytes_rejects_garbage(bad) -> None:
    with pytest.raises(InvalidArgument):
        to_bytes(bad)


def test_to_address_enforces_width_and_non_null() -> None:
    good = b"\x11" * 20
    assert to_address(good, length=20) == good
    assert to_address("0x" + "11" * 20, length=20) == good

    with pytest.raises(InvalidArgument) as ei:
        to_address(b"\x11" * 19, length=20, name="party_a")
    assert ei.value.data == {"arg": "party_a"}

    with pytest.raises(InvalidArgument):
        to_address(b"\x00" * 20, length=20)
    with pytest.raises(InvalidArgument):
        to_address(None, length=20)


def test_canonical_cbor_is_order_independent_for_maps() -> None:
    a = canonical_dumps({"b": 1, "a": [b"\x01", 2]})
    b = canonical_dumps({"a": [b"\x01", 2], "b": 1})
    assert a == b
    assert canonical_loads(a) == {"a": [b"\x01", 2], "b": 1}


def test_canonical_cbor_rejects_floats() -> None:
    with pytest.raises(InvalidArgument):
        canonical_dumps([1, {"x": 1.5}])


def test_sha3_and_tagged_hash() -> None:
    assert sha3_256(b"abc") == hashlib.sha3_256(b"abc").digest()
    t1 = tagged_hash(b"ab", b"c")
    t2 = tagged_hash(b"a", b"bc")
    assert t1 != t2
    assert t1 == hashlib.sha3_256(b"\x02abc").digest()
    with pytest.raises(ValueError):
        tagged_hash(b"x" * 256, b"")
