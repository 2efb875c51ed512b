"""
swap_core.encoding — bytes/hex coercion and canonical CBOR.

Addresses are raw bytes everywhere inside the library. Hex strings (with or
without "0x") are accepted at the boundaries and normalized to bytes.

Canonical CBOR (RFC 8949 §4.2 deterministic encoding, via `cbor2` with
`canonical=True`) is used wherever bytes must be reproducible by an independent
party, e.g. the salt preimage of a derived deal address.

Public API:
- to_bytes(value) -> bytes
- to_hex(b) -> str
- to_address(value, *, length, name="address") -> bytes
- canonical_dumps(obj) -> bytes
- canonical_loads(b) -> object
"""

from __future__ import annotations

from typing import Any, Union

import cbor2

from .errors import InvalidArgument

BytesLike = Union[bytes, bytearray, memoryview, str]


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: BytesLike) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise InvalidArgument(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise InvalidArgument(f"invalid hex string: {value!r}") from e
    raise InvalidArgument(f"cannot convert type {type(value).__name__} to bytes")


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def to_address(value: Any, *, length: int, name: str = "address") -> bytes:
    """
    Normalize an address and enforce its width. The all-zero address is the
    null address and is rejected.
    """
    if value is None:
        raise InvalidArgument(f"{name} must not be null", arg=name)
    addr = to_bytes(value)
    if len(addr) != length:
        raise InvalidArgument(f"{name} must be exactly {length} bytes, got {len(addr)}", arg=name)
    if not any(addr):
        raise InvalidArgument(f"{name} must not be the zero address", arg=name)
    return addr


def canonical_dumps(obj: Any) -> bytes:
    """
    Encode `obj` to canonical CBOR bytes (deterministic map ordering, shortest
    integer forms). Floats are rejected so encodings stay exact.
    """
    _reject_floats(obj)
    return cbor2.dumps(obj, canonical=True)


def canonical_loads(b: bytes) -> Any:
    return cbor2.loads(b)


def _reject_floats(obj: Any) -> None:
    if isinstance(obj, float):
        raise InvalidArgument("floats are not allowed in canonical encodings")
    if isinstance(obj, (list, tuple)):
        for x in obj:
            _reject_floats(x)
    elif isinstance(obj, dict):
        for k, v in obj.items():
            _reject_floats(k)
            _reject_floats(v)


__all__ = [
    "BytesLike",
    "to_bytes",
    "to_hex",
    "to_address",
    "canonical_dumps",
    "canonical_loads",
]
