"""
swap_core.hash
==============

Thin wrappers for the project hash plus domain-separated digests.

- sha3_256(data)
- tagged_hash(tag, data)   # sha3_256(len(tag) || tag || data)

The tag is length-prefixed so that no (tag, data) pair can collide with a
different split of the same bytes.
"""

from __future__ import annotations

import hashlib

from .encoding import BytesLike, to_bytes

ZERO32 = b"\x00" * 32


def sha3_256(data: BytesLike) -> bytes:
    """SHA3-256 digest."""
    return hashlib.sha3_256(to_bytes(data)).digest()


def tagged_hash(tag: bytes, data: BytesLike) -> bytes:
    if len(tag) > 255:
        raise ValueError("tag too long")
    return sha3_256(bytes([len(tag)]) + tag + to_bytes(data))


__all__ = ["ZERO32", "sha3_256", "tagged_hash"]
