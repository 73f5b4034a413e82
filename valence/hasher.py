"""SHA-256 based hasher used for keys, leaves and tree nodes."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable

HASH_LEN = 32


def _check_hash(value: bytes, name: str) -> bytes:
    value = bytes(value)
    if len(value) != HASH_LEN:
        raise ValueError(f"{name} must be {HASH_LEN} bytes, got {len(value)}")
    return value


class Sp1Hasher:
    """Domain-separated SHA-256 hashing."""

    DATA_PREFIX = b"\x00"
    """Prefix for data hash."""

    MERGE_PREFIX = b"\x01"
    """Prefix for node hash."""

    @staticmethod
    def key(context: str, data: bytes) -> bytes:
        """Compute a key from a context string and some data."""
        hasher = hashlib.sha256()
        hasher.update(context.encode("utf-8"))
        hasher.update(bytes(data))
        return hasher.digest()

    @staticmethod
    def hash(data: bytes) -> bytes:
        """Hash a data leaf."""
        hasher = hashlib.sha256()
        hasher.update(Sp1Hasher.DATA_PREFIX)
        hasher.update(bytes(data))
        return hasher.digest()

    @staticmethod
    def merge(a: bytes, b: bytes) -> bytes:
        """Combine two node hashes into their parent."""
        hasher = hashlib.sha256()
        hasher.update(Sp1Hasher.MERGE_PREFIX)
        hasher.update(_check_hash(a, "a"))
        hasher.update(_check_hash(b, "b"))
        return hasher.digest()

    @staticmethod
    def digest(data: Iterable[bytes]) -> bytes:
        """Hash a sequence of chunks as a single data leaf."""
        hasher = hashlib.sha256()
        hasher.update(Sp1Hasher.DATA_PREFIX)
        for chunk in data:
            hasher.update(bytes(chunk))
        return hasher.digest()