"""Guest linear memory and the helpers host calls use to exchange data with it.

Host calls report failure with a negative :class:`ReturnCode`. Here that
code travels inside a :class:`HostError`, so the function that talks to the
guest can turn it into the integer the guest expects.
"""

from __future__ import annotations

import json
from enum import IntEnum
from typing import Any

from valence.hasher import HASH_LEN

HOST_CONTROLLER = "valence"
"""Name of the import module that host functions are registered under."""


class ReturnCode(IntEnum):
    """Status codes returned to the guest by host calls."""

    SUCCESS = 0
    MEMORY_EXPORT = -1
    MEMORY_CAPACITY = -2
    MEMORY_WRITE = -3
    MEMORY_READ = -4
    RETURN_BYTES = -5
    BUFFER_TOO_LARGE = -6
    CONTROLLER_RAW_STORAGE = -7
    STRING_UTF8 = -8
    DOMAIN_PROOF = -9
    SERIALIZATION = -10
    JSON_VALUE = -11
    STATE_PROOF = -12
    HTTP = -13
    LATEST_BLOCK = -14
    CONTROLLER_STORAGE = -15
    HISTORICAL_OPENING = -16
    HISTORICAL_PAYLOAD = -17
    ALCHEMY_API_KEY = -18
    ALCHEMY_RESULT = -19


class HostError(Exception):
    """A host call failed with the given return code."""

    def __init__(self, code: ReturnCode, message: str | None = None) -> None:
        self.code = ReturnCode(code)
        if message is None:
            message = f"host call failed: {self.code.name.lower()} ({int(self.code)})"
        super().__init__(message)


class LinearMemory:
    """A flat, zero-initialised byte memory addressed by offset."""

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError("memory size must not be negative")
        self._data = bytearray(size)

    def _check(self, ptr: int, length: int) -> None:
        if ptr < 0 or length < 0 or ptr + length > len(self._data):
            raise IndexError("out of bounds memory access")

    def read(self, ptr: int, length: int) -> bytes:
        """Return `length` bytes starting at `ptr`."""
        self._check(ptr, length)
        return bytes(self._data[ptr : ptr + length])

    def write(self, ptr: int, data: bytes) -> None:
        """Copy `data` into memory starting at `ptr`."""
        data = bytes(data)
        self._check(ptr, len(data))
        self._data[ptr : ptr + len(data)] = data

    def __len__(self) -> int:
        return len(self._data)


def read_buffer(memory: LinearMemory, ptr: int, length: int) -> bytes:
    """Read a buffer from guest memory."""
    capacity = max(len(memory) - ptr, 0)
    if length > capacity:
        raise HostError(ReturnCode.BUFFER_TOO_LARGE)
    try:
        return memory.read(ptr, length)
    except IndexError as exc:
        raise HostError(ReturnCode.MEMORY_READ) from exc


def read_hash(memory: LinearMemory, ptr: int) -> bytes:
    """Read a hash from guest memory."""
    data = read_buffer(memory, ptr, HASH_LEN)
    if len(data) != HASH_LEN:
        raise HostError(ReturnCode.BUFFER_TOO_LARGE)
    return data


def read_string(memory: LinearMemory, ptr: int, length: int) -> str:
    """Read a UTF-8 string from guest memory."""
    data = read_buffer(memory, ptr, length)
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise HostError(ReturnCode.STRING_UTF8) from exc


def read_json(memory: LinearMemory, ptr: int, length: int) -> Any:
    """Read a JSON value from guest memory."""
    data = read_buffer(memory, ptr, length)
    try:
        return json.loads(data)
    except ValueError as exc:
        raise HostError(ReturnCode.JSON_VALUE) from exc


def write_buffer(memory: LinearMemory, ptr: int, data: bytes) -> int:
    """Write a buffer to guest memory, returning the number of bytes written."""
    data = bytes(data)
    capacity = max(len(memory) - ptr, 0)
    if capacity < len(data):
        raise HostError(ReturnCode.MEMORY_CAPACITY)
    try:
        memory.write(ptr, data)
    except IndexError as exc:
        raise HostError(ReturnCode.MEMORY_WRITE) from exc
    return len(data)