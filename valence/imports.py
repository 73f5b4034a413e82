"""Host functions a controller imports to reach its execution context.

Each function takes the state of the running call, the guest's linear
memory (``None`` when the guest exports none) and the pointers and lengths
the guest passed. It returns what the guest expects:

- a non-negative byte count when data was written;
- ``ReturnCode.SUCCESS`` when nothing was written;
- a negative :class:`ReturnCode` value when the call failed.

The execution context held by the runtime is expected to provide a
``controller`` attribute and the methods ``get_storage_file(path)``,
``set_storage_file(path, contents)``, ``get_raw_storage()``,
``set_raw_storage(data)`` and ``get_historical()``.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from valence.host import HostRuntime
from valence.memory import (
    HostError,
    LinearMemory,
    ReturnCode,
    read_buffer,
    read_string,
    write_buffer,
)

T = TypeVar("T")

UNDEFINED_PANIC = "undefined panic"


def _host_call(func: Callable[..., int]) -> Callable[..., int]:
    """Map a missing memory export and any :class:`HostError` to return codes."""

    @wraps(func)
    def wrapper(runtime: HostRuntime, memory: LinearMemory | None, *args: int) -> int:
        if memory is None:
            return int(ReturnCode.MEMORY_EXPORT)
        try:
            return func(runtime, memory, *args)
        except HostError as exc:
            return int(exc.code)

    return wrapper


def _context(code: ReturnCode, call: Callable[..., T], *args: Any) -> T:
    """Run a context operation, turning any failure into a host error."""
    try:
        return call(*args)
    except Exception as exc:
        raise HostError(code, f"context operation failed: {exc}") from exc


def panic(runtime: HostRuntime, memory: LinearMemory | None, ptr: int, length: int) -> None:
    """Record the guest's panic message, or a generic one if it cannot be read."""
    message = UNDEFINED_PANIC
    if memory is not None and length <= len(memory):
        try:
            message = memory.read(ptr, length).decode("utf-8")
        except (IndexError, UnicodeDecodeError):
            message = UNDEFINED_PANIC
    runtime.panic = message


@_host_call
def args(runtime: HostRuntime, memory: LinearMemory, ptr: int) -> int:
    """Write the call arguments, as JSON, to `ptr`."""
    encoded = json.dumps(runtime.args, separators=(",", ":"), ensure_ascii=False)
    return write_buffer(memory, ptr, encoded.encode("utf-8"))


@_host_call
def ret(runtime: HostRuntime, memory: LinearMemory, ptr: int, length: int) -> int:
    """Read the call's return value, as JSON, from `ptr`."""
    data = read_buffer(memory, ptr, length)
    try:
        value = json.loads(data)
    except ValueError:
        return int(ReturnCode.RETURN_BYTES)
    runtime.ret = value
    return int(ReturnCode.SUCCESS)


@_host_call
def get_storage_file(
    runtime: HostRuntime, memory: LinearMemory, path_ptr: int, path_len: int, ptr: int
) -> int:
    """Write the contents of a storage file to `ptr`."""
    path = read_string(memory, path_ptr, path_len)
    contents = _context(
        ReturnCode.CONTROLLER_STORAGE, runtime.ctx.get_storage_file, path
    )
    return write_buffer(memory, ptr, contents)


@_host_call
def set_storage_file(
    runtime: HostRuntime,
    memory: LinearMemory,
    path_ptr: int,
    path_len: int,
    ptr: int,
    length: int,
) -> int:
    """Store the buffer at `ptr` as a file of the controller storage."""
    path = read_string(memory, path_ptr, path_len)
    contents = read_buffer(memory, ptr, length)
    _context(
        ReturnCode.CONTROLLER_STORAGE, runtime.ctx.set_storage_file, path, contents
    )
    return int(ReturnCode.SUCCESS)


@_host_call
def get_raw_storage(runtime: HostRuntime, memory: LinearMemory, ptr: int) -> int:
    """Write the controller raw storage to `ptr`; absent storage is empty."""
    data = _context(ReturnCode.CONTROLLER_RAW_STORAGE, runtime.ctx.get_raw_storage)
    return write_buffer(memory, ptr, data or b"")


@_host_call
def set_raw_storage(
    runtime: HostRuntime, memory: LinearMemory, ptr: int, length: int
) -> int:
    """Replace the controller raw storage with the buffer at `ptr`."""
    data = read_buffer(memory, ptr, length)
    _context(ReturnCode.CONTROLLER_RAW_STORAGE, runtime.ctx.set_raw_storage, data)
    return int(ReturnCode.SUCCESS)


@_host_call
def get_controller(runtime: HostRuntime, memory: LinearMemory, ptr: int) -> int:
    """Write the controller identifier to `ptr`."""
    return write_buffer(memory, ptr, bytes(runtime.ctx.controller))


@_host_call
def get_historical(runtime: HostRuntime, memory: LinearMemory, ptr: int) -> int:
    """Write the current historical tree root to `ptr`."""
    return write_buffer(memory, ptr, bytes(runtime.ctx.get_historical()))


@_host_call
def log(runtime: HostRuntime, memory: LinearMemory, ptr: int, length: int) -> int:
    """Append the string at `ptr` to the call's log."""
    entry = read_string(memory, ptr, length)
    runtime.log.append(entry)
    return int(ReturnCode.SUCCESS)