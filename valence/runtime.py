"""In-process virtual runtime that controllers use to talk to their host.

A controller reads its arguments, stores its return value, reads and
replaces its raw storage, looks up its own identifier and writes log
entries. All of this state lives in a single process-wide runtime guarded
by a lock. Accessors hand out copies, so callers never share mutable state
with it.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field
from typing import Any

from valence.hasher import HASH_LEN


def _default_controller() -> bytes:
    return bytes(HASH_LEN)


@dataclass
class Runtime:
    """State of the virtual runtime."""

    args: Any = None
    """Execution arguments."""

    ret: Any = None
    """Computation result."""

    raw_storage: bytes = b""
    """Controller raw storage."""

    controller: bytes = field(default_factory=_default_controller)
    """Controller identifier."""

    log: list[str] = field(default_factory=list)
    """Execution logs."""


_lock = threading.Lock()
_runtime = Runtime()


def _as_controller(controller: bytes) -> bytes:
    value = bytes(controller)
    if len(value) != HASH_LEN:
        raise ValueError(
            f"controller id must be {HASH_LEN} bytes, got {len(value)}"
        )
    return value


def initialize_default_runtime() -> None:
    """Reset the controller id and raw storage to their defaults."""
    initialize_runtime(_default_controller(), b"")


def initialize_runtime(controller: bytes, raw_storage: bytes) -> None:
    """Set the controller id and raw storage of the runtime.

    Arguments, return value and log are left as they are.
    """
    controller = _as_controller(controller)
    raw_storage = bytes(raw_storage)
    with _lock:
        _runtime.raw_storage = raw_storage
        _runtime.controller = controller


def runtime() -> Runtime:
    """Return a snapshot of the whole runtime state."""
    with _lock:
        return copy.deepcopy(_runtime)


def args() -> Any:
    """Return the execution arguments."""
    with _lock:
        return copy.deepcopy(_runtime.args)


def set_args(value: Any) -> None:
    """Replace the execution arguments."""
    value = copy.deepcopy(value)
    with _lock:
        _runtime.args = value


def ret(value: Any) -> None:
    """Store the computation result."""
    value = copy.deepcopy(value)
    with _lock:
        _runtime.ret = value


def get_raw_storage() -> bytes:
    """Return the controller raw storage."""
    with _lock:
        return _runtime.raw_storage


def set_raw_storage(raw_storage: bytes) -> None:
    """Replace the controller raw storage."""
    raw_storage = bytes(raw_storage)
    with _lock:
        _runtime.raw_storage = raw_storage


def get_controller() -> bytes:
    """Return the identifier of the current controller."""
    with _lock:
        return _runtime.controller


def log(message: str) -> None:
    """Append an entry to the execution log."""
    entry = str(message)
    with _lock:
        _runtime.log.append(entry)