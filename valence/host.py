"""Per-call state shared between the host and an executing controller."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(eq=False)
class HostRuntime:
    """State of a single controller execution.

    Holds the call arguments, the execution context and VM the controller
    runs under, and collects the return value, log entries and panic
    message the controller produces.
    """

    ctx: Any
    args: Any
    vm: Any
    ret: Any = field(default=None, init=False)
    log: list[str] = field(default_factory=list, init=False)
    panic: str | None = field(default=None, init=False)