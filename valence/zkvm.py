"""Prover modes and the per-controller proving key cache."""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Callable, Hashable
from enum import Enum
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class Mode(Enum):
    """Execution mode of the zkVM prover."""

    MOCK = "mock"
    CPU = "cpu"
    GPU = "gpu"
    NETWORK = "network"

    @staticmethod
    def parse(mode: str) -> "Mode":
        """Parse a mode name.

        Every recognised name currently selects the mock prover.
        """
        if mode in ("mock", "cpu", "gpu", "network"):
            return Mode.MOCK
        raise ValueError(f"invalid SP1 zkVM mode: `{mode}`")


class KeyCache(Generic[K, V]):
    """Thread-safe LRU cache of keys indexed by controller id."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("invalid capacity")
        self.capacity = capacity
        self._entries: OrderedDict[K, V] = OrderedDict()
        self._lock = threading.Lock()

    def get_or_insert(self, controller: K, factory: Callable[[], V]) -> V:
        """Return the cached value, computing and storing it when absent.

        If the factory raises, nothing is stored and the error propagates.
        """
        with self._lock:
            if controller in self._entries:
                self._entries.move_to_end(controller)
                return self._entries[controller]
            value = factory()
            self._entries[controller] = value
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)
            return value

    def pop(self, controller: K) -> V | None:
        """Remove and return the entry for a controller, if any."""
        with self._lock:
            return self._entries.pop(controller, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, controller: object) -> bool:
        with self._lock:
            return controller in self._entries