import threading

import pytest

from valence.zkvm import KeyCache, Mode


@pytest.mark.parametrize("name", ["mock", "cpu", "gpu", "network"])
def test_parse_known_modes_select_mock(name):
    assert Mode.parse(name) is Mode.MOCK


@pytest.mark.parametrize("name", ["", "MOCK", "cuda", "net"])
def test_parse_rejects_unknown_modes(name):
    with pytest.raises(ValueError, match="invalid SP1 zkVM mode"):
        Mode.parse(name)


def test_zero_capacity_is_invalid():
    with pytest.raises(ValueError, match="invalid capacity"):
        KeyCache(0)


def test_factory_called_once_per_key():
    cache = KeyCache(4)
    calls = []

    def factory():
        calls.append(1)
        return ("pk", "vk")

    first = cache.get_or_insert(b"a", factory)
    second = cache.get_or_insert(b"a", factory)
    assert first == second == ("pk", "vk")
    assert len(calls) == 1
    assert len(cache) == 1


def test_least_recently_used_is_evicted():
    cache = KeyCache(2)
    cache.get_or_insert("a", lambda: 1)
    cache.get_or_insert("b", lambda: 2)
    cache.get_or_insert("a", lambda: 99)
    cache.get_or_insert("c", lambda: 3)
    assert "a" in cache
    assert "b" not in cache
    assert "c" in cache
    assert len(cache) == 2


def test_failing_factory_stores_nothing():
    cache = KeyCache(2)

    def factory():
        raise RuntimeError("failed to fetch zkvm from registry")

    with pytest.raises(RuntimeError, match="failed to fetch zkvm"):
        cache.get_or_insert("x", factory)
    assert "x" not in cache
    assert len(cache) == 0


def test_pop_removes_and_returns_entry():
    cache = KeyCache(2)
    cache.get_or_insert("a", lambda: "keys")
    assert cache.pop("a") == "keys"
    assert "a" not in cache
    assert cache.pop("a") is None


def test_pop_forces_recompute():
    cache = KeyCache(2)
    cache.get_or_insert("a", lambda: "old")
    cache.pop("a")
    assert cache.get_or_insert("a", lambda: "new") == "new"


def test_concurrent_access_keeps_capacity():
    cache = KeyCache(3)

    def worker(offset):
        for i in range(50):
            cache.get_or_insert((offset, i), lambda: i)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(cache) == 3