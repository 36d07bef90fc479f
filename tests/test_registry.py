"""Tests for perch.realtime.registry: ConnectionRegistry."""

import threading

from perch.realtime.registry import ConnectionRegistry


class TestConnectionRegistry:
    def test_add_returns_unique_ids(self) -> None:
        registry: ConnectionRegistry[object] = ConnectionRegistry()
        ids = {registry.add(object()) for _ in range(100)}
        assert len(ids) == 100
        assert len(registry) == 100

    def test_get(self) -> None:
        registry: ConnectionRegistry[str] = ConnectionRegistry()
        connection_id = registry.add("handle")
        assert registry.get(connection_id) == "handle"
        assert registry.get("missing") is None

    def test_remove_is_idempotent(self) -> None:
        registry: ConnectionRegistry[str] = ConnectionRegistry()
        connection_id = registry.add("handle")
        registry.remove(connection_id)
        registry.remove(connection_id)
        assert connection_id not in registry
        assert len(registry) == 0

    def test_all_in_insertion_order(self) -> None:
        registry: ConnectionRegistry[str] = ConnectionRegistry()
        first = registry.add("a")
        second = registry.add("b")
        third = registry.add("c")
        assert registry.all() == [(first, "a"), (second, "b"), (third, "c")]
        assert registry.ids() == [first, second, third]

    def test_all_is_a_snapshot(self) -> None:
        registry: ConnectionRegistry[str] = ConnectionRegistry()
        registry.add("a")
        snapshot = registry.all()
        registry.add("b")
        assert len(snapshot) == 1

    def test_concurrent_adds(self) -> None:
        registry: ConnectionRegistry[int] = ConnectionRegistry()
        ids: list[str] = []
        lock = threading.Lock()

        def worker(n: int) -> None:
            for i in range(50):
                connection_id = registry.add(n * 100 + i)
                with lock:
                    ids.append(connection_id)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(ids)) == 400
        assert len(registry) == 400
