"""Tests for reverie.variables: per-message locals and per-server globals."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

from reverie.testing import make_request
from reverie.variables import Global, GlobalStore, Local, default_store, new_global, new_local


class TestLocal:
    def test_new_local(self) -> None:
        slot = new_local(name="user")
        assert isinstance(slot, Local)
        assert slot.name == "user"
        assert slot.debug is None

    def test_slots_are_distinct(self) -> None:
        assert new_local(name="x") is not new_local(name="x")

    def test_debug_formatter(self) -> None:
        slot: Local[int] = new_local(debug=lambda v: ("n", str(v)))
        assert slot.debug is not None
        assert slot.debug(3) == ("n", "3")

    def test_repr(self) -> None:
        assert repr(new_local(name="user")) == "<Local user>"


class TestGlobal:
    def test_factory_runs_on_first_read(self) -> None:
        calls: list[int] = []

        def factory() -> list[str]:
            calls.append(1)
            return []

        slot = new_global(factory, name="items")
        store = GlobalStore()
        assert calls == []
        assert store.get(slot) == []
        assert calls == [1]

    def test_value_is_shared(self) -> None:
        slot = new_global(list)
        store = GlobalStore()
        store.get(slot).append("a")
        assert store.get(slot) == ["a"]

    def test_stores_are_independent(self) -> None:
        slot = new_global(list)
        a = GlobalStore()
        b = GlobalStore()
        a.get(slot).append(1)
        assert b.get(slot) == []

    def test_contains(self) -> None:
        slot = new_global(dict)
        store = GlobalStore()
        assert slot not in store
        store.get(slot)
        assert slot in store

    def test_items(self) -> None:
        slot = new_global(lambda: 5)
        store = GlobalStore()
        store.get(slot)
        assert store.items() == [(slot, 5)]

    def test_get_through_request(self) -> None:
        slot: Global[dict[str, int]] = new_global(dict)
        store = GlobalStore()
        request = make_request(globals=store)
        slot.get(request)["hits"] = 1
        assert store.get(slot) == {"hits": 1}

    def test_request_default_store(self) -> None:
        assert make_request().globals is default_store

    def test_factory_may_read_other_globals(self) -> None:
        base = new_global(lambda: 2)
        store = GlobalStore()
        derived = new_global(lambda: store.get(base) * 10)
        assert store.get(derived) == 20

    def test_factory_runs_once_under_contention(self) -> None:
        calls: list[int] = []
        barrier = threading.Barrier(8)

        def factory() -> object:
            calls.append(1)
            time.sleep(0.05)
            return object()

        slot = new_global(factory)
        store = GlobalStore()

        def read() -> object:
            barrier.wait()
            return store.get(slot)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: read(), range(8)))

        assert len(calls) == 1
        assert all(value is results[0] for value in results)
