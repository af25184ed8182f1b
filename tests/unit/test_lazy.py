"""
Unit tests for LazySlot.
"""

import threading

from httpfacade.core import LazySlot


class TestLazySlot:
    """Tests for first-read-wins caching."""

    def test_computes_once(self):
        calls = []
        slot = LazySlot("query")

        first = slot.get(lambda: calls.append(1) or {"a": "1"})
        second = slot.get(lambda: calls.append(1) or {"b": "2"})

        assert first is second
        assert first == {"a": "1"}
        assert calls == [1]

    def test_computed_flag(self):
        slot = LazySlot("cookies")

        assert slot.computed is False

        slot.get(dict)

        assert slot.computed is True

    def test_none_is_a_valid_value(self):
        slot = LazySlot()

        assert slot.get(lambda: None) is None
        assert slot.get(lambda: "later") is None

    def test_failed_factory_leaves_slot_empty(self):
        slot = LazySlot()

        def boom():
            raise RuntimeError("boom")

        try:
            slot.get(boom)
        except RuntimeError:
            pass

        assert slot.computed is False
        assert slot.get(lambda: 1) == 1

    def test_concurrent_first_reads(self):
        slot = LazySlot("files")
        calls = []
        results = []
        barrier = threading.Barrier(8)

        def factory():
            calls.append(1)
            return object()

        def reader():
            barrier.wait()
            results.append(slot.get(factory))

        threads = [threading.Thread(target=reader) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert all(result is results[0] for result in results)

    def test_repr(self):
        slot = LazySlot("params")

        assert repr(slot) == "<LazySlot params [empty]>"
        slot.get(dict)
        assert repr(slot) == "<LazySlot params [computed]>"
