"""Unit tests for the lifecycle event bus."""

from __future__ import annotations

import asyncio

import pytest

from specrunner.events import EVENTS, EventBus


class TestEventBus:
    """Tests for subscription and emission."""

    def test_known_events(self):
        for name in ("before", "before-spec", "before-suite", "before-test",
                     "after-test", "after-suite", "after-spec", "after"):
            assert name in EVENTS

    def test_unknown_event_rejected(self):
        bus = EventBus()
        with pytest.raises(ValueError, match="Unknown event"):
            bus.on("during", lambda: None)
        with pytest.raises(ValueError, match="Unknown event"):
            asyncio.run(bus.emit("during"))

    def test_emit_calls_plain_and_async_callbacks(self):
        bus = EventBus()
        seen: list[str] = []

        async def async_callback(node):
            await asyncio.sleep(0)
            seen.append(f"async {node}")

        bus.on("before-spec", lambda node: seen.append(f"plain {node}"))
        bus.on("before-spec", async_callback)
        asyncio.run(bus.emit("before-spec", "a.py"))

        assert sorted(seen) == ["async a.py", "plain a.py"]

    def test_emit_is_a_barrier(self):
        """emit() returns only after every callback has finished."""
        bus = EventBus()
        finished: list[str] = []

        async def slow(_):
            await asyncio.sleep(0.05)
            finished.append("slow")

        bus.on("after-spec", slow)

        async def main():
            await bus.emit("after-spec", None)
            return list(finished)

        assert asyncio.run(main()) == ["slow"]

    def test_callbacks_run_concurrently(self):
        bus = EventBus()
        order: list[str] = []

        async def first(_):
            order.append("first start")
            await asyncio.sleep(0.02)
            order.append("first end")

        async def second(_):
            order.append("second start")

        bus.on("after", first)
        bus.on("after", second)
        asyncio.run(bus.emit("after", None))
        assert order.index("second start") < order.index("first end")

    def test_off_unregisters(self):
        bus = EventBus()
        seen: list[int] = []
        callback = seen.append
        bus.on("after-test", callback)
        bus.off("after-test", callback)
        bus.off("after-test", callback)
        asyncio.run(bus.emit("after-test", 1))
        assert seen == []
        assert bus.listeners("after-test") == []

    def test_failing_observer_is_reported_not_raised(self, capsys):
        bus = EventBus()
        seen: list[str] = []

        def broken(_):
            raise RuntimeError("observer broke")

        bus.on("before-test", broken)
        bus.on("before-test", lambda node: seen.append(node))
        asyncio.run(bus.emit("before-test", "a"))

        assert seen == ["a"]
        err = capsys.readouterr().err
        assert "Warning: before-test observer" in err
        assert "RuntimeError: observer broke" in err
