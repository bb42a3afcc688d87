"""Unit tests for skip decisions."""

from __future__ import annotations

import asyncio

from specrunner.execution.nodes import Node
from specrunner.execution.skip import condition_holds, discard_condition, should_skip


def _suite(state: str = "running", failed: int = 0) -> Node:
    suite = Node(kind="suite", name="s", state=state)
    suite.failed = failed
    return suite


class TestShouldSkip:
    """Tests for the fast-fail policy."""

    def test_running_parent_without_failures(self):
        assert should_skip(_suite(), fast_fail=True) is False

    def test_skipped_parent(self):
        assert should_skip(_suite(state="skipped"), fast_fail=False) is True

    def test_failed_sibling_with_fast_fail(self):
        assert should_skip(_suite(failed=1), fast_fail=True) is True

    def test_failed_sibling_without_fast_fail(self):
        assert should_skip(_suite(failed=1), fast_fail=False) is False


class TestConditionHolds:
    """Tests for cit conditions."""

    def test_plain_values(self):
        assert asyncio.run(condition_holds(True)) is True
        assert asyncio.run(condition_holds(0)) is False

    def test_callable(self):
        assert asyncio.run(condition_holds(lambda: "yes")) is True

    def test_async_callable(self):
        async def later():
            await asyncio.sleep(0.01)
            return False

        assert asyncio.run(condition_holds(later)) is False

    def test_awaitable(self):
        async def main():
            async def later():
                await asyncio.sleep(0.01)
                return True
            return await condition_holds(later())

        assert asyncio.run(main()) is True

    def test_discard_closes_coroutine(self):
        async def never():
            return True

        coro = never()
        discard_condition(coro)
        assert coro.cr_frame is None

    def test_discard_ignores_plain_values(self):
        discard_condition(True)
