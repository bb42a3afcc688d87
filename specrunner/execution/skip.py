"""Skip decisions for work that has not started yet."""

from __future__ import annotations

import inspect
from typing import Any

from specrunner.callbacks import invoke
from specrunner.execution.nodes import Node


def should_skip(parent: Node, fast_fail: bool) -> bool:
    """Whether a pending child of ``parent`` must be skipped.

    A child is skipped when its parent is already skipped, or, with fast
    fail enabled, when the parent has recorded at least one failed child.
    Work that is already running is never affected.
    """
    if parent.state == "skipped":
        return True
    return fast_fail and parent.failed > 0


async def condition_holds(condition: Any) -> bool:
    """Resolve a ``cit`` condition without a deadline.

    The condition may be a plain value, an awaitable, or a callable
    returning either.
    """
    if callable(condition):
        return bool(await invoke(condition))
    if inspect.isawaitable(condition):
        return bool(await condition)
    return bool(condition)


def discard_condition(condition: Any) -> None:
    """Close a coroutine condition that will never be awaited."""
    if inspect.iscoroutine(condition):
        condition.close()
