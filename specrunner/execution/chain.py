"""Ordered queues of deferred work.

A Chain holds steps (coroutine functions taking no arguments) that run one
at a time in the order they were appended. Steps appended while the chain
is settling, including steps appended by a running step, are picked up by
the same settle() call, so awaiting settle() waits for everything queued
on the chain.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Awaitable, Callable

Step = Callable[[], Awaitable[None]]


class Chain:
    """FIFO of deferred steps for one scope."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._steps: deque[Step] = deque()

    def __repr__(self) -> str:
        return f"Chain({self.name!r}, pending={self.pending})"

    @property
    def pending(self) -> int:
        """Number of steps queued and not yet started."""
        return len(self._steps)

    def append(self, step: Step) -> Chain:
        """Queue a step and return the extended chain."""
        self._steps.append(step)
        return self

    async def settle(self) -> None:
        """Run queued steps in order until the queue is empty.

        Steps are expected to record their own failures. An exception
        escaping a step propagates and leaves the remaining steps queued.
        """
        while self._steps:
            step = self._steps.popleft()
            await step()
