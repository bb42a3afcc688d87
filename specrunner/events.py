"""Lifecycle events observers can subscribe to.

Emitting an event awaits every callback registered for it, concurrently,
before the run moves on. Callbacks receive live Node objects. A callback
that raises is reported on stderr and does not affect the run.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Callable
from typing import Any

from specrunner.callbacks import invoke

EVENTS = (
    "before",
    "before-spec",
    "before-suite",
    "before-test",
    "after-test",
    "after-suite",
    "after-spec",
    "after",
    # Terminal state notifications, reserved.
    "passed",
    "failed",
    "skipped",
)


class EventBus:
    """Named extension points with awaitable emission."""

    def __init__(self) -> None:
        self._callbacks: dict[str, list[Callable[..., Any]]] = {
            name: [] for name in EVENTS
        }

    def _check(self, name: str) -> None:
        if name not in self._callbacks:
            raise ValueError(f"Unknown event: {name}")

    def on(self, name: str, callback: Callable[..., Any]) -> None:
        """Register a plain or async callback for an event."""
        self._check(name)
        self._callbacks[name].append(callback)

    def off(self, name: str, callback: Callable[..., Any]) -> None:
        """Unregister a callback. Unknown callbacks are ignored."""
        self._check(name)
        if callback in self._callbacks[name]:
            self._callbacks[name].remove(callback)

    def listeners(self, name: str) -> list[Callable[..., Any]]:
        self._check(name)
        return list(self._callbacks[name])

    async def emit(self, name: str, *args: Any) -> None:
        """Invoke all current callbacks for ``name`` and wait for them."""
        self._check(name)
        callbacks = list(self._callbacks[name])
        if not callbacks:
            return

        results = await asyncio.gather(
            *(invoke(callback, *args) for callback in callbacks),
            return_exceptions=True,
        )
        for callback, result in zip(callbacks, results):
            if isinstance(result, Exception):
                label = getattr(callback, "__qualname__", repr(callback))
                print(
                    f"Warning: {name} observer {label} failed: "
                    f"{type(result).__name__}: {result}",
                    file=sys.stderr,
                )
            elif isinstance(result, BaseException):
                raise result
