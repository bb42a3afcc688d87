"""Calling user callbacks that may be plain functions or coroutines."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from functools import partial
from typing import Any


async def invoke(callback: Callable[..., Any], *args: Any) -> Any:
    """Call a plain or async callable and await its result if needed."""
    result = callback(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


async def invoke_in_executor(callback: Callable[..., Any], *args: Any) -> Any:
    """Like invoke(), but plain callables run in the default thread pool.

    Keeps the event loop free while a blocking callback runs, so a deadline
    around the call can still fire. Coroutine functions run on the loop.
    """
    if inspect.iscoroutinefunction(callback):
        return await callback(*args)
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(None, partial(callback, *args))
    if inspect.isawaitable(result):
        result = await result
    return result
