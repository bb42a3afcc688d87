"""Deadline and retry wrappers for user callbacks.

Every hook, test and generator callback runs through run_with_timeout.
Retry tests additionally go through run_with_retries, which re-invokes the
callback under a fresh deadline per attempt.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from specrunner.callbacks import invoke, invoke_in_executor
from specrunner.errors import CallbackTimeoutError

DEFAULT_NON_RETRYABLE = ("AttributeError", "NameError", "SyntaxError", "TypeError")


async def run_with_timeout(
    callback: Callable[..., Any], timeout: int, *args: Any
) -> Any:
    """Race a callback against a deadline of ``timeout`` milliseconds.

    A timeout of 0 waits without a deadline. A coroutine that overruns is
    cancelled and CallbackTimeoutError is raised in its place. Plain
    callables run in the default executor so that a blocking one is
    failed at the deadline too, although its thread runs to completion.
    """
    if timeout == 0:
        return await invoke(callback, *args)

    try:
        return await asyncio.wait_for(
            invoke_in_executor(callback, *args), timeout / 1000
        )
    except asyncio.TimeoutError as e:
        raise CallbackTimeoutError(timeout) from e


@dataclass
class RetryPolicy:
    """Retry settings for ``rit`` tests."""

    delay: int = 100  # ms between attempts
    maximum: int = 10  # attempts, counting the first try
    non_retryable: tuple[str, ...] = field(default=DEFAULT_NON_RETRYABLE)

    def __post_init__(self) -> None:
        if self.maximum < 1:
            raise ValueError(f"retries.maximum must be at least 1, got {self.maximum}")
        if self.delay < 0:
            raise ValueError(f"retries.delay must not be negative, got {self.delay}")
        self.non_retryable = tuple(self.non_retryable)

    def is_retryable(self, error: BaseException) -> bool:
        """False when any class in the error's MRO is an exempt category."""
        categories = {cls.__name__ for cls in type(error).__mro__}
        return not categories.intersection(self.non_retryable)


async def run_with_retries(
    callback: Callable[..., Any],
    timeout: int,
    policy: RetryPolicy,
    args: Iterable[Any] = (),
    on_attempt: Callable[[int], None] | None = None,
) -> int:
    """Run a callback until it succeeds or the policy gives up.

    Returns:
        The number of attempts made, the successful one included.

    Raises:
        The last error once ``policy.maximum`` attempts have failed, or the
        first error whose category is non-retryable.
    """
    args = tuple(args)
    attempt = 0
    while True:
        attempt += 1
        if on_attempt is not None:
            on_attempt(attempt)
        try:
            await run_with_timeout(callback, timeout, *args)
            return attempt
        except Exception as error:
            if not policy.is_retryable(error) or attempt >= policy.maximum:
                raise
        await asyncio.sleep(policy.delay / 1000)
