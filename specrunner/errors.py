"""Exception types raised by the spec runner."""

from __future__ import annotations

import traceback


class SpecRunnerError(Exception):
    """Base class for errors raised by the runner itself."""


class CallbackTimeoutError(SpecRunnerError, TimeoutError):
    """A hook, test or generator callback exceeded its deadline."""

    def __init__(self, timeout: int) -> None:
        super().__init__(f"Async callback not called within timeout of {timeout}ms")
        self.timeout = timeout


class ResolutionError(SpecRunnerError, ImportError):
    """A required spec module could not be resolved to a file."""

    def __init__(self, path: str) -> None:
        super().__init__(f"No such file {path}")
        self.path = path


def describe_error(error: BaseException) -> tuple[str, str]:
    """Return the (message, trace) pair recorded on a failed node."""
    message = f"{type(error).__name__}: {error}"
    trace = "".join(
        traceback.format_exception(type(error), error, error.__traceback__)
    )
    return message, trace
