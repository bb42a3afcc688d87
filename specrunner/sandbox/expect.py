"""Assertion helper injected into spec files as ``expect``.

    expect(value).to_equal(3)
    expect(items).to_include("a")
    expect(flag).not_.to_be_truthy()
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


class Expectation:
    """Assertions about one value."""

    def __init__(self, value: Any, negated: bool = False) -> None:
        self.value = value
        self.negated = negated

    @property
    def not_(self) -> Expectation:
        return Expectation(self.value, not self.negated)

    def _check(self, outcome: bool, description: str) -> Expectation:
        if outcome == self.negated:
            prefix = "not " if self.negated else ""
            raise AssertionError(f"expected {self.value!r} {prefix}{description}")
        return self

    def to_equal(self, expected: Any) -> Expectation:
        return self._check(self.value == expected, f"to equal {expected!r}")

    def to_be(self, expected: Any) -> Expectation:
        return self._check(self.value is expected, f"to be {expected!r}")

    def to_be_truthy(self) -> Expectation:
        return self._check(bool(self.value), "to be truthy")

    def to_be_falsy(self) -> Expectation:
        return self._check(not self.value, "to be falsy")

    def to_be_none(self) -> Expectation:
        return self._check(self.value is None, "to be None")

    def to_be_a(self, expected_type: type | tuple[type, ...]) -> Expectation:
        return self._check(
            isinstance(self.value, expected_type), f"to be an instance of {expected_type!r}"
        )

    def to_include(self, item: Any) -> Expectation:
        return self._check(item in self.value, f"to include {item!r}")

    def to_have_length(self, length: int) -> Expectation:
        return self._check(len(self.value) == length, f"to have length {length}")

    def to_be_greater_than(self, other: Any) -> Expectation:
        return self._check(self.value > other, f"to be greater than {other!r}")

    def to_be_less_than(self, other: Any) -> Expectation:
        return self._check(self.value < other, f"to be less than {other!r}")

    def to_raise(self, error_type: type[BaseException] = Exception) -> Expectation:
        """Call the value and expect it to raise ``error_type``."""
        func: Callable[[], Any] = self.value
        try:
            func()
        except error_type:
            raised = True
        else:
            raised = False
        return self._check(raised, f"to raise {error_type.__name__}")


def expect(value: Any) -> Expectation:
    return Expectation(value)
