"""Plain text progress and summary output driven by lifecycle events."""

from __future__ import annotations

import sys
from typing import TextIO

from specrunner import __version__
from specrunner.events import EventBus
from specrunner.execution.nodes import Node

STATE_MARKS = {
    "passed": "+",
    "failed": "x",
    "skipped": "-",
    "running": "~",
    "ready": " ",
}


def render_tree(node: Node, indent: int = 0) -> list[str]:
    """Render a node and its subtree as indented lines."""
    label = node.name
    if node.kind == "hook":
        label = f"{node.type}: {node.name}"
    elif node.kind == "generator":
        label = f"{node.type} {node.name}"
    line = f"{'  ' * indent}[{STATE_MARKS.get(node.state, '?')}] {label}"
    if node.attempts is not None:
        line += f" (attempts: {node.attempts})"
    lines = [line]
    if node.error:
        lines.append(f"{'  ' * (indent + 2)}{node.error}")
    for child in node.children or ():
        lines.extend(render_tree(child, indent + 1))
    return lines


class TerminalReporter:
    """Prints one line per finished spec and totals at the end."""

    def __init__(
        self,
        stream: TextIO | None = None,
        verbose: bool = False,
    ) -> None:
        self.stream = stream or sys.stdout
        self.verbose = verbose
        self.tests = {"passed": 0, "failed": 0, "skipped": 0}

    def attach(self, bus: EventBus) -> None:
        bus.on("before", self.on_before)
        bus.on("after-test", self.on_after_test)
        bus.on("after-spec", self.on_after_spec)
        bus.on("after", self.on_after)

    def detach(self, bus: EventBus) -> None:
        bus.off("before", self.on_before)
        bus.off("after-test", self.on_after_test)
        bus.off("after-spec", self.on_after_spec)
        bus.off("after", self.on_after)

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream)

    def on_before(self, root: Node) -> None:
        self._print(f"{root.name} v{__version__} starting...")

    def on_after_test(self, test: Node) -> None:
        if test.state in self.tests:
            self.tests[test.state] += 1

    def on_after_spec(self, spec: Node) -> None:
        self._print(f"  {spec.name} {spec.state}")
        if spec.error:
            self._print(f"    {spec.error}")

    def on_after(self, root: Node) -> None:
        if self.verbose:
            self._print()
            for line in render_tree(root):
                self._print(line)
        total_specs = len(root.children or ())
        self._print()
        self._print(
            f"Test Specs: {root.passed} passed, {root.failed} failed, "
            f"{root.skipped} skipped, {total_specs} total"
        )
        self._print(
            f"Tests: {self.tests['passed']} passed, {self.tests['failed']} failed, "
            f"{sum(self.tests.values())} run"
        )
        self._print(f"Time: {root.stop - root.start}ms")
