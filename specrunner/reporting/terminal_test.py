"""Unit tests for terminal output."""

from __future__ import annotations

import asyncio
import io

from specrunner import __version__
from specrunner.events import EventBus
from specrunner.execution.nodes import Node
from specrunner.reporting.terminal import TerminalReporter, render_tree


def _finished(kind: str, name: str, state: str, **fields) -> Node:
    node = Node(kind=kind, name=name, **fields)
    node.begin()
    node.finish(state)
    return node


class TestRenderTree:
    """Tests for render_tree."""

    def test_labels_and_marks(self):
        root = Node(kind="spec", name="a_spec.py")
        root.add_child(_finished("hook", "setup", "passed", type="before"))
        root.add_child(_finished("generator", "values", "passed", type="mit"))
        root.add_child(_finished("test", "flaky", "passed", attempts=3))

        assert render_tree(root) == [
            "[ ] a_spec.py",
            "  [+] before: setup",
            "  [+] mit values",
            "  [+] flaky (attempts: 3)",
        ]

    def test_error_line(self):
        test = Node(kind="test", name="broken")
        test.fail(ValueError("bad"))
        assert render_tree(test) == ["[x] broken", "    ValueError: bad"]


class TestTerminalReporter:
    """Tests for TerminalReporter driven through the event bus."""

    def test_run_output(self):
        stream = io.StringIO()
        bus = EventBus()
        TerminalReporter(stream=stream).attach(bus)

        root = Node(kind="root", name="specrunner")
        spec = _finished("spec", "a_spec.py", "failed", error="AssertionError: no")
        root.add_child(spec)
        root.record(spec)
        root.begin()
        root.resolve()

        async def run():
            await bus.emit("before", root)
            await bus.emit("after-test", _finished("test", "one", "passed"))
            await bus.emit("after-test", _finished("test", "two", "failed"))
            await bus.emit("after-spec", spec)
            await bus.emit("after", root)

        asyncio.run(run())
        lines = stream.getvalue().splitlines()

        assert lines[0] == f"specrunner v{__version__} starting..."
        assert lines[1] == "  a_spec.py failed"
        assert lines[2] == "    AssertionError: no"
        assert "Test Specs: 0 passed, 1 failed, 0 skipped, 1 total" in lines
        assert "Tests: 1 passed, 1 failed, 2 run" in lines
        assert lines[-1].startswith("Time: ")

    def test_verbose_prints_tree(self):
        stream = io.StringIO()
        reporter = TerminalReporter(stream=stream, verbose=True)
        root = Node(kind="root", name="specrunner")
        root.begin()
        root.resolve()

        reporter.on_after(root)
        assert "[-] specrunner" in stream.getvalue()

    def test_detach(self):
        bus = EventBus()
        reporter = TerminalReporter(stream=io.StringIO())
        reporter.attach(bus)
        reporter.detach(bus)
        assert bus.listeners("after-spec") == []
