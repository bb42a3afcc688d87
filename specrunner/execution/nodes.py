"""Result tree data structures.

Provides Node (the serializable result record shared by every node kind)
and Scope (the private scheduling state of a node: parent link, timeout,
hook registries and chains). Reported trees only ever contain Node data;
Scope records are kept in a ScopeRegistry and dropped once a spec completes.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from specrunner.errors import describe_error
from specrunner.execution.chain import Chain

KINDS = ("root", "spec", "suite", "test", "hook", "generator")
CONTAINER_KINDS = frozenset({"root", "spec", "suite"})
TERMINAL_STATES = frozenset({"passed", "failed", "skipped"})
HOOK_TYPES = ("before", "after", "beforeEach", "afterEach")


def timestamp() -> int:
    """Current wall clock time in milliseconds."""
    return int(time.time() * 1000)


@dataclass(eq=False)
class Node:
    """One node of the result tree.

    Containers (root, spec, suite) own an ordered list of children and the
    rollup counters. Leaves (test, hook, generator) leave ``children`` unset.
    """

    kind: str
    name: str
    state: str = "ready"
    start: int = -1
    stop: int = -1
    type: str | None = None  # hook type or generator declaration
    file: str | None = None
    error: str | None = None
    trace: str | None = None
    attempts: int | None = None
    children: list[Node] | None = None
    passed: int = 0
    failed: int = 0
    skipped: int = 0

    def __post_init__(self) -> None:
        if self.kind not in KINDS:
            raise ValueError(f"Unknown node kind: {self.kind}")
        if self.kind in CONTAINER_KINDS and self.children is None:
            self.children = []

    @property
    def is_container(self) -> bool:
        return self.kind in CONTAINER_KINDS

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def begin(self) -> None:
        """Mark the node as running."""
        self.state = "running"
        self.start = timestamp()

    def finish(self, state: str) -> None:
        """Move the node to a terminal state and stamp its stop time."""
        if state not in TERMINAL_STATES:
            raise ValueError(f"Not a terminal state: {state}")
        if self.start == -1:
            self.start = timestamp()
        self.state = state
        self.stop = timestamp()

    def skip(self) -> None:
        """Record the node as skipped without ever having run."""
        self.state = "skipped"
        self.start = self.stop = timestamp()

    def fail(self, error: BaseException) -> None:
        """Record a failure and retain the error for reporting."""
        self.error, self.trace = describe_error(error)
        self.finish("failed")

    def retain(self, error: BaseException) -> None:
        """Keep an error without settling the node (suite body failures)."""
        self.error, self.trace = describe_error(error)

    def add_child(self, child: Node) -> None:
        if self.children is None:
            raise ValueError(f"{self.kind} node {self.name!r} cannot own children")
        self.children.append(child)

    def record(self, child: Node) -> None:
        """Roll a direct child's terminal state into the counters."""
        if child.state == "passed":
            self.passed += 1
        elif child.state == "failed":
            self.failed += 1
        elif child.state == "skipped":
            self.skipped += 1
        else:
            raise ValueError(
                f"Cannot record {child.kind} {child.name!r} in state {child.state}"
            )

    def resolve(self) -> str:
        """Derive a container's terminal state from its counters."""
        if self.error is not None or self.failed > 0:
            state = "failed"
        elif self.passed > 0:
            state = "passed"
        else:
            state = "skipped"
        self.finish(state)
        return state

    def walk(self) -> Iterator[Node]:
        """Yield this node and its descendants depth-first."""
        yield self
        for child in self.children or ():
            yield from child.walk()

    def to_dict(self) -> dict[str, Any]:
        """Serialize the node and its subtree for reporting."""
        data: dict[str, Any] = {
            "kind": self.kind,
            "name": self.name,
            "state": self.state,
            "start": self.start,
            "stop": self.stop,
        }
        for key in ("type", "file", "attempts", "error", "trace"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.is_container:
            data["passed"] = self.passed
            data["failed"] = self.failed
            data["skipped"] = self.skipped
            data["children"] = [child.to_dict() for child in self.children or ()]
        return data


@dataclass
class HookEntry:
    """A registered before/after/beforeEach/afterEach callback."""

    name: str
    callback: Callable[..., Any]
    timeout: int | None = None  # None inherits the owning scope's timeout


class Scope:
    """Private scheduling state for one node.

    The parent link is fixed at construction. Containers get hook
    registries and main/before/after chains, tests get their own
    beforeEach/afterEach chains and generators a single main chain.
    """

    def __init__(self, node: Node, parent: Scope | None, timeout: int) -> None:
        self.node = node
        self._parent = parent
        self.timeout = timeout
        self.hooks: dict[str, list[HookEntry]] = {}
        if node.is_container:
            self.hooks = {hook_type: [] for hook_type in HOOK_TYPES}
            chain_names: tuple[str, ...] = ("main", "before", "after")
        elif node.kind == "test":
            chain_names = ("beforeEach", "afterEach")
        elif node.kind == "generator":
            chain_names = ("main",)
        else:
            chain_names = ()
        self.chains: dict[str, Chain] = {name: Chain(name) for name in chain_names}

    @property
    def parent(self) -> Scope | None:
        return self._parent

    def inherit_timeout(self, override: int | None) -> int:
        """Timeout for a child declared in this scope."""
        return self.timeout if override is None else override

    def release(self) -> None:
        """Drop hook registries and chains once execution is over."""
        self.hooks = {}
        self.chains = {}


@dataclass
class ScopeRegistry:
    """Scope records keyed by node identity."""

    scopes: dict[int, Scope] = field(default_factory=dict)

    def create(self, node: Node, parent: Scope | None, timeout: int) -> Scope:
        scope = Scope(node, parent, timeout)
        self.scopes[id(node)] = scope
        return scope

    def release(self) -> None:
        for scope in self.scopes.values():
            scope.release()
        self.scopes.clear()
