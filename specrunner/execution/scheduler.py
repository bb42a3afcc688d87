"""Spec scheduler: runs spec files with bounded concurrency.

Each spec file gets its own spec node, scope registry, registration
context and sandbox evaluation. Up to ``config.workers`` specs are in
flight at once on a single event loop; within one spec everything runs
serially. Spec results roll up into one root node for the whole run.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from specrunner.config import RunnerConfig
from specrunner.events import EventBus
from specrunner.execution.nodes import Node, Scope, ScopeRegistry, timestamp
from specrunner.execution.registration import RegistrationContext
from specrunner.sandbox.sandbox import Sandbox


class SpecScheduler:
    """Feeds spec files through the registration engine.

    Uses a semaphore to limit the number of spec files evaluated and
    executed at the same time. Files start in the order they were added.
    """

    def __init__(
        self,
        config: RunnerConfig | None = None,
        bus: EventBus | None = None,
        sandbox: Sandbox | None = None,
    ) -> None:
        self.config = config or RunnerConfig()
        self.bus = bus or EventBus()
        self.sandbox = sandbox or Sandbox(self.config.preload)
        self.files: list[str] = []
        self.root = Node(kind="root", name=self.config.name)
        self.root.start = timestamp()
        self._root_scope = Scope(self.root, None, self.config.timeout)

    def add_files(self, files: Iterable[str | Path]) -> None:
        """Queue spec files for the run."""
        self.files.extend(str(f) for f in files)

    def on(self, name: str, callback: Callable[..., Any]) -> None:
        """Subscribe to a lifecycle event."""
        self.bus.on(name, callback)

    def execute(self) -> Node:
        """Run all queued spec files and return the root node."""
        return asyncio.run(self.run())

    async def run(self) -> Node:
        """Async implementation of execute()."""
        self.root.state = "running"
        await self.bus.emit("before", self.root)

        semaphore = asyncio.Semaphore(self.config.workers)

        async def run_file(path: str) -> None:
            async with semaphore:
                await self.run_spec(path)

        await asyncio.gather(*(run_file(path) for path in self.files))

        self.root.resolve()
        await self.bus.emit("after", self.root)
        return self.root

    async def run_spec(self, path: str) -> Node:
        """Evaluate and execute one spec file."""
        spec = Node(kind="spec", name=Path(path).name, file=path)
        self.root.add_child(spec)
        spec.begin()

        registry = ScopeRegistry()
        scope = registry.create(spec, self._root_scope, self.config.timeout)
        context = RegistrationContext(
            scope,
            registry,
            bus=self.bus,
            fast_fail=self.config.fast_fail,
            retry_policy=self.config.retry_policy,
        )

        await self.bus.emit("before-spec", spec)
        try:
            self.sandbox.evaluate(path, context.api())
            await context.settle()
        except Exception as error:
            spec.retain(error)
        spec.resolve()

        await self.bus.emit("after-spec", spec)
        registry.release()
        self.root.record(spec)
        return spec
