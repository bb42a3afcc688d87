"""Registration API for one spec file.

A RegistrationContext is created per spec and handed to the sandbox as the
set of functions a spec file calls: describe, it, before, mit and friends.
Registering never runs the registered body. It creates the node and its
scheduling scope, then queues a step on the main chain of the current
scope. Steps queued on one chain run strictly one after another, and a
suite step settles the suite's own main chain before it finishes, so a
whole spec executes depth-first and serially.

The current scope is tracked with an explicit stack: entering a suite body
pushes the suite, leaving it pops it again.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from functools import partial
from typing import Any

from specrunner.callbacks import invoke
from specrunner.events import EventBus
from specrunner.execution.chain import Chain
from specrunner.execution.envelope import RetryPolicy, run_with_retries, run_with_timeout
from specrunner.execution.nodes import HookEntry, Node, Scope, ScopeRegistry
from specrunner.execution.skip import condition_holds, discard_condition, should_skip

# Marker for tests registered without a cit condition.
UNCONDITIONAL = object()


class RegistrationContext:
    """Binds the registration API to one spec's scope tree."""

    def __init__(
        self,
        spec: Scope,
        registry: ScopeRegistry,
        bus: EventBus | None = None,
        fast_fail: bool = True,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.spec = spec
        self.registry = registry
        self.bus = bus or EventBus()
        self.fast_fail = fast_fail
        self.retry_policy = retry_policy or RetryPolicy()
        self._stack: list[Scope] = [spec]

    @property
    def current(self) -> Scope:
        """The scope new registrations attach to."""
        return self._stack[-1]

    @contextmanager
    def _entered(self, scope: Scope) -> Iterator[Scope]:
        self._stack.append(scope)
        try:
            yield scope
        finally:
            self._stack.pop()

    def api(self) -> dict[str, Any]:
        """Functions exposed to the spec file, by name."""
        return {
            "describe": self.describe,
            "xdescribe": self.xdescribe,
            "mdescribe": self.mdescribe,
            "it": self.it,
            "fit": self.fit,
            "xit": self.xit,
            "xmit": self.xit,
            "cit": self.cit,
            "mit": self.mit,
            "rit": self.rit,
            "before": self.before,
            "before_all": self.before,
            "beforeAll": self.before,
            "after": self.after,
            "after_all": self.after,
            "afterAll": self.after,
            "before_each": self.before_each,
            "beforeEach": self.before_each,
            "after_each": self.after_each,
            "afterEach": self.after_each,
        }

    async def settle(self) -> None:
        """Run everything the spec file registered."""
        await self._settle(self.spec)

    # Hooks

    def _hook(
        self,
        hook_type: str,
        name: Any,
        callback: Callable[..., Any] | None,
        timeout: int | None,
    ) -> None:
        if callback is None and callable(name):
            callback, name = name, getattr(name, "__name__", hook_type)
        if not callable(callback):
            raise TypeError(f"{hook_type} hook {name!r} needs a callable")
        self.current.hooks[hook_type].append(HookEntry(str(name), callback, timeout))

    def before(self, name: Any, callback: Callable[..., Any] | None = None,
               timeout: int | None = None) -> None:
        self._hook("before", name, callback, timeout)

    def after(self, name: Any, callback: Callable[..., Any] | None = None,
              timeout: int | None = None) -> None:
        self._hook("after", name, callback, timeout)

    def before_each(self, name: Any, callback: Callable[..., Any] | None = None,
                    timeout: int | None = None) -> None:
        self._hook("beforeEach", name, callback, timeout)

    def after_each(self, name: Any, callback: Callable[..., Any] | None = None,
                   timeout: int | None = None) -> None:
        self._hook("afterEach", name, callback, timeout)

    async def _run_hooks(self, owner: Scope, hook_type: str, chain: Chain) -> None:
        """Queue one hook node per registered hook on ``chain`` and settle it."""
        for entry in owner.hooks.get(hook_type, ()):
            node = Node(kind="hook", name=entry.name, type=hook_type)
            hook = self.registry.create(node, owner, owner.inherit_timeout(entry.timeout))
            chain.append(partial(self._run_hook, hook, entry))
        await chain.settle()

    async def _run_hook(self, hook: Scope, entry: HookEntry) -> None:
        owner = hook.parent
        owner.node.add_child(hook.node)
        hook.node.begin()
        try:
            await run_with_timeout(entry.callback, hook.timeout)
        except Exception as error:
            hook.node.fail(error)
        else:
            hook.node.finish("passed")
        owner.node.record(hook.node)

    async def _settle(self, scope: Scope) -> None:
        """before hooks, then the main chain, then after hooks."""
        active = scope.node.state != "skipped"
        if active:
            await self._run_hooks(scope, "before", scope.chains["before"])
        await scope.chains["main"].settle()
        if active:
            await self._run_hooks(scope, "after", scope.chains["after"])

    # Suites

    def describe(self, name: str, body: Callable[..., Any],
                 timeout: int | None = None, *args: Any) -> Chain:
        return self._register_suite(self.current, name, body, timeout, args)

    def xdescribe(self, name: str, body: Callable[..., Any],
                  timeout: int | None = None) -> Chain:
        return self._register_suite(self.current, name, body, timeout, (), disabled=True)

    def _register_suite(
        self,
        parent: Scope,
        name: str,
        body: Callable[..., Any],
        timeout: int | None,
        args: tuple[Any, ...],
        chain: Chain | None = None,
        disabled: bool = False,
    ) -> Chain:
        node = Node(kind="suite", name=name)
        suite = self.registry.create(node, parent, parent.inherit_timeout(timeout))
        chain = chain if chain is not None else parent.chains["main"]
        return chain.append(partial(self._run_suite, suite, body, args, disabled))

    async def _run_suite(
        self,
        suite: Scope,
        body: Callable[..., Any],
        args: tuple[Any, ...],
        disabled: bool,
    ) -> None:
        parent, node = suite.parent, suite.node
        parent.node.add_child(node)
        if should_skip(parent.node, self.fast_fail):
            node.skip()
            parent.node.record(node)
            return

        node.begin()
        if disabled:
            # Children still register so they are reported as skipped.
            node.state = "skipped"
        await self.bus.emit("before-suite", node)

        try:
            with self._entered(suite):
                await invoke(body, *args)
        except Exception as error:
            node.retain(error)

        await self._settle(suite)

        if disabled:
            node.finish("skipped")
        else:
            node.resolve()
        parent.node.record(node)
        await self.bus.emit("after-suite", node)

    # Tests

    def it(self, name: str, body: Callable[..., Any],
           timeout: int | None = None, *args: Any) -> Chain:
        return self._register_test(self.current, name, body, timeout, args)

    def cit(self, name: str, condition: Any, body: Callable[..., Any],
            timeout: int | None = None, *args: Any) -> Chain:
        return self._register_test(
            self.current, name, body, timeout, args, condition=condition
        )

    def rit(self, name: str, body: Callable[..., Any],
            timeout: int | None = None, *args: Any) -> Chain:
        return self._register_test(self.current, name, body, timeout, args, retry=True)

    def fit(self, name: str, body: Callable[..., Any] | None = None) -> Chain:
        """Record a test as passed without running it."""
        return self._register_fixed(self.current, name, "passed")

    def xit(self, name: str, body: Callable[..., Any] | None = None,
            *args: Any) -> Chain:
        """Record a test as skipped without running it."""
        return self._register_fixed(self.current, name, "skipped")

    def _register_test(
        self,
        parent: Scope,
        name: str,
        body: Callable[..., Any],
        timeout: int | None,
        args: tuple[Any, ...],
        chain: Chain | None = None,
        condition: Any = UNCONDITIONAL,
        retry: bool = False,
    ) -> Chain:
        node = Node(kind="test", name=name)
        test = self.registry.create(node, parent, parent.inherit_timeout(timeout))
        chain = chain if chain is not None else parent.chains["main"]
        return chain.append(partial(self._run_test, test, body, args, condition, retry))

    async def _run_test(
        self,
        test: Scope,
        body: Callable[..., Any],
        args: tuple[Any, ...],
        condition: Any,
        retry: bool,
    ) -> None:
        parent, node = test.parent, test.node
        parent.node.add_child(node)
        if should_skip(parent.node, self.fast_fail):
            discard_condition(condition)
            node.skip()
            parent.node.record(node)
            return

        if condition is not UNCONDITIONAL:
            try:
                holds = await condition_holds(condition)
            except Exception as error:
                node.fail(error)
                parent.node.record(node)
                return
            if not holds:
                node.skip()
                parent.node.record(node)
                return

        node.begin()
        await self.bus.emit("before-test", node)
        await self._run_hooks(parent, "beforeEach", test.chains["beforeEach"])

        try:
            if retry:
                await run_with_retries(
                    body,
                    test.timeout,
                    self.retry_policy,
                    args,
                    on_attempt=partial(setattr, node, "attempts"),
                )
            else:
                await run_with_timeout(body, test.timeout, *args)
        except Exception as error:
            node.fail(error)
        else:
            node.finish("passed")
        parent.node.record(node)

        await self._run_hooks(parent, "afterEach", test.chains["afterEach"])
        await self.bus.emit("after-test", node)

    def _register_fixed(self, parent: Scope, name: str, state: str) -> Chain:
        node = Node(kind="test", name=name)
        test = self.registry.create(node, parent, parent.timeout)
        return parent.chains["main"].append(partial(self._record_fixed, test, state))

    async def _record_fixed(self, test: Scope, state: str) -> None:
        parent, node = test.parent, test.node
        parent.node.add_child(node)
        if state == "skipped":
            node.skip()
        else:
            node.begin()
            node.finish(state)
        parent.node.record(node)

    # Generators

    def mit(self, name: str, source: Any, body: Callable[..., Any],
            timeout: int | None = None) -> Chain:
        return self._register_generator(self.current, "mit", name, source, body, timeout)

    def mdescribe(self, name: str, source: Any, body: Callable[..., Any],
                  timeout: int | None = None) -> Chain:
        return self._register_generator(
            self.current, "mdescribe", name, source, body, timeout
        )

    def _register_generator(
        self,
        parent: Scope,
        declaration: str,
        name: str,
        source: Any,
        body: Callable[..., Any],
        timeout: int | None,
    ) -> Chain:
        node = Node(kind="generator", name=name, type=declaration)
        generator = self.registry.create(node, parent, parent.inherit_timeout(timeout))
        return parent.chains["main"].append(
            partial(self._expand, generator, source, body, timeout)
        )

    async def _expand(
        self,
        generator: Scope,
        source: Any,
        body: Callable[..., Any],
        timeout: int | None,
    ) -> None:
        """Resolve a generator's values and run one sibling per value.

        The derived suites or tests are queued on the generator's own main
        chain, which is settled before this step returns, so siblings
        declared after the generator wait for the whole expansion.
        """
        parent, node = generator.parent, generator.node
        parent.node.add_child(node)
        if should_skip(parent.node, self.fast_fail):
            node.skip()
            parent.node.record(node)
            return

        node.begin()
        try:
            values = await resolve_values(source, generator.timeout)
        except Exception as error:
            node.fail(error)
            parent.node.record(node)
            return
        node.finish("passed")
        parent.node.record(node)

        chain = generator.chains["main"]
        register = self._register_suite if node.type == "mdescribe" else self._register_test
        for index, value in enumerate(values):
            register(parent, f"{node.name} - {index + 1}", body, timeout,
                     (value, index), chain=chain)
        await chain.settle()


async def resolve_values(source: Any, timeout: int) -> list[Any]:
    """Turn a generator source into its list of values.

    ``source`` is either a literal sequence or a (possibly async) callable
    producing one, invoked under the generator's deadline.
    """
    values = await run_with_timeout(source, timeout) if callable(source) else source
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        raise TypeError(
            f"Generator values must be a sequence, got {type(values).__name__}"
        )
    return list(values)
