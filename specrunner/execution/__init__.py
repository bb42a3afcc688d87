"""Execution engine: result tree, chains, deadlines and registration."""

from specrunner.execution.chain import Chain
from specrunner.execution.envelope import RetryPolicy, run_with_retries, run_with_timeout
from specrunner.execution.nodes import HookEntry, Node, Scope, ScopeRegistry
from specrunner.execution.registration import RegistrationContext

__all__ = [
    "Chain",
    "HookEntry",
    "Node",
    "RegistrationContext",
    "RetryPolicy",
    "Scope",
    "ScopeRegistry",
    "run_with_retries",
    "run_with_timeout",
]
