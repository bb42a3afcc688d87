"""Spec file evaluation: isolated globals, per-spec require, assertions."""

from specrunner.sandbox.expect import Expectation, expect
from specrunner.sandbox.loader import ModuleLoader, resolve_file
from specrunner.sandbox.sandbox import Sandbox

__all__ = [
    "Expectation",
    "ModuleLoader",
    "Sandbox",
    "expect",
    "resolve_file",
]
