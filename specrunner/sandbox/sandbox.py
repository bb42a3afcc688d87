"""Isolated evaluation of spec files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from specrunner.sandbox.expect import expect
from specrunner.sandbox.loader import ModuleLoader


class Sandbox:
    """Evaluates a spec file once in fresh globals built from its API.

    Evaluation is synchronous: it returns as soon as the file's top level
    has run. Work the file registered is tracked by the registration
    context, not by the sandbox.
    """

    def __init__(self, preload: str | Path | None = None) -> None:
        self.preload = Path(preload).resolve() if preload else None

    def evaluate(self, path: str | Path, api: dict[str, Any]) -> ModuleLoader:
        """Run ``path`` against ``api`` and return the spec's loader.

        The optional preload file runs first, in the same globals.
        """
        filename = Path(path).resolve()
        loader = ModuleLoader({**api, "expect": expect}, cwd=filename.parent)
        namespace = loader.namespace(filename)
        if self.preload is not None:
            loader.run_file(self.preload, namespace)
        loader.run_file(filename, namespace)
        return loader
