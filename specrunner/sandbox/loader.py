"""Per-spec module loading.

``require`` inside a spec resolves relative specifiers against the
directory of the file currently being evaluated, trying the literal path,
``<path>.py`` and ``<path>/__init__.py``. Each resolved file is evaluated
once per loader and cached, so a spec sees one shared module per file while
other specs, each with their own loader, never share it. Bare specifiers
are ordinary Python imports.
"""

from __future__ import annotations

import builtins
import importlib
import types
from pathlib import Path
from typing import Any

from specrunner.errors import ResolutionError


def resolve_file(path: Path) -> Path | None:
    """Return the first existing candidate file for ``path``, if any."""
    candidates = (path, path.with_name(path.name + ".py"), path / "__init__.py")
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


class ModuleLoader:
    """Resolves and caches modules required by one spec."""

    def __init__(self, base: dict[str, Any], cwd: Path) -> None:
        self.base = dict(base)
        self.cwd = Path(cwd)
        self.cache: dict[Path, types.ModuleType] = {}

    def namespace(self, filename: Path, name: str | None = None) -> dict[str, Any]:
        """Fresh globals for evaluating ``filename``."""
        namespace: dict[str, Any] = {
            "__builtins__": builtins,
            "__name__": name or filename.stem,
            "__file__": str(filename),
        }
        namespace.update(self.base)
        namespace["require"] = self.require
        return namespace

    def run_file(self, filename: Path, namespace: dict[str, Any]) -> None:
        """Evaluate ``filename`` in ``namespace`` with cwd set to its directory."""
        previous = self.cwd
        self.cwd = filename.parent
        try:
            code = compile(filename.read_text(), str(filename), "exec")
            exec(code, namespace)
        finally:
            self.cwd = previous

    def require(self, specifier: str) -> Any:
        if specifier.startswith((".", "/")):
            return self.load((self.cwd / specifier).resolve())
        return importlib.import_module(specifier)

    def load(self, path: Path) -> types.ModuleType:
        """Load a spec-local module, from the cache when already loaded.

        Raises:
            ResolutionError: If no candidate file exists for ``path``.
        """
        filename = resolve_file(path)
        if filename is None:
            raise ResolutionError(str(path))

        if filename in self.cache:
            return self.cache[filename]

        module = types.ModuleType(filename.stem)
        module.__dict__.update(self.namespace(filename))
        # Cached before evaluation so circular requires see the partial module.
        self.cache[filename] = module
        try:
            self.run_file(filename, module.__dict__)
        except BaseException:
            del self.cache[filename]
            raise
        return module
