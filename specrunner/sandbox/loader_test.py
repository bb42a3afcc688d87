"""Unit tests for per-spec module loading."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from specrunner.errors import ResolutionError
from specrunner.sandbox.loader import ModuleLoader, resolve_file


class TestResolveFile:
    """Tests for candidate file resolution."""

    def test_literal_path(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "helpers.py"
            path.write_text("")
            assert resolve_file(path) == path

    def test_py_suffix_added(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "helpers.py"
            path.write_text("")
            assert resolve_file(Path(tmpdir) / "helpers") == path

    def test_package_init(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            package = Path(tmpdir) / "fixtures"
            package.mkdir()
            (package / "__init__.py").write_text("")
            assert resolve_file(package) == package / "__init__.py"

    def test_missing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            assert resolve_file(Path(tmpdir) / "nothing") is None


class TestModuleLoader:
    """Tests for require() and the module cache."""

    def test_relative_require(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "helpers.py").write_text("VALUE = 42\n")
            loader = ModuleLoader({}, cwd=Path(tmpdir))
            module = loader.require("./helpers")
            assert module.VALUE == 42

    def test_cached_within_loader(self):
        """Requiring the same file twice returns the same module object."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "state.py").write_text("items = []\n")
            loader = ModuleLoader({}, cwd=Path(tmpdir))
            first = loader.require("./state")
            first.items.append(1)
            second = loader.require("./state.py")
            assert second is first
            assert second.items == [1]

    def test_not_shared_between_loaders(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "state.py").write_text("items = []\n")
            one = ModuleLoader({}, cwd=Path(tmpdir)).require("./state")
            two = ModuleLoader({}, cwd=Path(tmpdir)).require("./state")
            assert one is not two

    def test_missing_file_raises_resolution_error(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            loader = ModuleLoader({}, cwd=Path(tmpdir))
            with pytest.raises(ResolutionError, match="No such file"):
                loader.require("./missing")

    def test_resolution_error_is_import_error(self):
        assert isinstance(ResolutionError("/x"), ImportError)

    def test_nested_require_is_relative_to_requiring_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            lib = Path(tmpdir) / "lib"
            lib.mkdir()
            (lib / "inner.py").write_text("NAME = 'inner'\n")
            (lib / "outer.py").write_text("inner = require('./inner')\n")
            loader = ModuleLoader({}, cwd=Path(tmpdir))
            outer = loader.require("./lib/outer")
            assert outer.inner.NAME == "inner"
            assert loader.cwd == Path(tmpdir)

    def test_base_names_are_visible(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "uses_base.py").write_text("RESULT = greet('spec')\n")
            loader = ModuleLoader({"greet": lambda who: f"hello {who}"}, cwd=Path(tmpdir))
            assert loader.require("./uses_base").RESULT == "hello spec"

    def test_bare_specifier_imports(self):
        loader = ModuleLoader({}, cwd=Path.cwd())
        assert loader.require("json") is json

    def test_failed_module_is_not_cached(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "broken.py").write_text("raise RuntimeError('bad module')\n")
            loader = ModuleLoader({}, cwd=Path(tmpdir))
            with pytest.raises(RuntimeError, match="bad module"):
                loader.require("./broken")
            assert loader.cache == {}
