"""Unit tests for spec file discovery."""

from __future__ import annotations

import tempfile
from pathlib import Path

from specrunner.discovery import find_spec_files


def _touch(base: Path, *names: str) -> None:
    for name in names:
        path = base / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("")


class TestFindSpecFiles:
    """Tests for find_spec_files."""

    def test_recursive_pattern(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            base = Path(tmpdir)
            _touch(base, "a_spec.py", "nested/deeper/b_spec.py", "helpers.py")
            found = find_spec_files(["**/*_spec.py"], base=base)
        assert found == ["a_spec.py", "nested/deeper/b_spec.py"]

    def test_overlapping_patterns_deduplicated(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            base = Path(tmpdir)
            _touch(base, "a_spec.py", "b_spec.py")
            found = find_spec_files(["*_spec.py", "a_spec.py"], base=base)
        assert found == ["a_spec.py", "b_spec.py"]

    def test_directories_ignored(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            base = Path(tmpdir)
            (base / "dir_spec.py").mkdir()
            _touch(base, "real_spec.py")
            assert find_spec_files(["*_spec.py"], base=base) == ["real_spec.py"]

    def test_absolute_pattern(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            base = Path(tmpdir)
            _touch(base, "a_spec.py")
            found = find_spec_files([str(base / "*_spec.py")])
        assert found == [str(base / "a_spec.py")]

    def test_no_matches(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            assert find_spec_files(["*_spec.py"], base=Path(tmpdir)) == []
