"""Spec file discovery from glob patterns."""

from __future__ import annotations

import glob
from collections.abc import Iterable
from pathlib import Path


def find_spec_files(patterns: Iterable[str], base: Path | None = None) -> list[str]:
    """Expand glob patterns into a sorted, de-duplicated list of files.

    Args:
        patterns: Glob patterns (``**`` is recursive) or plain file paths.
        base: Directory relative patterns are resolved against
            (default: current working directory).

    Returns:
        Matching file paths, relative to ``base`` where the pattern was.
    """
    base = base or Path.cwd()
    found: set[str] = set()
    for pattern in patterns:
        for match in glob.glob(pattern, root_dir=base, recursive=True):
            if (base / match).is_file():
                found.add(match)
    return sorted(found)
