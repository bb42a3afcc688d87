"""Report generation for a completed run.

Generates JSON or YAML reports from the root node of the result tree. The
report holds a summary (spec totals and leaf test totals) and the full
serialized tree.
"""

from __future__ import annotations

import datetime
import json
from pathlib import Path
from typing import Any

import yaml

from specrunner.execution.nodes import Node


class Reporter:
    """Builds report data from a result tree."""

    def __init__(self, root: Node) -> None:
        self.root = root

    def generate_report(self) -> dict[str, Any]:
        """Generate the report data structure.

        Returns:
            Dictionary representing the full report, suitable for
            JSON serialization.
        """
        now = datetime.datetime.now(tz=datetime.timezone.utc).isoformat()
        return {
            "generated_at": now,
            "summary": self._compute_summary(),
            "results": self.root.to_dict(),
        }

    def write_report(self, path: Path) -> None:
        """Write the JSON report to ``path``, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.generate_report(), f, indent=2)
            f.write("\n")

    def write_yaml(self, path: Path) -> None:
        """Write the report as YAML to ``path``."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(self.generate_report(), f, sort_keys=False)

    def write(self, path: Path) -> None:
        """Write YAML for .yaml/.yml paths, JSON otherwise."""
        if path.suffix in (".yaml", ".yml"):
            self.write_yaml(path)
        else:
            self.write_report(path)

    def _compute_summary(self) -> dict[str, Any]:
        tests = {"total": 0, "passed": 0, "failed": 0, "skipped": 0}
        for node in self.root.walk():
            if node.kind == "test" and node.is_terminal:
                tests["total"] += 1
                tests[node.state] += 1

        duration = self.root.stop - self.root.start if self.root.stop != -1 else None
        return {
            "state": self.root.state,
            "specs": {
                "total": len(self.root.children or ()),
                "passed": self.root.passed,
                "failed": self.root.failed,
                "skipped": self.root.skipped,
            },
            "tests": tests,
            "duration_ms": duration,
        }
