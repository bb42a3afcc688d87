"""Test result reporting: JSON/YAML reports and terminal output."""

from specrunner.reporting.reporter import Reporter
from specrunner.reporting.terminal import TerminalReporter, render_tree

__all__ = [
    "Reporter",
    "TerminalReporter",
    "render_tree",
]
