"""Entry point for the spec runner.

Parses command-line arguments, discovers spec files, runs them through the
scheduler and reports the results. The exit status is 1 when the run
failed and 0 otherwise.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from specrunner.config import RunnerConfig
from specrunner.discovery import find_spec_files
from specrunner.execution.scheduler import SpecScheduler
from specrunner.reporting.reporter import Reporter
from specrunner.reporting.terminal import TerminalReporter


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Spec runner - executes describe/it style spec files"
    )
    parser.add_argument(
        "patterns",
        nargs="*",
        help="Spec files or glob patterns (default: the configured pattern)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a JSON or YAML configuration file",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Number of spec files run at once",
    )
    parser.add_argument(
        "--serial",
        action="store_true",
        default=False,
        help="Run spec files one at a time (same as concurrency 1)",
    )
    parser.add_argument(
        "--no-fast-fail",
        action="store_true",
        default=False,
        help="Keep running sibling tests after a failure",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=None,
        help="Default callback timeout in milliseconds (0 disables it)",
    )
    parser.add_argument(
        "--preload",
        type=Path,
        default=None,
        help="File evaluated in every spec's globals before the spec",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to write the report (.yaml/.yml for YAML, JSON otherwise)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Print the full result tree at the end of the run",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> RunnerConfig:
    """Load the configuration file and apply command-line overrides."""
    overrides = {
        "concurrency": args.concurrency,
        "timeout": args.timeout,
        "preload": os.fspath(args.preload) if args.preload else None,
    }
    if args.serial:
        overrides["parallel"] = False
    if args.no_fast_fail:
        overrides["fast_fail"] = False
    return RunnerConfig(args.config, overrides)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = build_config(args)
        config.validate()
    except ValueError as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return 1

    patterns = args.patterns or [config.pattern]
    files = find_spec_files(patterns)
    if not files:
        print(f"Error: No spec files match: {' '.join(patterns)}", file=sys.stderr)
        return 1

    scheduler = SpecScheduler(config)
    TerminalReporter(verbose=args.verbose).attach(scheduler.bus)
    scheduler.add_files(files)

    if config.workers > 1 and len(files) > 1:
        print(f"Running {len(files)} spec files, {config.workers} at a time")

    root = scheduler.execute()

    if args.output:
        Reporter(root).write(args.output)
        print(f"Report written to: {args.output}")

    return 1 if root.state == "failed" else 0


if __name__ == "__main__":
    sys.exit(main())
