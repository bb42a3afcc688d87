"""Runner configuration.

Reads an optional JSON or YAML configuration file, merges it over the
defaults and applies explicit overrides (typically from the command line).
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import yaml

from specrunner.execution.envelope import DEFAULT_NON_RETRYABLE, RetryPolicy

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "name": "specrunner",
    "pattern": "**/*_spec.py",
    "concurrency": 5,
    "parallel": True,
    "fast_fail": True,
    "timeout": 5000,
    "preload": None,
    "retries": {
        "delay": 100,
        "maximum": 10,
        "non_retryable": list(DEFAULT_NON_RETRYABLE),
    },
}


# camelCase spellings accepted in configuration files.
KEY_ALIASES = {
    "fastFail": "fast_fail",
    "nonRetryable": "non_retryable",
    "nonRetryableCategories": "non_retryable",
}


def _normalize(data: dict[str, Any]) -> dict[str, Any]:
    """Rename aliased keys to their snake_case form, nested dicts included."""
    normalized: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            value = _normalize(value)
        normalized[KEY_ALIASES.get(key, key)] = value
    return normalized


def _merge(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    """Merge ``update`` into a copy of ``base``, nested dicts key by key."""
    merged = copy.deepcopy(base)
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class RunnerConfig:
    """Configuration for one run."""

    def __init__(
        self,
        path: Path | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> None:
        self.path = path
        self._data: dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)
        if path is not None and path.exists():
            self._load()
        if overrides:
            self._data = _merge(
                self._data,
                {key: value for key, value in overrides.items() if value is not None},
            )

    def _load(self) -> None:
        """Load config from the file."""
        assert self.path is not None
        try:
            text = self.path.read_text()
            if self.path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(text)
            else:
                data = json.loads(text)
            if isinstance(data, dict):
                self._data = _merge(DEFAULT_CONFIG, _normalize(data))
        except (json.JSONDecodeError, yaml.YAMLError, OSError):
            self._data = copy.deepcopy(DEFAULT_CONFIG)

    @property
    def config(self) -> dict[str, Any]:
        """Get the full configuration dict."""
        return copy.deepcopy(self._data)

    @property
    def name(self) -> str:
        return str(self._data.get("name", DEFAULT_CONFIG["name"]))

    @property
    def pattern(self) -> str:
        """Default glob for spec files."""
        return str(self._data.get("pattern", DEFAULT_CONFIG["pattern"]))

    @property
    def concurrency(self) -> int:
        """Get the number of spec files run at once."""
        value = int(self._data.get("concurrency", DEFAULT_CONFIG["concurrency"]))
        if value < 1:
            raise ValueError(f"concurrency must be a positive integer, got {value}")
        return value

    @property
    def parallel(self) -> bool:
        return bool(self._data.get("parallel", DEFAULT_CONFIG["parallel"]))

    @property
    def workers(self) -> int:
        """Worker count actually used: 1 when parallel is off."""
        return self.concurrency if self.parallel else 1

    @property
    def fast_fail(self) -> bool:
        return bool(self._data.get("fast_fail", DEFAULT_CONFIG["fast_fail"]))

    @property
    def timeout(self) -> int:
        """Get the default callback timeout in ms (0 = unbounded)."""
        value = int(self._data.get("timeout", DEFAULT_CONFIG["timeout"]))
        if value < 0:
            raise ValueError(f"timeout must not be negative, got {value}")
        return value

    @property
    def preload(self) -> Path | None:
        val = self._data.get("preload")
        return Path(val) if val else None

    @property
    def retry_policy(self) -> RetryPolicy:
        """Get the retry settings used by rit tests."""
        retries = self._data.get("retries") or {}
        defaults = DEFAULT_CONFIG["retries"]
        return RetryPolicy(
            delay=int(retries.get("delay", defaults["delay"])),
            maximum=int(retries.get("maximum", defaults["maximum"])),
            non_retryable=tuple(retries.get("non_retryable", defaults["non_retryable"])),
        )

    def validate(self) -> None:
        """Raise ValueError if any setting is out of range."""
        _ = (self.concurrency, self.timeout, self.retry_policy)
