"""Asynchronous spec runner with describe/it style registration."""

__version__ = "0.1.0"
