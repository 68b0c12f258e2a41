"""Logger adapters implementing `LoggerPort`."""

from __future__ import annotations

from continuum.adapters.logger.console import ConsoleLoggerAdapter
from continuum.adapters.logger.jsonl import JsonlLoggerAdapter
from continuum.adapters.logger.noop import NoopLoggerAdapter

__all__ = ["ConsoleLoggerAdapter", "JsonlLoggerAdapter", "NoopLoggerAdapter"]
