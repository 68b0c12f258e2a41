from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from continuum.adapters.cost.static import StaticCostTable
from continuum.adapters.llm.retry import ExponentialBackoffRetryPolicy, RetryConfig
from continuum.application.config import ContinuationConfig, LoggerConfig
from continuum.domain.errors import ConfigurationError
from continuum.domain.ports import CostTablePort, LoggerPort, RetryPolicyPort
from continuum.domain.services.mergers import JsonValidator


class LoggerRegistry(Protocol):
    """Select/build a `LoggerPort` (or None) from `LoggerConfig`."""

    def build(self, config: LoggerConfig, /) -> LoggerPort | None: ...


@dataclass(frozen=True, slots=True)
class DefaultLoggerRegistry(LoggerRegistry):
    """
    Default logger registry.

    Supported values:
    - logger='none': disables logging
    - logger='console': print-based adapter (`enabled` kwarg)
    - logger='jsonl': JSONL adapter (requires `log_dir`)
    """

    def build(self, config: LoggerConfig, /) -> LoggerPort | None:
        kwargs = config.logger_kwargs
        match config.logger:
            case "none":
                return None
            case "console":
                from continuum.adapters.logger.console import ConsoleLoggerAdapter

                enabled = kwargs.get("enabled", True)
                if not isinstance(enabled, bool):
                    raise ValueError("LoggerConfig.logger_kwargs['enabled'] must be a bool")
                return ConsoleLoggerAdapter(enabled=enabled)
            case "jsonl":
                from continuum.adapters.logger.jsonl import JsonlLoggerAdapter

                log_dir = kwargs.get("log_dir")
                if not isinstance(log_dir, str) or not log_dir.strip():
                    raise ValueError("LoggerConfig for 'jsonl' requires logger_kwargs['log_dir']")
                file_name = kwargs.get("file_name", "continuum")
                if not isinstance(file_name, str) or not file_name.strip():
                    raise ValueError(
                        "LoggerConfig.logger_kwargs['file_name'] must be a non-empty string"
                    )
                rotate_per_run = kwargs.get("rotate_per_run", True)
                if not isinstance(rotate_per_run, bool):
                    raise ValueError("LoggerConfig.logger_kwargs['rotate_per_run'] must be a bool")
                return JsonlLoggerAdapter(
                    log_dir=log_dir, file_name=file_name, rotate_per_run=rotate_per_run
                )
            case _:
                raise ValueError(f"Unknown logger: {config.logger!r}")


def logger_from_config(config: LoggerConfig, /) -> LoggerPort | None:
    return DefaultLoggerRegistry().build(config)


def retry_policy_from_kwargs(retry_kwargs: Mapping[str, Any], /) -> RetryPolicyPort:
    try:
        return ExponentialBackoffRetryPolicy(RetryConfig.from_dict(dict(retry_kwargs)))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid retry settings: {exc}") from exc


def cost_table_from_config(config: ContinuationConfig, /) -> CostTablePort | None:
    if not config.costs:
        return None
    return StaticCostTable(config.costs)


def json_validator_from_schema(schema: Any, /) -> JsonValidator | None:
    """A pydantic-backed validator for `schema`, or None when no schema is set."""
    if schema is None:
        return None
    from continuum.adapters.validation.pydantic_schema import PydanticSchemaValidator

    return PydanticSchemaValidator(schema)
