from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal, TypeAlias

from continuum.domain.errors import ConfigurationError
from continuum.domain.models.session import (
    coerce_failure_policy,
    coerce_output_format,
    validate_max_attempts,
)
from continuum.domain.types import FailurePolicy, OutputFormat

LoggerName: TypeAlias = Literal["none", "console", "jsonl"]

LOGGER_NAMES: frozenset[str] = frozenset({"none", "console", "jsonl"})
RETRY_KEYS: frozenset[str] = frozenset(
    {"max_attempts", "base_delay_seconds", "max_delay_seconds", "jitter_seconds"}
)


@dataclass(frozen=True, slots=True)
class LoggerConfig:
    """
    Logger selection for config-driven construction.

    Built into a concrete adapter by `continuum.api.registries`.
    """

    logger: LoggerName = "none"
    logger_kwargs: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.logger not in LOGGER_NAMES:
            raise ValueError(
                f"LoggerConfig.logger must be one of {sorted(LOGGER_NAMES)}, got {self.logger!r}"
            )
        if not isinstance(self.logger_kwargs, dict):
            raise ValueError("LoggerConfig.logger_kwargs must be a dict")

    @classmethod
    def from_value(cls, value: object) -> LoggerConfig:
        """Accept a `LoggerConfig`, a bare logger name, or a mapping."""
        if isinstance(value, LoggerConfig):
            return value
        if value is None:
            return cls()
        if isinstance(value, str):
            return cls(logger=value)  # type: ignore[arg-type]
        if isinstance(value, Mapping):
            return cls(
                logger=value.get("logger", "none"),
                logger_kwargs=dict(value.get("logger_kwargs", {}) or {}),
            )
        raise ValueError(f"Unsupported logger config: {type(value).__name__}")


@dataclass(frozen=True, slots=True)
class ContinuationConfig:
    """
    Declarative continuation settings.

    `max_attempts`, `output_format` and `on_failure` are validated eagerly and
    normalized to their enum types, so a bad config raises `ConfigurationError`
    at construction time, long before any provider call.
    """

    max_attempts: int = 10
    output_format: OutputFormat = OutputFormat.AUTO
    on_failure: FailurePolicy = FailurePolicy.RETURN_PARTIAL
    retry_kwargs: dict[str, Any] = field(default_factory=dict)
    model: str | None = None
    json_schema: Any = None
    logger: LoggerConfig = field(default_factory=LoggerConfig)
    costs: dict[str, tuple[float, float]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "max_attempts", validate_max_attempts(self.max_attempts))
        object.__setattr__(self, "output_format", coerce_output_format(self.output_format))
        object.__setattr__(self, "on_failure", coerce_failure_policy(self.on_failure))

        if not isinstance(self.retry_kwargs, dict):
            raise ConfigurationError("retry_kwargs must be a dict")
        unknown = set(self.retry_kwargs) - RETRY_KEYS
        if unknown:
            raise ConfigurationError(
                f"Unknown retry settings: {sorted(unknown)}. Allowed: {sorted(RETRY_KEYS)}"
            )
        if self.model is not None and (not isinstance(self.model, str) or not self.model.strip()):
            raise ConfigurationError("model must be a non-empty string when set")
        if not isinstance(self.logger, LoggerConfig):
            raise ConfigurationError("logger must be a LoggerConfig")
        if not isinstance(self.costs, dict):
            raise ConfigurationError("costs must be a dict of model -> (input_per_1k, output_per_1k)")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ContinuationConfig:
        """
        Build from a plain mapping (YAML/JSON config, agent DSL options).

        `format` and `on_failure_policy` are accepted as aliases for
        `output_format` and `on_failure`. Unknown keys are rejected.
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError("Continuation config must be a mapping")
        values = dict(data)
        aliases = {"format": "output_format", "on_failure_policy": "on_failure", "retry": "retry_kwargs"}
        for alias, canonical in aliases.items():
            if alias in values:
                if canonical in values:
                    raise ConfigurationError(f"Use either {alias!r} or {canonical!r}, not both")
                values[canonical] = values.pop(alias)

        allowed = {
            "max_attempts",
            "output_format",
            "on_failure",
            "retry_kwargs",
            "model",
            "json_schema",
            "logger",
            "costs",
        }
        unknown = set(values) - allowed
        if unknown:
            raise ConfigurationError(
                f"Unknown continuation config keys: {sorted(unknown)}. Allowed: {sorted(allowed)}"
            )

        try:
            logger = LoggerConfig.from_value(values.pop("logger", None))
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        costs = {
            str(model): tuple(pair)  # type: ignore[misc]
            for model, pair in dict(values.pop("costs", {}) or {}).items()
        }
        return cls(logger=logger, costs=costs, **values)  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_attempts": self.max_attempts,
            "output_format": self.output_format.value,
            "on_failure": self.on_failure.value,
            "retry_kwargs": dict(self.retry_kwargs),
            "model": self.model,
            "logger": {"logger": self.logger.logger, "logger_kwargs": dict(self.logger.logger_kwargs)},
            "costs": {model: list(pair) for model, pair in self.costs.items()},
        }
