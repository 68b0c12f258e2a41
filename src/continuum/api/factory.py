from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from continuum.api.continuum import Continuum
from continuum.api.registries import (
    DefaultLoggerRegistry,
    LoggerRegistry,
    cost_table_from_config,
    retry_policy_from_kwargs,
)
from continuum.application.config import ContinuationConfig
from continuum.domain.ports import (
    CostTablePort,
    IdGeneratorPort,
    LoggerPort,
    ProgressCallbackPort,
    RequestCallbackPort,
    SleeperPort,
)
from continuum.domain.services.progress import ProgressCallbackRegistry


def create_continuum(
    request_callback: RequestCallbackPort,
    *,
    format: str = "auto",  # noqa: A002 - public vocabulary
    max_attempts: int = 10,
    on_failure_policy: str = "return_partial",
    logger: LoggerPort | None = None,
    cost_table: CostTablePort | None = None,
    progress_callbacks: Iterable[ProgressCallbackPort] = (),
) -> Continuum:
    """Convenience factory for the public `Continuum` facade."""
    config = ContinuationConfig(
        max_attempts=max_attempts,
        output_format=format,  # type: ignore[arg-type]
        on_failure=on_failure_policy,  # type: ignore[arg-type]
    )
    return Continuum(
        request_callback,
        config=config,
        logger=logger,
        cost_table=cost_table,
        progress_registry=ProgressCallbackRegistry(list(progress_callbacks)),
    )


def create_continuum_from_config(
    config: ContinuationConfig | Mapping[str, Any],
    request_callback: RequestCallbackPort,
    *,
    logger: LoggerPort | None = None,
    logger_registry: LoggerRegistry | None = None,
    cost_table: CostTablePort | None = None,
    progress_callbacks: Iterable[ProgressCallbackPort] = (),
    sleeper: SleeperPort | None = None,
    id_generator: IdGeneratorPort | None = None,
) -> Continuum:
    """
    Construct a `Continuum` from config.

    An explicit `logger` or `cost_table` wins over what the config describes;
    otherwise they are built from `config.logger` and `config.costs`.
    """
    cfg = config if isinstance(config, ContinuationConfig) else ContinuationConfig.from_dict(config)
    if logger is None:
        logger = (logger_registry or DefaultLoggerRegistry()).build(cfg.logger)
    if cost_table is None:
        cost_table = cost_table_from_config(cfg)

    return Continuum(
        request_callback,
        config=cfg,
        logger=logger,
        cost_table=cost_table,
        retry_policy=retry_policy_from_kwargs(cfg.retry_kwargs),
        sleeper=sleeper,
        id_generator=id_generator,
        progress_registry=ProgressCallbackRegistry(list(progress_callbacks)),
    )
