from __future__ import annotations

from typing import Any

from continuum.adapters.llm.retry import ExponentialBackoffRetryPolicy
from continuum.adapters.system import TimeSleeper, UuidIdGenerator
from continuum.api.registries import json_validator_from_schema
from continuum.application.config import ContinuationConfig
from continuum.application.use_cases import (
    RunSessionDeps,
    RunSessionRequest,
    run_continuation_session,
)
from continuum.domain.models import MergeResult
from continuum.domain.ports import (
    CostTablePort,
    IdGeneratorPort,
    LoggerPort,
    ProgressCallbackPort,
    RequestCallbackPort,
    RetryPolicyPort,
    SleeperPort,
)
from continuum.domain.services.progress import ProgressCallbackRegistry
from continuum.domain.types import InitialRequest


class Continuum:
    """
    Reusable continuation facade.

    Binds a request callback and a `ContinuationConfig` once; every `run()`
    starts an independent session, so one instance can serve concurrent
    callers. Progress callbacks registered on the facade are shared by all of
    its sessions.
    """

    def __init__(
        self,
        request_callback: RequestCallbackPort,
        *,
        config: ContinuationConfig | None = None,
        logger: LoggerPort | None = None,
        cost_table: CostTablePort | None = None,
        retry_policy: RetryPolicyPort | None = None,
        sleeper: SleeperPort | None = None,
        id_generator: IdGeneratorPort | None = None,
        progress_registry: ProgressCallbackRegistry | None = None,
    ) -> None:
        self._request_callback = request_callback
        self._config = config or ContinuationConfig()
        self._logger = logger
        self._cost_table = cost_table
        self._retry_policy = retry_policy or ExponentialBackoffRetryPolicy()
        self._sleeper = sleeper or TimeSleeper()
        self._id_generator = id_generator or UuidIdGenerator()
        self._progress = (
            progress_registry if progress_registry is not None else ProgressCallbackRegistry()
        )
        # Built once so a missing pydantic install fails at construction time.
        self._json_validator = json_validator_from_schema(self._config.json_schema)

    @property
    def config(self) -> ContinuationConfig:
        return self._config

    @property
    def progress(self) -> ProgressCallbackRegistry:
        return self._progress

    def on_progress(self, callback: ProgressCallbackPort, /) -> ProgressCallbackPort:
        """Register a progress callback; usable as a decorator."""
        self._progress.register(callback)
        return callback

    def run(self, initial_request: InitialRequest, /, **overrides: Any) -> MergeResult:
        """
        Run one session with this facade's config.

        `overrides` may replace `format`, `max_attempts` or `on_failure_policy`
        for this call only.
        """
        unknown = set(overrides) - {"format", "max_attempts", "on_failure_policy"}
        if unknown:
            raise TypeError(f"Unexpected run() overrides: {sorted(unknown)}")

        deps = RunSessionDeps(
            request_callback=self._request_callback,
            logger=self._logger,
            progress=self._progress,
            cost_table=self._cost_table,
            retry_policy=self._retry_policy,
            sleeper=self._sleeper,
            id_generator=self._id_generator,
            json_validator=self._json_validator,
        )
        req = RunSessionRequest(
            initial_request=initial_request,
            format=overrides.get("format", self._config.output_format),
            max_attempts=overrides.get("max_attempts", self._config.max_attempts),
            on_failure_policy=overrides.get("on_failure_policy", self._config.on_failure),
        )
        return run_continuation_session(req, deps=deps)
