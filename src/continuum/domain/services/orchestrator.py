from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

from continuum.domain.errors import ContinuumError, MergeError, ProviderError
from continuum.domain.models.chunk import Chunk
from continuum.domain.models.events import AttemptRecord, Notice, ProgressEvent
from continuum.domain.models.merge_result import (
    ERROR_KIND_MERGE,
    ERROR_KIND_PROVIDER,
    ErrorInfo,
    MergeResult,
)
from continuum.domain.models.metadata import (
    WARNING_FALLBACK_USED,
    WARNING_MAX_ATTEMPTS_EXCEEDED,
    WARNING_MISSING_CONTINUATION_HANDLE,
    SessionMetadata,
    SessionMetadataAccumulator,
)
from continuum.domain.models.provider_response import ProviderResponse
from continuum.domain.models.session import ContinuationSession
from continuum.domain.ports import (
    CostTablePort,
    IdGeneratorPort,
    LoggerPort,
    RequestCallbackPort,
    RetryPolicyPort,
    SleeperPort,
)
from continuum.domain.services.fallback import FailureFallbackChain
from continuum.domain.services.mergers import BaseMerger, JsonValidator
from continuum.domain.services.progress import ProgressCallbackRegistry
from continuum.domain.services.selector import MergerSelector
from continuum.domain.services.termination import (
    classify,
    notice_message,
    notice_severity,
    verdict_for,
)
from continuum.domain.types import (
    FailurePolicy,
    InitialRequest,
    OutputFormat,
    ProgressPhase,
    SessionStatus,
    Severity,
    TerminationKind,
    Verdict,
)


class _RequestFailed(Exception):
    """Internal: the request callback failed for good (persistent or retries exhausted)."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(str(cause))
        self.cause = cause


def _describe_provider_failure(exc: BaseException, /) -> str:
    # Foreign exception text may embed provider payloads or credentials.
    if isinstance(exc, ContinuumError):
        return str(exc)
    return f"Request callback raised {type(exc).__name__}"


@dataclass(slots=True, frozen=True)
class ContinuationOrchestrator:
    """
    Drives one continuation session from the first request to the merged payload.

    State machine (per call to `run`):

        init -> requesting -> classifying -> (continuing -> requesting | merging)
             -> completed | partial_failure | max_attempts_exceeded | failed

    - init validates the session parameters; `ConfigurationError` surfaces
      before any request is issued.
    - Each request appends exactly one chunk. Transient request failures are
      retried through `retry_policy` without consuming an attempt.
    - A length-truncated response at the attempt ceiling is still merged; the
      result carries a `max_attempts_exceeded` warning instead of an error.
    - An abort verdict or a persistent request failure ends the session as
      `failed` with no merge attempted.
    - A MergeError is handed to the fallback chain under `return_partial`, or
      re-raised with session context under `raise_error`.
    """

    request_callback: RequestCallbackPort
    logger: LoggerPort | None = None
    cost_table: CostTablePort | None = None
    retry_policy: RetryPolicyPort | None = None
    sleeper: SleeperPort | None = None
    id_generator: IdGeneratorPort | None = None
    progress: ProgressCallbackRegistry | None = None
    json_validator: JsonValidator | None = None

    def run(
        self,
        initial_request: InitialRequest,
        *,
        format: OutputFormat | str = OutputFormat.AUTO,  # noqa: A002 - public vocabulary
        max_attempts: int = 10,
        on_failure_policy: FailurePolicy | str = FailurePolicy.RETURN_PARTIAL,
    ) -> MergeResult:
        session_id = self.id_generator.new_id() if self.id_generator else uuid4().hex
        session = ContinuationSession(
            session_id=session_id,
            format=format,  # type: ignore[arg-type] - coerced in __post_init__
            max_attempts=max_attempts,
            on_failure_policy=on_failure_policy,  # type: ignore[arg-type]
        )
        acc = SessionMetadataAccumulator(session_id=session_id)
        selector = MergerSelector(format=session.format, json_validator=self.json_validator)

        self._emit(ProgressPhase.START, session, attempt_number=0)

        pending_status: SessionStatus | None = None
        while pending_status is None:
            handle = self._next_handle(session, acc)
            try:
                response = self._request(initial_request, handle, session, acc)
            except _RequestFailed as failure:
                return self._fail(
                    session, acc, _describe_provider_failure(failure.cause), payload=""
                )

            chunk = self._record(session, acc, response, resumed_from=handle)

            match verdict_for(chunk.termination):
                case Verdict.ABORT:
                    return self._fail(session, acc, notice_message(chunk.termination), payload="")
                case Verdict.STOP:
                    pending_status = SessionStatus.COMPLETED
                case Verdict.CONTINUE if session.at_ceiling:
                    acc.warn(WARNING_MAX_ATTEMPTS_EXCEEDED)
                    self._notice(
                        Severity.WARNING,
                        f"Reached max_attempts={session.max_attempts} while output was still "
                        "truncated; merging what was received.",
                        session,
                    )
                    pending_status = SessionStatus.MAX_ATTEMPTS_EXCEEDED
                case Verdict.CONTINUE:
                    merger = selector.select(session.chunks)
                    acc.add_truncation_point(
                        merger.boundary_marker("".join(c.raw_content for c in session.chunks))
                    )

        return self._merge(session, acc, selector, pending_status)

    # ─────────────────────────────────────────────────────────────────────
    # Requesting / classifying
    # ─────────────────────────────────────────────────────────────────────

    def _next_handle(
        self, session: ContinuationSession, acc: SessionMetadataAccumulator
    ) -> str | None:
        last = session.last_chunk
        if last is None:
            return None
        if last.continuation_handle is None:
            acc.warn(WARNING_MISSING_CONTINUATION_HANDLE)
            self._notice(
                Severity.WARNING,
                f"Chunk {last.sequence_index} carried no continuation handle; the next request "
                "is issued without one.",
                session,
            )
        return last.continuation_handle

    def _request(
        self,
        initial_request: InitialRequest,
        handle: str | None,
        session: ContinuationSession,
        acc: SessionMetadataAccumulator,
    ) -> ProviderResponse:
        retries = 0
        while True:
            try:
                response = self.request_callback(initial_request, handle)
                if not isinstance(response, ProviderResponse):
                    raise ProviderError(
                        "Request callback must return ProviderResponse, got "
                        f"{type(response).__name__}"
                    )
                return response
            except Exception as exc:  # noqa: BLE001 - boundary: callback failures become session outcomes
                policy = self.retry_policy
                if policy is None or retries >= policy.max_retries or not policy.is_retryable(exc):
                    self._notice(
                        Severity.ERROR,
                        f"Request for attempt {session.attempts_made + 1} failed: "
                        f"{_describe_provider_failure(exc)}",
                        session,
                    )
                    raise _RequestFailed(exc) from exc
                retries += 1
                acc.add_retry()
                delay = policy.delay_for(retries)
                self._notice(
                    Severity.INFO,
                    f"Transient provider error ({type(exc).__name__}); retry {retries}/"
                    f"{policy.max_retries} in {delay:.2f}s",
                    session,
                )
                if self.sleeper is not None and delay > 0:
                    self.sleeper.sleep(delay)

    def _record(
        self,
        session: ContinuationSession,
        acc: SessionMetadataAccumulator,
        response: ProviderResponse,
        *,
        resumed_from: str | None,
    ) -> Chunk:
        classification = classify(response)
        chunk = Chunk(
            sequence_index=len(session.chunks),
            raw_content=response.content or "",
            termination=classification.kind,
            usage=response.usage,
            continuation_handle=response.continuation_handle,
            resumed_from=resumed_from,
        )
        session.record_chunk(chunk)
        acc.add_chunk(chunk, cost=self._price(response))

        if self.logger is not None:
            self.logger.log_attempt(
                AttemptRecord(
                    session_id=session.session_id,
                    attempt_number=session.attempts_made,
                    termination=classification.kind,
                    verdict=classification.verdict,
                    usage=response.usage,
                    content_length=len(chunk.raw_content),
                    continuation_handle=response.continuation_handle,
                    finish_reason=response.finish_reason,
                )
            )
        severity = notice_severity(classification.kind)
        if severity is not None:
            self._notice(severity, notice_message(classification.kind), session)

        self._emit(
            ProgressPhase.ATTEMPT,
            session,
            attempt_number=session.attempts_made,
            termination_kind=classification.kind,
        )
        return chunk

    def _price(self, response: ProviderResponse) -> float:
        if response.cost is not None:
            return float(response.cost)
        if self.cost_table is None:
            return 0.0
        return self.cost_table.estimate_cost(
            response.model, response.usage.input_tokens, response.usage.output_tokens
        )

    # ─────────────────────────────────────────────────────────────────────
    # Merging / finishing
    # ─────────────────────────────────────────────────────────────────────

    def _merge(
        self,
        session: ContinuationSession,
        acc: SessionMetadataAccumulator,
        selector: MergerSelector,
        pending_status: SessionStatus,
    ) -> MergeResult:
        self._emit(ProgressPhase.MERGE, session, attempt_number=session.attempts_made)
        merger = selector.select(session.chunks)
        if selector.detection is not None:
            acc.format_detected = selector.detection.format
            acc.format_confidence = selector.detection.confidence

        try:
            payload = self._run_merger(merger, session)
        except MergeError as exc:
            fmt = merger.format.value if merger.format else merger.name
            if session.on_failure_policy is FailurePolicy.RAISE_ERROR:
                self._finish(session, acc, SessionStatus.FAILED)
                raise MergeError.for_session(
                    exc, format=fmt, chunk_count=len(session.chunks)
                ) from exc
            return self._fallback(session, acc, merger, exc, fmt)

        acc.merge_strategy_used = merger.strategy
        metadata = self._finish(session, acc, pending_status)
        return MergeResult(succeeded=True, payload=payload, metadata=metadata)

    def _run_merger(self, merger: BaseMerger, session: ContinuationSession) -> str:
        try:
            return merger.merge(session.chunks)
        except MergeError:
            raise
        except Exception as exc:  # noqa: BLE001 - any merger crash is a merge failure
            raise MergeError(
                f"{merger.name} merger crashed: {type(exc).__name__}: {exc}",
                chunk_count=len(session.chunks),
                original=exc,
            ) from exc

    def _fallback(
        self,
        session: ContinuationSession,
        acc: SessionMetadataAccumulator,
        merger: BaseMerger,
        error: MergeError,
        fmt: str,
    ) -> MergeResult:
        message = f"Merge failed for format={fmt} chunks={len(session.chunks)}: {error}"
        self._notice(Severity.WARNING, f"{message}; trying fallback strategies", session)
        try:
            outcome = FailureFallbackChain.for_merger(merger).run(session.chunks)
        except MergeError as chain_error:
            return self._fail(session, acc, str(chain_error), payload="", kind=ERROR_KIND_MERGE)

        for strategy, reason in outcome.failures:
            self._notice(Severity.WARNING, f"Fallback {strategy.value} failed: {reason}", session)
        self._notice(Severity.WARNING, f"Merged via fallback {outcome.strategy.value}", session)

        acc.merge_strategy_used = outcome.strategy
        acc.warn(WARNING_FALLBACK_USED)
        metadata = self._finish(session, acc, SessionStatus.PARTIAL_FAILURE)
        return MergeResult(
            succeeded=False,
            payload=outcome.payload,
            metadata=metadata,
            error=ErrorInfo(kind=ERROR_KIND_MERGE, message=message),
        )

    def _fail(
        self,
        session: ContinuationSession,
        acc: SessionMetadataAccumulator,
        message: str,
        *,
        payload: str,
        kind: str = ERROR_KIND_PROVIDER,
    ) -> MergeResult:
        metadata = self._finish(session, acc, SessionStatus.FAILED)
        return MergeResult(
            succeeded=False,
            payload=payload,
            metadata=metadata,
            error=ErrorInfo(kind=kind, message=message),
        )

    def _finish(
        self,
        session: ContinuationSession,
        acc: SessionMetadataAccumulator,
        status: SessionStatus,
    ) -> SessionMetadata:
        session.finish(status)
        metadata = acc.snapshot(status)
        if self.logger is not None:
            self.logger.log_metadata(metadata)
        self._emit(ProgressPhase.END, session, attempt_number=session.attempts_made)
        return metadata

    # ─────────────────────────────────────────────────────────────────────
    # Observability
    # ─────────────────────────────────────────────────────────────────────

    def _emit(
        self,
        phase: ProgressPhase,
        session: ContinuationSession,
        *,
        attempt_number: int,
        termination_kind: TerminationKind | None = None,
    ) -> None:
        if self.progress is None:
            return
        self.progress.emit(
            ProgressEvent(
                phase=phase,
                session_id=session.session_id,
                attempt_number=attempt_number,
                termination_kind=termination_kind,
            ),
            logger=self.logger,
        )

    def _notice(self, severity: Severity, message: str, session: ContinuationSession) -> None:
        if self.logger is not None:
            self.logger.log_notice(
                Notice(severity=severity, message=message, session_id=session.session_id)
            )
