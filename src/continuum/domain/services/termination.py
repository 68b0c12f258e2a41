"""
Termination classification.

Providers disagree on how they spell "why did the output stop"; this module
folds their finish reasons into seven `TerminationKind`s and maps each kind to
exactly one verdict. The verdict table is fixed and total: an absent reason is
`UNSPECIFIED` (stop), and a present-but-unrecognized reason is `INCOMPLETE`
(stop), so no input maps to an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from continuum.domain.models.provider_response import ProviderResponse
from continuum.domain.types import Severity, TerminationKind, Verdict

_REASON_ALIASES: MappingProxyType[str, TerminationKind] = MappingProxyType(
    {
        "length": TerminationKind.LENGTH,
        "max_tokens": TerminationKind.LENGTH,
        "max_output_tokens": TerminationKind.LENGTH,
        "stop": TerminationKind.STOP,
        "end_turn": TerminationKind.STOP,
        "stop_sequence": TerminationKind.STOP,
        "completed": TerminationKind.STOP,
        "tool_calls": TerminationKind.TOOL_CALLS,
        "tool_use": TerminationKind.TOOL_CALLS,
        "function_call": TerminationKind.TOOL_CALLS,
        "content_filter": TerminationKind.CONTENT_FILTER,
        "safety": TerminationKind.CONTENT_FILTER,
        "refusal": TerminationKind.CONTENT_FILTER,
        "incomplete": TerminationKind.INCOMPLETE,
        "error": TerminationKind.API_ERROR,
        "failed": TerminationKind.API_ERROR,
    }
)

# Kinds that end a session but deserve a louder log line than a natural stop.
_NOTICE_SEVERITY: MappingProxyType[TerminationKind, Severity] = MappingProxyType(
    {
        TerminationKind.CONTENT_FILTER: Severity.WARNING,
        TerminationKind.INCOMPLETE: Severity.WARNING,
        TerminationKind.API_ERROR: Severity.ERROR,
    }
)


@dataclass(slots=True, frozen=True)
class Classification:
    kind: TerminationKind
    verdict: Verdict


def kind_for_reason(finish_reason: str | None, /) -> TerminationKind:
    if finish_reason is None:
        return TerminationKind.UNSPECIFIED
    normalized = finish_reason.strip().lower()
    if not normalized:
        return TerminationKind.UNSPECIFIED
    return _REASON_ALIASES.get(normalized, TerminationKind.INCOMPLETE)


def verdict_for(kind: TerminationKind, /) -> Verdict:
    match kind:
        case TerminationKind.LENGTH:
            return Verdict.CONTINUE
        case TerminationKind.API_ERROR:
            return Verdict.ABORT
        case (
            TerminationKind.STOP
            | TerminationKind.TOOL_CALLS
            | TerminationKind.UNSPECIFIED
            | TerminationKind.CONTENT_FILTER
            | TerminationKind.INCOMPLETE
        ):
            return Verdict.STOP


def classify(response: ProviderResponse, /) -> Classification:
    """Classify a provider response. Pure: same input, same output."""
    kind = kind_for_reason(response.finish_reason)
    return Classification(kind=kind, verdict=verdict_for(kind))


def notice_severity(kind: TerminationKind, /) -> Severity | None:
    return _NOTICE_SEVERITY.get(kind)


def notice_message(kind: TerminationKind, /) -> str:
    match kind:
        case TerminationKind.CONTENT_FILTER:
            return (
                "Response stopped by the provider content filter; not continuing. "
                "The continuation handle is kept in metadata."
            )
        case TerminationKind.INCOMPLETE:
            return (
                "Response ended incomplete for a reason other than length; not continuing. "
                "Resume manually with the recorded continuation handle if needed."
            )
        case TerminationKind.API_ERROR:
            return "Provider reported an error finish reason; aborting session."
        case _:
            return f"Response ended with {kind.value}."


def verdict_table() -> dict[TerminationKind, Verdict]:
    return {kind: verdict_for(kind) for kind in TerminationKind}
