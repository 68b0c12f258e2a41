from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from continuum.domain.models.metadata import SessionMetadata
from continuum.domain.types import SessionStatus

ERROR_KIND_MERGE = "merge_error"
ERROR_KIND_PROVIDER = "provider_error"


@dataclass(slots=True, frozen=True)
class ErrorInfo:
    kind: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}


@dataclass(slots=True, frozen=True)
class MergeResult:
    """
    Output of a continuation session.

    Callers tell "fully merged", "merged with a max-attempts warning" and
    "merged through a degraded fallback tier" apart through `metadata` and
    `error`, never through exceptions.
    """

    succeeded: bool
    payload: str
    metadata: SessionMetadata
    error: ErrorInfo | None = None

    @property
    def status(self) -> SessionStatus:
        return self.metadata.status

    def to_structured_record(self) -> dict[str, Any]:
        """
        Flat record for persistence.

        The key set and value types here are a compatibility surface; add new
        keys only with a version bump.
        """
        md = self.metadata
        return {
            "succeeded": self.succeeded,
            "payload": self.payload,
            "attempts": md.attempts,
            "total_tokens": md.total_tokens,
            "estimated_cost": md.estimated_cost,
            "merge_strategy_used": md.merge_strategy_used.value,
            "termination_history": [kind.value for kind in md.termination_history],
            "truncation_points": list(md.truncation_points),
            "error": self.error.to_dict() if self.error else None,
        }
