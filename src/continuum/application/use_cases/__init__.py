from __future__ import annotations

from continuum.application.use_cases.run_session import (
    RunSessionDeps,
    RunSessionRequest,
    run_continuation_session,
)

__all__ = ["RunSessionDeps", "RunSessionRequest", "run_continuation_session"]
