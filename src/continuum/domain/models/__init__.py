"""
Domain models (hexagonal core).

Pure, dependency-free dataclasses for the entities that flow through a
continuation session: provider responses, chunks, the session itself, running
metadata and the final merge result.
"""

from __future__ import annotations

from continuum.domain.models.chunk import Chunk
from continuum.domain.models.events import AttemptRecord, Notice, ProgressEvent
from continuum.domain.models.merge_result import ErrorInfo, MergeResult
from continuum.domain.models.metadata import SessionMetadata, SessionMetadataAccumulator
from continuum.domain.models.provider_response import ProviderResponse
from continuum.domain.models.result import Err, Ok, Result, try_call
from continuum.domain.models.session import MAX_ATTEMPTS_CEILING, ContinuationSession
from continuum.domain.models.usage import TokenUsage

__all__ = [
    "MAX_ATTEMPTS_CEILING",
    "AttemptRecord",
    "Chunk",
    "ContinuationSession",
    "Err",
    "ErrorInfo",
    "MergeResult",
    "Notice",
    "Ok",
    "ProgressEvent",
    "ProviderResponse",
    "Result",
    "SessionMetadata",
    "SessionMetadataAccumulator",
    "TokenUsage",
    "try_call",
]
