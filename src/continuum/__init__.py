"""
continuum

Transparent continuation for truncated LLM output: re-request while the
provider stops on length, then stitch the chunks back into one CSV, Markdown
or JSON payload with format-aware boundary repair.
"""

from __future__ import annotations

from continuum._meta import __version__
from continuum.api import Continuum, create_continuum, create_continuum_from_config, run_session
from continuum.application.config import ContinuationConfig, LoggerConfig
from continuum.domain.errors import (
    ConfigurationError,
    ContinuumError,
    MergeError,
    ProviderError,
    ValidationError,
)
from continuum.domain.models import MergeResult, ProviderResponse, SessionMetadata, TokenUsage
from continuum.domain.types import FailurePolicy, OutputFormat, SessionStatus, TerminationKind

__all__ = [
    "ConfigurationError",
    "ContinuationConfig",
    "Continuum",
    "ContinuumError",
    "FailurePolicy",
    "LoggerConfig",
    "MergeError",
    "MergeResult",
    "OutputFormat",
    "ProviderError",
    "ProviderResponse",
    "SessionMetadata",
    "SessionStatus",
    "TerminationKind",
    "TokenUsage",
    "ValidationError",
    "__version__",
    "create_continuum",
    "create_continuum_from_config",
    "run_session",
]
