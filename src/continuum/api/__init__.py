"""
Public API layer (hexagonal entrypoints).

`run_session` is the single-call entry point; `Continuum` is a reusable
facade bound to one request callback and configuration.
"""

from __future__ import annotations

from continuum.api.continuum import Continuum
from continuum.api.factory import create_continuum, create_continuum_from_config
from continuum.api.session import run_session

__all__ = ["Continuum", "create_continuum", "create_continuum_from_config", "run_session"]
