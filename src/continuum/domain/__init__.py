"""
Domain layer (hexagonal core).

Everything under `continuum.domain` is stdlib-only: termination
classification, format detection, mergers, the fallback chain and the
continuation orchestrator. Adapters and the application layer depend on it,
never the reverse.
"""
