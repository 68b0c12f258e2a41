"""
Application layer.

Configuration dataclasses and the `run_session` use case. Depends on the
domain only; concrete adapters are wired in by the API layer.
"""
