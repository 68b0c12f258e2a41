"""Provider-call policies (retry/backoff)."""
