"""Optional schema validation for merged JSON payloads."""
