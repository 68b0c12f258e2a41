"""
Adapters (hexagonal outer ring).

Concrete implementations of the domain ports: loggers, retry policy, provider
response mappers, cost tables, schema validation and system clocks/sleepers.
"""
