from __future__ import annotations

from collections.abc import Mapping

from continuum.domain.errors import ConfigurationError


class StaticCostTable:
    """
    Fixed per-model prices, in currency units per 1k tokens.

    Unknown models (and a missing model name) price at `default`, which is
    `(0.0, 0.0)` unless given.
    """

    __slots__ = ("_default", "_prices")

    def __init__(
        self,
        prices: Mapping[str, tuple[float, float]] | None = None,
        *,
        default: tuple[float, float] = (0.0, 0.0),
    ) -> None:
        table: dict[str, tuple[float, float]] = {}
        for model, pair in (prices or {}).items():
            table[model] = _validate_pair(model, pair)
        self._prices = table
        self._default = _validate_pair("default", default)

    def price_for(self, model: str | None, /) -> tuple[float, float]:
        if model is None:
            return self._default
        return self._prices.get(model, self._default)

    def estimate_cost(self, model: str | None, input_tokens: int, output_tokens: int, /) -> float:
        input_per_1k, output_per_1k = self.price_for(model)
        return (input_tokens / 1000.0) * input_per_1k + (output_tokens / 1000.0) * output_per_1k


def _validate_pair(model: str, pair: object) -> tuple[float, float]:
    if not isinstance(pair, (tuple, list)) or len(pair) != 2:
        raise ConfigurationError(
            f"Cost for {model!r} must be an (input_per_1k, output_per_1k) pair"
        )
    input_per_1k, output_per_1k = (float(v) for v in pair)
    if input_per_1k < 0 or output_per_1k < 0:
        raise ConfigurationError(f"Cost for {model!r} must be >= 0")
    return (input_per_1k, output_per_1k)
