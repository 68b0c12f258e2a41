"""
Degrading merge strategies for when the primary merger fails.

The chain is an ordered tuple of tiers tried in sequence; the first tier that
returns without raising wins. "First chunk" means the first chunk with
content, matching how an empty leading chunk carries nothing worth keeping.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from continuum.domain.errors import MergeError
from continuum.domain.models.chunk import Chunk
from continuum.domain.models.result import Err, try_call
from continuum.domain.services.mergers import BaseMerger, GenericMerger
from continuum.domain.types import MergeStrategy


@dataclass(slots=True, frozen=True)
class FallbackTier:
    strategy: MergeStrategy
    run: Callable[[Sequence[Chunk]], str]


@dataclass(slots=True, frozen=True)
class FallbackOutcome:
    payload: str
    strategy: MergeStrategy
    failures: tuple[tuple[MergeStrategy, str], ...] = ()


def first_chunk(chunks: Sequence[Chunk], /) -> list[Chunk]:
    for chunk in chunks:
        if not chunk.is_blank:
            return [chunk]
    return list(chunks[:1])


def build_tiers(primary: BaseMerger, /) -> tuple[FallbackTier, ...]:
    generic = GenericMerger()
    return (
        FallbackTier(MergeStrategy.FALLBACK_FIRST_CHUNK, lambda c: primary.merge(first_chunk(c))),
        FallbackTier(MergeStrategy.FALLBACK_GENERIC_ALL, lambda c: generic.merge(c)),
        FallbackTier(MergeStrategy.FALLBACK_GENERIC_FIRST, lambda c: generic.merge(first_chunk(c))),
    )


@dataclass(slots=True, frozen=True)
class FailureFallbackChain:
    tiers: tuple[FallbackTier, ...]

    @classmethod
    def for_merger(cls, primary: BaseMerger, /) -> FailureFallbackChain:
        return cls(tiers=build_tiers(primary))

    def run(self, chunks: Sequence[Chunk], /) -> FallbackOutcome:
        has_content = any(not chunk.is_blank for chunk in chunks)
        failures: list[tuple[MergeStrategy, str]] = []

        for tier in self.tiers:
            result = try_call(lambda tier=tier: tier.run(chunks))
            if isinstance(result, Err):
                failures.append((tier.strategy, f"{type(result.error).__name__}: {result.error}"))
                continue
            payload = result.unwrap()
            # A tier that drops every byte of real content is not a recovery.
            if has_content and not payload.strip():
                failures.append((tier.strategy, "produced an empty payload"))
                continue
            return FallbackOutcome(payload=payload, strategy=tier.strategy, failures=tuple(failures))

        raise MergeError(
            "All merge fallback strategies failed: "
            + "; ".join(f"{strategy.value}: {reason}" for strategy, reason in failures),
            chunk_count=len(chunks),
        )
