"""
Minimal Result[T, E] type.

Used where a failure is an expected outcome to be inspected rather than
propagated (fallback tiers).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, Never, TypeAlias, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=BaseException)


@dataclass(slots=True, frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T, /) -> T:  # noqa: ARG002 - symmetric with Err
        return self.value

    def map(self, fn: Callable[[T], U], /) -> Ok[U]:
        return Ok(fn(self.value))


@dataclass(slots=True, frozen=True)
class Err(Generic[E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Never:
        raise self.error

    def unwrap_or(self, default: T, /) -> T:
        return default

    def map(self, fn: Callable[[object], object], /) -> Err[E]:  # noqa: ARG002
        return self


Result: TypeAlias = "Ok[T] | Err[E]"


def try_call(fn: Callable[[], T], /) -> Result[T, Exception]:
    """Run `fn`, capturing any `Exception` as `Err`."""
    try:
        return Ok(fn())
    except Exception as exc:  # noqa: BLE001 - captured into Err by contract
        return Err(exc)
