"""Explicit success/failure result returned by store operations.

Store operations never raise for storage or lookup failures. Instead
they return a ``StoreResult`` whose ``value`` is always usable (the
fallback on failure) and whose ``error`` says what went wrong. Callers
choose: read ``value`` and treat a failure as empty, or ``unwrap()`` and
let the error propagate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from quickcart.errors import QuickCartError

T = TypeVar("T")


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    value: T
    error: QuickCartError | None = None

    @classmethod
    def success(cls, value: T) -> StoreResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: QuickCartError, fallback: T) -> StoreResult[T]:
        return cls(value=fallback, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising the recorded error on failure."""
        if self.error is not None:
            raise self.error
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value if self.error is None else default
