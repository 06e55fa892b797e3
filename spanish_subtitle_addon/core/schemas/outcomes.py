from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from spanish_subtitle_addon.core.errors import PipelineError

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of one pipeline step: either a value or the error that replaced it."""

    value: Optional[T] = None
    error: Optional[PipelineError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_kind(self) -> Optional[str]:
        return type(self.error).__name__ if self.error else None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: PipelineError) -> "Outcome[T]":
        return cls(error=error)
