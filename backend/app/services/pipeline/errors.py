"""
Stage errors and results

Pipeline components do not raise for expected failures (a provider being
down, a poll timing out). They return a StageResult carrying either a value
or a StageError, and the orchestrator decides what to do with it. Only the
persistence kind is fatal.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from app.core.exceptions import PersistenceError

T = TypeVar("T")


class StageErrorKind(str, Enum):
    EXTRACTION = "extraction"
    SCRIPT_GENERATION = "script_generation"
    NARRATION = "narration"
    VIDEO_PROVIDER = "video_provider"
    POLL_TIMEOUT = "poll_timeout"
    STORAGE = "storage"
    PERSISTENCE = "persistence"

    @property
    def is_fatal(self) -> bool:
        return self is StageErrorKind.PERSISTENCE


@dataclass(frozen=True)
class StageError:
    kind: StageErrorKind
    message: str
    provider: Optional[str] = None

    @property
    def is_fatal(self) -> bool:
        return self.kind.is_fatal

    def __str__(self) -> str:
        if self.provider:
            return f"{self.kind.value} [{self.provider}]: {self.message}"
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class StageResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[StageError] = None

    @classmethod
    def ok(cls, value: T) -> "StageResult[T]":
        return cls(value=value)

    @classmethod
    def fail(
        cls,
        kind: StageErrorKind,
        message: str,
        provider: Optional[str] = None,
    ) -> "StageResult[T]":
        return cls(error=StageError(kind=kind, message=message, provider=provider))

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: T) -> T:
        return self.value if self.error is None else default


__all__ = [
    "StageErrorKind",
    "StageError",
    "StageResult",
    "PersistenceError",
]
