"""
Response envelope returned by every simulated server call.

Callers branch on ``success``; ``data`` is only meaningful when it is true.
"""

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    """Why a call failed."""

    TIMED_OUT = auto()
    SERVER_ERROR = auto()
    REJECTED = auto()


@dataclass(frozen=True)
class ServerResponse(Generic[T]):
    """
    Tagged result of a server call.

    Attributes:
        success: Whether the operation ran and produced ``data``
        data: The payload, None on failure
        error_message: Human-readable failure reason, None on success
        simulated_delay: Seconds spent in simulated latency (and timeout wait)
        error_kind: Failure category, None on success
        attempts: How many attempts produced this response
    """

    success: bool
    data: Optional[T] = None
    error_message: Optional[str] = None
    simulated_delay: float = 0.0
    error_kind: Optional[ErrorKind] = None
    attempts: int = 1

    @classmethod
    def ok(cls, data: T, simulated_delay: float = 0.0) -> "ServerResponse[T]":
        return cls(success=True, data=data, simulated_delay=simulated_delay)

    @classmethod
    def failure(
        cls,
        error_message: str,
        error_kind: ErrorKind = ErrorKind.SERVER_ERROR,
        simulated_delay: float = 0.0,
    ) -> "ServerResponse[T]":
        return cls(
            success=False,
            error_message=error_message,
            simulated_delay=simulated_delay,
            error_kind=error_kind,
        )

    @property
    def timed_out(self) -> bool:
        return self.error_kind is ErrorKind.TIMED_OUT

    def with_attempts(self, attempts: int) -> "ServerResponse[T]":
        return replace(self, attempts=attempts)

    def to_dict(self) -> Dict[str, Any]:
        data = self.data.to_dict() if hasattr(self.data, "to_dict") else self.data
        return {
            "success": self.success,
            "data": data,
            "error_message": self.error_message,
            "simulated_delay": self.simulated_delay,
            "error_kind": self.error_kind.name if self.error_kind else None,
            "attempts": self.attempts,
        }
