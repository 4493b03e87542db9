"""Uniform result containers returned by gateway and store operations."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from utils.errors import ServiceError


@dataclass(frozen=True)
class Result:
    """Success payload and error pair; exactly one of them is meaningful.

    ``partial_errors`` names secondary sub-operations that failed without
    failing the call as a whole (referrer inserts, individual statistics).
    """

    data: Any = None
    error: Optional[ServiceError] = None
    partial_errors: Dict[str, ServiceError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_partial(self) -> bool:
        return self.ok and bool(self.partial_errors)

    @classmethod
    def success(cls, data: Any = None, partial_errors: Optional[Dict[str, ServiceError]] = None) -> "Result":
        return cls(data=data, partial_errors=dict(partial_errors or {}))

    @classmethod
    def failure(cls, error: ServiceError) -> "Result":
        return cls(error=error)


@dataclass(frozen=True)
class WorkRecordStats:
    total: int = 0
    pending: int = 0
    completed: int = 0
    this_month: int = 0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "pending": self.pending,
            "completed": self.completed,
            "this_month": self.this_month,
        }
