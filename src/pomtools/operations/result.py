from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class TransformationOperationException(Exception):
    """Raised (or carried by a result) when a POM operation cannot complete."""


class ResultType(str, Enum):
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    NO_OP = "NO_OP"
    ERROR = "ERROR"


@dataclass(frozen=True)
class ExecutionResult:
    """
    Outcome of running one operation against one POM.

    SUCCESS and NO_OP carry ``details``; WARNING and ERROR carry the
    ``exception`` explaining what went wrong.
    """

    operation: str
    type: ResultType
    details: Optional[str] = None
    exception: Optional[Exception] = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def success(cls, operation: str, details: str) -> "ExecutionResult":
        return cls(operation=operation, type=ResultType.SUCCESS, details=details)

    @classmethod
    def warning(cls, operation: str, exception: Exception) -> "ExecutionResult":
        return cls(operation=operation, type=ResultType.WARNING, exception=exception)

    @classmethod
    def no_op(cls, operation: str, details: str) -> "ExecutionResult":
        return cls(operation=operation, type=ResultType.NO_OP, details=details)

    @classmethod
    def error(cls, operation: str, exception: Exception) -> "ExecutionResult":
        return cls(operation=operation, type=ResultType.ERROR, exception=exception)

    # ------------------------------------------------------------------
    @property
    def message(self) -> str:
        if self.details is not None:
            return self.details
        return str(self.exception) if self.exception is not None else ""

    @property
    def is_error(self) -> bool:
        return self.type is ResultType.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "type": self.type.value,
            "message": self.message,
            "exception": type(self.exception).__name__ if self.exception is not None else None,
        }
