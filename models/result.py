"""Tagged result type for per-unit-of-work outcomes."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Result:
    """Outcome of an operation that may fail without aborting the run.

    Attributes:
        value: The produced value when the operation succeeded.
        error: The exception that caused the failure, if any.
        message: Human readable context for the failure.
    """

    value: Any = None
    error: Optional[BaseException] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException, message: Optional[str] = None) -> "Result":
        return cls(error=error, message=message or str(error))

    def unwrap_or(self, default: Any) -> Any:
        """Return the value on success, otherwise the given default."""
        return self.value if self.ok else default
