"""
Return values for service operations.

Services report business-rule failures by returning a failed `Result`
instead of raising. The API layer turns the error kind into an HTTP status.
"""
from dataclasses import dataclass
from typing import Dict, Generic, Optional, TypeVar
import enum

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    """Category of a business-rule failure."""
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    BAD_REQUEST = "bad_request"


@dataclass(frozen=True)
class ServiceError:
    kind: ErrorKind
    message: str
    errors: Optional[Dict[str, str]] = None


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        errors: Optional[Dict[str, str]] = None,
    ) -> "Result[T]":
        return cls(error=ServiceError(kind=kind, message=message, errors=errors))

    @classmethod
    def not_found(cls, message: str) -> "Result[T]":
        return cls.failure(ErrorKind.NOT_FOUND, message)

    @classmethod
    def conflict(cls, message: str) -> "Result[T]":
        return cls.failure(ErrorKind.CONFLICT, message)

    @classmethod
    def bad_request(cls, message: str) -> "Result[T]":
        return cls.failure(ErrorKind.BAD_REQUEST, message)

    @classmethod
    def invalid(cls, field: str, message: str) -> "Result[T]":
        return cls.failure(ErrorKind.VALIDATION, "Validation failed", {field: message})
