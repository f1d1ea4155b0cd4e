"""
Explicit success/failure values for resource operations.

Services never raise for expected failures; they return a ``Result`` and the
caller decides whether to ``unwrap()`` (API layer) or inspect it (client
feeds).
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from prefect_portal.core.exceptions import (
    AuthorizationError,
    BackendError,
    ConflictError,
    PortalError,
    RequestTimeoutError,
    ResourceNotFoundError,
    ValidationError,
)

T = TypeVar("T")
U = TypeVar("U")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FORBIDDEN = "forbidden"
    TIMEOUT = "timeout"
    BACKEND = "backend"


# HTTP status <-> ErrorKind, used by the client to rebuild results
STATUS_FOR_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.BACKEND: 500,
}


def kind_for_status(status_code: int) -> ErrorKind:
    if status_code in (400, 422):
        return ErrorKind.VALIDATION
    if status_code in (401, 403):
        return ErrorKind.FORBIDDEN
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code == 409:
        return ErrorKind.CONFLICT
    if status_code in (408, 504):
        return ErrorKind.TIMEOUT
    return ErrorKind.BACKEND


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: str = ""
    field: Optional[str] = None
    resource: str = "Record"

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        field: Optional[str] = None,
        resource: str = "Record",
    ) -> "Result[Any]":
        return cls(error=kind, message=message, field=field, resource=resource)

    @classmethod
    def not_found(cls, resource: str, record_id: Any = "") -> "Result[Any]":
        message = f"{resource} with ID '{record_id}' not found" if record_id else f"{resource} not found"
        return cls(error=ErrorKind.NOT_FOUND, message=message, resource=resource)

    @classmethod
    def invalid(cls, message: str, field: Optional[str] = None) -> "Result[Any]":
        return cls(error=ErrorKind.VALIDATION, message=message, field=field)

    @classmethod
    def forbidden(cls, message: str = "Not authorized") -> "Result[Any]":
        return cls(error=ErrorKind.FORBIDDEN, message=message)

    def map(self, fn: Callable[[T], U]) -> "Result[U]":
        if not self.ok:
            return self  # type: ignore[return-value]
        return Result.success(fn(self.value))

    def to_exception(self) -> PortalError:
        if self.error == ErrorKind.VALIDATION:
            return ValidationError(self.message, field=self.field)
        if self.error == ErrorKind.NOT_FOUND:
            exc = ResourceNotFoundError(self.resource)
            exc.message = self.message
            return exc
        if self.error == ErrorKind.CONFLICT:
            return ConflictError(self.message, resource_type=self.resource)
        if self.error == ErrorKind.FORBIDDEN:
            return AuthorizationError(self.message)
        if self.error == ErrorKind.TIMEOUT:
            exc = RequestTimeoutError(0)
            exc.message = self.message
            exc.details = {}
            return exc
        return BackendError(self.message)

    def unwrap(self) -> T:
        """Return the value or raise the matching PortalError"""
        if self.ok:
            return self.value
        raise self.to_exception()
