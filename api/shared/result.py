"""Result values returned by services for expected failures.

Services return ``Result.failure(...)`` for outcomes a caller must handle
(missing record, ownership mismatch, upstream failure) and only raise for
programming errors. Controllers check ``result.ok`` and turn the error into the
matching :class:`~api.shared.exceptions.AppException` via :func:`raise_for_error`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from api.shared.exceptions import (
    AppException,
    ExternalServiceError,
    ExternalServiceUnreachableError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    ValidationError,
)

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    UPSTREAM_HTTP_FAILURE = "upstream_http_failure"
    UPSTREAM_UNREACHABLE = "upstream_unreachable"
    INTERNAL_FAILURE = "internal_failure"


@dataclass(frozen=True)
class ServiceError:
    kind: ErrorKind
    message: str
    status_code: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ServiceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> "Result[T]":
        return cls(
            error=ServiceError(
                kind=kind,
                message=message,
                status_code=status_code,
                details=details or {},
            )
        )


def to_exception(error: ServiceError) -> AppException:
    """Map a service error onto the HTTP-facing exception hierarchy."""
    if error.kind is ErrorKind.VALIDATION_FAILED:
        return ValidationError(error.message, error.details)
    if error.kind is ErrorKind.NOT_FOUND:
        return NotFoundError(
            error.details.get("resource", "Resource"),
            str(error.details.get("identifier", "")),
        )
    if error.kind is ErrorKind.FORBIDDEN:
        return ForbiddenError(error.message, error.details)
    if error.kind is ErrorKind.UPSTREAM_HTTP_FAILURE:
        return ExternalServiceError(
            "Content generation",
            error.message,
            status_code=error.status_code or 502,
            details=error.details,
        )
    if error.kind is ErrorKind.UPSTREAM_UNREACHABLE:
        return ExternalServiceUnreachableError()
    return InternalError(error.message, error.details)


def raise_for_error(result: Result[Any]) -> None:
    if result.error is not None:
        raise to_exception(result.error)
