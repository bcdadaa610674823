"""Error taxonomy shared by the service layer and the HTTP boundary."""

from __future__ import annotations

from enum import Enum
from http import HTTPStatus


class ErrorKind(str, Enum):
    """Kinds of failure a service operation can report."""

    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    VALIDATION = "validation"
    INTERNAL = "internal"

    @property
    def status(self) -> HTTPStatus:
        return _STATUS_BY_KIND[self]


_STATUS_BY_KIND = {
    ErrorKind.CONFLICT: HTTPStatus.CONFLICT,
    ErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorKind.UNAUTHORIZED: HTTPStatus.UNAUTHORIZED,
    ErrorKind.FORBIDDEN: HTTPStatus.FORBIDDEN,
    ErrorKind.VALIDATION: HTTPStatus.BAD_REQUEST,
    ErrorKind.INTERNAL: HTTPStatus.INTERNAL_SERVER_ERROR,
}


class ServiceError(Exception):
    """A failure raised by a service, tagged with its kind."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, kind: ErrorKind | None = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    @property
    def status_code(self) -> int:
        return int(self.kind.status)

    @classmethod
    def conflict(cls, message: str) -> "ServiceError":
        return cls(message, ErrorKind.CONFLICT)

    @classmethod
    def not_found(cls, message: str) -> "ServiceError":
        return cls(message, ErrorKind.NOT_FOUND)

    @classmethod
    def unauthorized(cls, message: str) -> "ServiceError":
        return cls(message, ErrorKind.UNAUTHORIZED)

    @classmethod
    def forbidden(cls, message: str) -> "ServiceError":
        return cls(message, ErrorKind.FORBIDDEN)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<ServiceError {self.kind.value}: {self.message}>"
