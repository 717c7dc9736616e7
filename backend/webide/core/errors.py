"""Domain errors raised by the node store and the access checks.

Every error carries a ``kind`` (stable, machine readable) and a human
readable message. The API layer turns them into JSON responses through
``store_error_handler``.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse


class StoreError(Exception):
    kind = "Internal"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class NotFound(StoreError):
    kind = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(StoreError):
    kind = "Conflict"
    status_code = status.HTTP_409_CONFLICT


class InvalidName(StoreError):
    kind = "InvalidName"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidCycle(StoreError):
    kind = "InvalidCycle"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidParentType(StoreError):
    kind = "InvalidParentType"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidOperation(StoreError):
    kind = "InvalidOperation"
    status_code = status.HTTP_400_BAD_REQUEST


class ContentTooLarge(StoreError):
    kind = "ContentTooLarge"
    status_code = status.HTTP_413_CONTENT_TOO_LARGE


class Forbidden(StoreError):
    kind = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind},
    )
