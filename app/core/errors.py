"""
Custom exception hierarchy for the status dashboard.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages.

Only InputError and StatusProcessingError ever leave the status pipeline.
ContextUnavailable, CompletionFailure, MalformedResult and PersistenceFailure
are raised inside the services and absorbed by the orchestrator.
"""
from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class StatusAppException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class InputError(StatusAppException):
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "INVALID_INPUT"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message=message,
            details={"field": field} if field else {},
        )


class CompletionFailureError(StatusAppException):
    http_status = status.HTTP_502_BAD_GATEWAY
    code = "COMPLETION_FAILURE"


class MalformedResultError(StatusAppException):
    """Completion text that could not be turned into a status snapshot."""
    http_status = status.HTTP_502_BAD_GATEWAY
    code = "MALFORMED_RESULT"

    EMPTY_RESPONSE = "empty_response"
    NO_JSON_FOUND = "no_json_found"
    MALFORMED_JSON = "malformed_json"
    INVALID_SHAPE = "invalid_shape"

    REASONS = {
        EMPTY_RESPONSE: "LLM returned empty response.",
        NO_JSON_FOUND: "LLM response did not contain valid JSON.",
        MALFORMED_JSON: "LLM response was malformed JSON.",
        INVALID_SHAPE: "LLM response did not match the status schema.",
    }

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(message=self.REASONS[kind], details={"kind": kind})


class StorageError(StatusAppException):
    """A storage backend fault (wraps SQLAlchemyError)."""
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "STORAGE_ERROR"


class ContextUnavailableError(StorageError):
    """Reading the previous status failed."""
    code = "CONTEXT_UNAVAILABLE"


class PersistenceFailureError(StorageError):
    code = "PERSISTENCE_FAILURE"


class StaleWriteError(PersistenceFailureError):
    http_status = status.HTTP_409_CONFLICT
    code = "STALE_WRITE"

    def __init__(self, user_id: str, expected: int, actual: int):
        super().__init__(
            message=(
                f"Latest status for user {user_id} moved from version "
                f"{expected} to {actual}."
            ),
            details={"user_id": user_id, "expected": expected, "actual": actual},
        )


class StatusProcessingError(StatusAppException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "STATUS_PROCESSING_ERROR"

    def __init__(self, message: str, user_id: str | None = None):
        super().__init__(
            message=message,
            details={"user_id": user_id} if user_id else {},
        )


class StatusNotFoundError(StatusAppException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "STATUS_NOT_FOUND"

    def __init__(self, user_id: str):
        super().__init__(
            message=f"No status recorded for user {user_id}.",
            details={"user_id": user_id},
        )


class ActivityNotFoundError(StatusAppException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "ACTIVITY_NOT_FOUND"

    def __init__(self, activity_id: str):
        super().__init__(
            message=f"Activity {activity_id} not found.",
            details={"activity_id": activity_id},
        )


class ActivityFullError(StatusAppException):
    http_status = status.HTTP_409_CONFLICT
    code = "ACTIVITY_FULL"

    def __init__(self, activity_id: str, max_participants: int):
        super().__init__(
            message=f"Activity {activity_id} is full ({max_participants} participants).",
            details={"activity_id": activity_id, "max_participants": max_participants},
        )


class TemplateNotFoundError(StatusAppException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "TEMPLATE_NOT_FOUND"

    def __init__(self, name: str):
        super().__init__(
            message=f"Template '{name}' not found.",
            details={"name": name},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def status_exception_handler(request: Request, exc: StatusAppException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
