"""
Workflow error taxonomy.
Services raise these; the handler registered in app.main renders them as
{"error": message, "type": class name} with the matching HTTP status.
"""
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.logging import get_logger

logger = get_logger(__name__)


class WorkflowError(Exception):
    """Base class for every error surfaced through the API."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None, **context):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.context = context
        super().__init__(message)

    @property
    def error_type(self) -> str:
        return type(self).__name__


class AuthorizationFailure(WorkflowError):
    """Caller unauthenticated (401) or role not permitted for the target (403)."""
    status_code = 403


class NotFoundFailure(WorkflowError):
    status_code = 404


class ValidationFailure(WorkflowError):
    """Malformed input. Always raised before any I/O."""
    status_code = 400


class PersistenceFailure(WorkflowError):
    """A storage read or write failed; the write did not happen."""
    status_code = 500


async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(exc.message, extra={
            "event": "request_failed",
            "error_type": exc.error_type,
            "path": request.url.path,
            **{k: str(v) for k, v in exc.context.items()},
        })
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "type": exc.error_type},
    )


def _describe(error: dict) -> str:
    field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
    return f"{field}: {error.get('msg', 'invalid')}" if field else error.get("msg", "invalid")


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Missing or malformed request fields render as a 400 ValidationFailure."""
    message = "; ".join(_describe(e) for e in exc.errors()) or "Invalid request"
    return await workflow_error_handler(request, ValidationFailure(message))
