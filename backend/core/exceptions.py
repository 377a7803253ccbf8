# ------------------------------ IMPORTS ------------------------------
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

logger = logging.getLogger(__name__)

# ------------------------------ BASE EXCEPTION ------------------------------

class FCFMotorsError(Exception):
    """Base class for errors raised by the marketplace services."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        body = {
            "success": False,
            "error": self.message,
            "error_code": self.error_code,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if self.details:
            body["details"] = self.details
        return body

# ------------------------------ DOMAIN EXCEPTIONS ------------------------------

class NotFoundError(FCFMotorsError):
    """Referenced entity does not exist."""
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any = None, message: Optional[str] = None):
        details = {"resource": resource}
        if resource_id is not None:
            details["id"] = resource_id
        default = f"{resource} {resource_id} not found" if resource_id is not None else f"{resource} not found"
        super().__init__(message or default, details)

class AuthenticationError(FCFMotorsError):
    status_code = 401
    error_code = "AUTHENTICATION_REQUIRED"

class NotAuthorizedError(FCFMotorsError):
    """Caller lacks the ownership or role the operation requires."""
    status_code = 403
    error_code = "NOT_AUTHORIZED"

class ConflictError(FCFMotorsError):
    """A uniqueness rule would be broken."""
    status_code = 409
    error_code = "CONFLICT"

class InvalidRequestError(FCFMotorsError):
    status_code = 422
    error_code = "INVALID_REQUEST"

class CascadeDeleteError(FCFMotorsError):
    """A delete reported success but the row is still present."""
    status_code = 500
    error_code = "CASCADE_DELETE_FAILED"

# ------------------------------ HANDLERS ------------------------------

def create_error_response(message: str, error_code: str = "INTERNAL_ERROR") -> dict:
    """Create standardized error response."""
    return {
        "success": False,
        "error": message,
        "error_code": error_code,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

def register_exception_handlers(app: FastAPI) -> None:
    """Map service errors to JSON error bodies."""

    @app.exception_handler(FCFMotorsError)
    async def fcf_motors_error_handler(request: Request, exc: FCFMotorsError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.details}")
            return JSONResponse(
                status_code=exc.status_code,
                content=create_error_response("The operation could not be completed", exc.error_code)
            )
        logger.info(f"{request.method} {request.url.path} rejected: {exc.error_code} {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error in {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content=create_error_response("Internal server error")
        )

# ------------------------------ END OF FILE ------------------------------
