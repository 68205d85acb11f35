"""
Domain error taxonomy and the FastAPI handlers that render it.

Every error carries a machine-checkable ``category`` and a human ``message``;
keyword arguments passed to the constructor are merged into the response body.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class JobBoardError(Exception):
    """Base application error."""
    category = "internal"
    status_code = 500
    default_message = "Something went wrong on our end. Please try again later."

    def __init__(self, message: Optional[str] = None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)


class Unauthenticated(JobBoardError):
    category = "unauthenticated"
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(JobBoardError):
    category = "forbidden"
    status_code = 403
    default_message = "Access forbidden"


class InsufficientRole(Forbidden):
    category = "forbidden.insufficient_role"
    default_message = "Access denied: insufficient role"


class AccountNotApproved(Forbidden):
    category = "forbidden.account_not_approved"
    default_message = "Account not approved"


class EmailNotVerified(Forbidden):
    category = "forbidden.email_not_verified"
    default_message = "Please verify your email first"


class InvalidCredentials(JobBoardError):
    category = "invalid_credentials"
    status_code = 401
    default_message = "Invalid email or password."


class AlreadyExists(JobBoardError):
    category = "already_exists"
    status_code = 409
    default_message = "Email already registered"


class NotFound(JobBoardError):
    category = "not_found"
    status_code = 404
    default_message = "Not found"


class AlreadyApplied(JobBoardError):
    category = "already_applied"
    status_code = 409
    default_message = "Already applied"


class ValidationError(JobBoardError):
    category = "validation_error"
    status_code = 400
    default_message = "Please check your input and try again."


class Internal(JobBoardError):
    pass


def error_body(error: JobBoardError) -> dict:
    return {"error": error.category, "message": error.message, **error.extra}


async def _handle_domain_error(request: Request, exc: JobBoardError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


async def _handle_request_validation(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in e["loc"] if p != "body") for e in exc.errors()]
    error = ValidationError("Missing or invalid fields: " + ", ".join(fields), fields=fields)
    return JSONResponse(status_code=error.status_code, content=error_body(error))


async def _handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body(Internal()))


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(JobBoardError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(Exception, _handle_unexpected)
