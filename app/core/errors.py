# app/core/errors.py
"""
Error taxonomy shared by the services and the HTTP layer.

Services raise these; the handlers installed by
``register_exception_handlers`` turn them into pages or redirects so route
functions never build error responses by hand.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse

from app.templating import templates

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    message = "Something went wrong."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(AppError):
    status_code = 400
    message = "Invalid input."


class NotFound(AppError):
    # also used for resources owned by someone else
    status_code = 404
    message = "Not found."


class AuthFailure(AppError):
    status_code = 401
    message = "Invalid username or password."


class UnknownUsername(AuthFailure):
    pass


class BadPassword(AuthFailure):
    pass


class Conflict(AppError):
    status_code = 409
    message = "Conflict."


class DuplicateUsername(Conflict):
    message = "That username is already taken. Please choose another."


class UploadRejected(AppError):
    status_code = 502
    message = "The file could not be stored. Please try again."


class PayloadTooLarge(AppError):
    status_code = 413
    message = "File too large."


class LoginRequired(Exception):
    """Raised by the auth dependency when the request has no valid session."""


def register_exception_handlers(app: FastAPI) -> None:
    def render_error(request: Request, status_code: int, message: str):
        return templates.TemplateResponse(
            request,
            "error.html",
            {"status_code": status_code, "message": message},
            status_code=status_code,
        )

    @app.exception_handler(LoginRequired)
    async def login_required_handler(request: Request, exc: LoginRequired):
        return RedirectResponse(url="/login", status_code=303)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.__cause__ or exc)
        return render_error(request, exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info("Rejected malformed request %s %s: %s", request.method, request.url.path, exc.errors())
        return render_error(request, 400, ValidationError.message)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return render_error(request, 500, AppError.message)
