import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from psychic.utils.response import error_response

logger = logging.getLogger(__name__)


class AppException(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(AppException):
    """Malformed or missing input; nothing was written."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class NotFound(AppException):
    def __init__(self, message: str = "Prediction not found"):
        super().__init__(message, status_code=404)


class InvalidState(AppException):
    """Transition attempted from a status that forbids it."""

    def __init__(self, message: str):
        super().__init__(message, status_code=409)


class SelectionExhausted(AppException):
    """No sufficiently dissimilar pair was found; the caller may retry."""

    def __init__(self, message: str):
        super().__init__(message, status_code=503)


class SourceUnavailable(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=502)


class PredictorUnavailable(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=502)


class OracleFailure(Exception):
    """Raised by the reasoning oracle. Never leaves the adjudicator."""


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.message),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_response("Internal server error"),
        )
