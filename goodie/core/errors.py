# goodie/core/errors.py
"""
Application error taxonomy.

Every error is an HTTPException so services can raise them exactly
where they would raise HTTPException, and FastAPI renders them as
{"detail": ...} without extra handlers.

Authentication failures use fixed, deliberately generic messages so a
caller cannot tell "email not found" from "password wrong".
"""
import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(HTTPException):
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Bad request"

    def __init__(self, detail: str | None = None, headers: dict[str, str] | None = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class UnauthenticatedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"

    def __init__(self, detail: str | None = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class UnauthorizedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Admin access required"


class InvalidCredentialsError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid email or password"

    def __init__(self):
        # Never accept a caller-specific message here
        super().__init__()


class InvalidOrExpiredTokenError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid or expired password reset token"

    def __init__(self):
        super().__init__()


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Already exists"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "An unexpected error occurred"

    def __init__(self):
        super().__init__()


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register the catch-all handler for unexpected exceptions.

    AppError subclasses are handled by FastAPI's HTTPException handler.
    Anything else is logged with its traceback and answered with a
    generic 500 that carries no internal detail.
    """

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": InternalError.default_detail},
        )
