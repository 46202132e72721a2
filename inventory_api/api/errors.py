from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Dict, Optional, TypeVar, Union
import logging

from inventory_api.schemas.error import ErrorResponse
from inventory_api.services.result import ErrorKind, Result

logger = logging.getLogger(__name__)

T = TypeVar("T")

ERROR_STATUS = {
    ErrorKind.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Not found"),
    ErrorKind.CONFLICT: (status.HTTP_409_CONFLICT, "Conflict"),
    ErrorKind.VALIDATION: (status.HTTP_400_BAD_REQUEST, "Validation failed"),
    ErrorKind.BAD_REQUEST: (status.HTTP_400_BAD_REQUEST, "Bad request"),
}


class ApiError(Exception):
    """Raised by route handlers to return a structured error body."""

    def __init__(
        self,
        status_code: int,
        message: str,
        errors: Optional[Union[Dict[str, str], str]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors


def unwrap(result: Result[T]) -> T:
    """
    Return the value of a successful service result.

    Failed results are converted into an ApiError with the HTTP status
    matching their error kind.
    """
    if result.ok:
        return result.value

    error = result.error
    status_code, title = ERROR_STATUS[error.kind]
    if error.errors is not None:
        raise ApiError(status_code, error.message, error.errors)
    raise ApiError(status_code, title, error.message)


def _error_response(status_code: int, message: str, errors=None) -> JSONResponse:
    body = ErrorResponse(status=status_code, message=message, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _field_name(loc: tuple) -> str:
    # ("body", "capacity") -> "capacity"; ("body",) -> "body"
    parts = [str(part) for part in loc[1:]] or [str(part) for part in loc]
    return ".".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers rendering every failure as an ErrorResponse."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return _error_response(exc.status_code, exc.message, exc.errors)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = {}
        for error in exc.errors():
            errors.setdefault(_field_name(tuple(error["loc"])), error["msg"])
        return _error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
        )
