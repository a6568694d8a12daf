"""Typed failures and the handlers that turn them into HTTP responses.

Every component raises ``FilesApiError`` tagged with an ``ErrorKind``. The
handlers below are the only place that looks at the kind, picks a status code
from ``STATUS_CODES`` and writes the ``{"error", "message"}`` body.
"""

import logging
from enum import Enum
from typing import Optional

import pydantic
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


class ErrorKind(str, Enum):
    UNAUTHORIZED = "Unauthorized"
    INVALID_CREDENTIAL = "InvalidCredential"
    MISSING_PARAMETER = "MissingParameter"
    INVALID_PARAMETER = "InvalidParameter"
    NO_FILE_UPLOADED = "NoFileUploaded"
    UNSUPPORTED_FILE_TYPE = "UnsupportedFileType"
    UPLOAD_TOO_LARGE = "UploadTooLarge"
    TOO_MANY_FILES = "TooManyFiles"
    UNEXPECTED_FIELD = "UnexpectedField"
    FILE_NOT_FOUND = "FileNotFound"
    PERMISSION_DENIED = "PermissionDenied"
    METHOD_NOT_ALLOWED = "MethodNotAllowed"
    INTERNAL = "Internal"


STATUS_CODES = {
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INVALID_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.MISSING_PARAMETER: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_PARAMETER: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NO_FILE_UPLOADED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNSUPPORTED_FILE_TYPE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UPLOAD_TOO_LARGE: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    ErrorKind.TOO_MANY_FILES: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    ErrorKind.UNEXPECTED_FIELD: status.HTTP_400_BAD_REQUEST,
    ErrorKind.FILE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorKind.METHOD_NOT_ALLOWED: status.HTTP_405_METHOD_NOT_ALLOWED,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class FilesApiError(Exception):
    """A failure with a fixed kind, set where it is raised."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    def __repr__(self) -> str:
        return f"FilesApiError(kind={self.kind.value!r}, message={self.message!r})"


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def error_response(kind: ErrorKind, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_CODES[kind],
        content={"error": kind.value, "message": message},
        headers=headers,
    )


def _log_failure(request: Request, kind: ErrorKind, message: str) -> None:
    logger.warning(
        f"{kind.value}: {message} "
        f"(path={request.url.path} method={request.method} ip={client_address(request)})"
    )


async def handle_files_api_error(request: Request, exc: FilesApiError) -> JSONResponse:
    """Write the response for a failure raised by auth, validation or storage."""
    if exc.kind is ErrorKind.INTERNAL:
        logger.error(
            f"Internal: {exc.message} "
            f"(path={request.url.path} method={request.method} ip={client_address(request)})",
            exc_info=exc,
        )
        return error_response(ErrorKind.INTERNAL, GENERIC_ERROR_MESSAGE)

    _log_failure(request, exc.kind, exc.message)
    return error_response(exc.kind, exc.message)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Reshape framework errors (unknown route, bad multipart body, ...) into the same body."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        kind, message = ErrorKind.FILE_NOT_FOUND, "The requested resource does not exist"
    elif exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        kind, message = ErrorKind.METHOD_NOT_ALLOWED, "Method not allowed"
    elif exc.status_code == status.HTTP_401_UNAUTHORIZED:
        kind, message = ErrorKind.UNAUTHORIZED, str(exc.detail)
    elif exc.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE:
        kind, message = ErrorKind.UPLOAD_TOO_LARGE, str(exc.detail)
    elif exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
        kind, message = ErrorKind.INVALID_PARAMETER, str(exc.detail)
    else:
        kind, message = ErrorKind.INTERNAL, GENERIC_ERROR_MESSAGE

    _log_failure(request, kind, message)
    response = error_response(kind, message, headers=getattr(exc, "headers", None))
    response.status_code = exc.status_code
    return response


async def handle_request_validation_errors(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    _log_failure(request, ErrorKind.INVALID_PARAMETER, message)
    return error_response(ErrorKind.INVALID_PARAMETER, message)


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    """A model failed to validate outside request parsing, which is a server bug."""
    logger.error(
        f"Internal: response model validation failed "
        f"(path={request.url.path} method={request.method} ip={client_address(request)})",
        exc_info=exc,
    )
    return error_response(ErrorKind.INTERNAL, GENERIC_ERROR_MESSAGE)


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception:
        logger.exception(
            f"Internal: unhandled exception "
            f"(path={request.url.path} method={request.method} ip={client_address(request)})"
        )
        return error_response(ErrorKind.INTERNAL, GENERIC_ERROR_MESSAGE)
