"""Bearer token check for the upload and delete routes.

Failures are logged, with the caller address, by the error responder.
"""

import secrets
from typing import Optional

from fastapi import Request, Security
from fastapi.security import APIKeyHeader

from uploads_api.errors import ErrorKind, FilesApiError
from uploads_api.settings import Settings

BEARER_PREFIX = "Bearer "

# The raw header is compared verbatim, so no scheme parsing happens here.
authorization_header = APIKeyHeader(
    name="Authorization",
    auto_error=False,
    description="`Bearer <token>` using the shared AUTH_TOKEN secret.",
)


def check_bearer_token(authorization: Optional[str], auth_token: Optional[str]) -> None:
    """
    Raise unless ``authorization`` is exactly ``"Bearer " + auth_token``.

    An unset ``auth_token`` rejects every credential.
    """
    if not authorization:
        raise FilesApiError(ErrorKind.UNAUTHORIZED, "Authorization header is required")

    if auth_token is None:
        raise FilesApiError(ErrorKind.INVALID_CREDENTIAL, "Invalid authorization token")

    expected = f"{BEARER_PREFIX}{auth_token}".encode("utf-8")
    if not secrets.compare_digest(authorization.encode("utf-8"), expected):
        raise FilesApiError(ErrorKind.INVALID_CREDENTIAL, "Invalid authorization token")


def require_bearer_token(
    request: Request,
    authorization: Optional[str] = Security(authorization_header),
) -> None:
    """FastAPI dependency guarding a route with the shared bearer secret."""
    settings: Settings = request.app.state.settings
    check_bearer_token(authorization, settings.auth_token)
