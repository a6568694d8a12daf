"""Request validators: the ``filename`` query parameter and the uploaded file part."""

from typing import Optional

from fastapi import Query
from starlette.datastructures import FormData, UploadFile

from uploads_api.errors import ErrorKind, FilesApiError

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB
MAX_FILES = 1
UPLOAD_FIELD = "file"

ALLOWED_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "application/pdf",
        "text/plain",
        "application/json",
        "text/csv",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }
)


def require_filename(
    filename: Optional[str] = Query(None, description="Generated name of the file to delete"),
) -> str:
    """Return the trimmed ``filename`` query parameter or raise."""
    if not filename:
        raise FilesApiError(ErrorKind.MISSING_PARAMETER, "filename is required")

    trimmed = filename.strip()
    if not trimmed:
        raise FilesApiError(ErrorKind.INVALID_PARAMETER, "filename must be a non-empty string")
    return trimmed


def upload_size(upload: UploadFile) -> int:
    """Size in bytes of a parsed file part."""
    if upload.size is not None:
        return upload.size
    position = upload.file.tell()
    upload.file.seek(0, 2)
    size = upload.file.tell()
    upload.file.seek(position)
    return size


def declared_mimetype(upload: UploadFile) -> str:
    """Content type of a file part without parameters, lower-cased."""
    return (upload.content_type or "").split(";", 1)[0].strip().lower()


def select_upload(form: FormData) -> Optional[UploadFile]:
    """
    Apply the multipart limits and pick the single file part.

    Parts are checked in body order, so a second file is reported as
    ``TooManyFiles`` even when it also sits under the wrong field name.

    :param form: the parsed multipart form.
    :return: the file part sent as ``file``, or None when the body had no file part.
    """
    selected = None
    for index, (field, value) in enumerate(
        (field, value) for field, value in form.multi_items() if isinstance(value, UploadFile)
    ):
        if index >= MAX_FILES:
            raise FilesApiError(ErrorKind.TOO_MANY_FILES, "Only one file is allowed per request")
        if field != UPLOAD_FIELD:
            raise FilesApiError(
                ErrorKind.UNEXPECTED_FIELD,
                f'File must be uploaded with field name "{UPLOAD_FIELD}"',
            )
        if upload_size(value) > MAX_UPLOAD_BYTES:
            raise FilesApiError(
                ErrorKind.UPLOAD_TOO_LARGE,
                "The uploaded file exceeds the maximum allowed size",
            )
        selected = value
    return selected


def validate_upload(upload: Optional[UploadFile]) -> UploadFile:
    """Require a file part with an allow-listed content type."""
    if upload is None:
        raise FilesApiError(ErrorKind.NO_FILE_UPLOADED, "Please select a file to upload")

    if declared_mimetype(upload) not in ALLOWED_MIME_TYPES:
        raise FilesApiError(
            ErrorKind.UNSUPPORTED_FILE_TYPE,
            "The uploaded file type is not supported",
        )
    return upload
