import logging
from typing import BinaryIO, Iterator

from fastapi import (
    APIRouter,
    Depends,
    Path,
    Request,
    Response,
    status
)
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from uploads_api.auth import require_bearer_token
from uploads_api.errors import client_address
from uploads_api.schemas import (
    DeleteFileResponse,
    UploadFileResponse,
    error_responses,
)
from uploads_api.settings import Settings
from uploads_api.storage import COPY_CHUNK_SIZE, LocalFileStorage, StoredFile
from uploads_api.validation import (
    declared_mimetype,
    require_filename,
    select_upload,
    validate_upload,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_storage(request: Request) -> LocalFileStorage:
    return request.app.state.storage


def download_headers(stored: StoredFile) -> dict:
    return {
        "Content-Length": str(stored.size),
        "Content-Disposition": f"attachment; filename={stored.name}",
    }


def iter_file(handle: BinaryIO) -> Iterator[bytes]:
    """Yield the contents of ``handle`` in chunks, closing it when done."""
    with handle:
        while chunk := handle.read(COPY_CHUNK_SIZE):
            yield chunk


@router.post(
    "/upload",
    response_model=UploadFileResponse,
    dependencies=[Depends(require_bearer_token)],
    responses=error_responses(
        status.HTTP_400_BAD_REQUEST,
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    ),
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "multipart/form-data": {
                    "schema": {
                        "type": "object",
                        "required": ["file"],
                        "properties": {"file": {"type": "string", "format": "binary"}},
                    }
                }
            },
        }
    },
)
async def upload_file(
    request: Request,
    storage: LocalFileStorage = Depends(get_storage),
) -> UploadFileResponse:
    """
    Upload a single file.

    The file is stored under a generated name (random UUID plus the original
    extension), which is the handle for later download and delete.
    """
    settings: Settings = request.app.state.settings

    form = await request.form()
    try:
        upload = validate_upload(select_upload(form))
        mimetype = declared_mimetype(upload)
        stored = await run_in_threadpool(storage.store, upload.file, upload.filename, mimetype)
    finally:
        await form.close()

    logger.info(
        f"File uploaded successfully: filename={stored.name} originalname={upload.filename} "
        f"size={stored.size} mimetype={mimetype} ip={client_address(request)}"
    )
    return UploadFileResponse(
        file_path=f"{settings.base_url}/files/{stored.name}",
        filename=stored.name,
        originalname=upload.filename or "",
        size=stored.size,
        mimetype=mimetype,
    )


@router.delete(
    "/delete",
    response_model=DeleteFileResponse,
    dependencies=[Depends(require_bearer_token)],
    responses=error_responses(
        status.HTTP_400_BAD_REQUEST,
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN,
        status.HTTP_404_NOT_FOUND,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    ),
)
async def delete_file(
    request: Request,
    filename: str = Depends(require_filename),
    storage: LocalFileStorage = Depends(get_storage),
) -> DeleteFileResponse:
    """Delete a previously uploaded file by its generated name."""
    size = await run_in_threadpool(storage.delete, filename)

    logger.info(f"File deleted successfully: filename={filename} size={size} ip={client_address(request)}")
    return DeleteFileResponse(
        message="File successfully deleted",
        filename=filename,
        size=size,
    )


@router.get(
    "/files/{filename}",
    responses={
        status.HTTP_200_OK: {
            "description": "The file content.",
            "content": {
                "application/octet-stream": {
                    "schema": {"type": "string", "format": "binary"},
                },
            },
        },
        **error_responses(status.HTTP_404_NOT_FOUND, status.HTTP_500_INTERNAL_SERVER_ERROR),
    },
)
async def download_file(
    filename: str = Path(..., description="Generated name returned by the upload"),
    storage: LocalFileStorage = Depends(get_storage),
) -> StreamingResponse:
    """Download a file. No authentication required."""
    stored, handle = await run_in_threadpool(storage.open, filename)
    return StreamingResponse(
        content=iter_file(handle),
        media_type=stored.mimetype,
        headers=download_headers(stored),
    )


@router.head(
    "/files/{filename}",
    responses={
        status.HTTP_200_OK: {
            "headers": {
                "Content-Type": {
                    "description": "MIME type inferred from the file extension.",
                    "example": "text/plain",
                    "schema": {"type": "string"},
                },
                "Content-Length": {
                    "description": "The size of the file in bytes.",
                    "example": 512,
                    "schema": {"type": "integer"},
                },
            }
        },
        **error_responses(status.HTTP_404_NOT_FOUND),
    },
)
async def get_file_metadata(
    filename: str = Path(..., description="Generated name returned by the upload"),
    storage: LocalFileStorage = Depends(get_storage),
) -> Response:
    """
    Retrieve file metadata.

    Note: by convention, HEAD requests MUST NOT return a body in the response.
    """
    stored, handle = await run_in_threadpool(storage.open, filename)
    handle.close()

    response = Response(status_code=status.HTTP_200_OK, media_type=stored.mimetype)
    response.headers.update(download_headers(stored))
    return response
