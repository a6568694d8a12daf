####################################
# --- Request/response schemas --- #
####################################

from typing import Dict, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)

from uploads_api.errors import ErrorKind


class UploadFileResponse(BaseModel):
    """Response model for `POST /upload`."""
    file_path: str = Field(
        alias="filePath",
        description="Public download URL of the stored file.",
        json_schema_extra={"example": "http://localhost:3000/files/3f2b7c1e-9a4d-4c1b-8f4e-2d6a9b0c5e71.pdf"},
    )
    filename: str = Field(
        description="Generated name; the handle for download and delete.",
        json_schema_extra={"example": "3f2b7c1e-9a4d-4c1b-8f4e-2d6a9b0c5e71.pdf"},
    )
    originalname: str = Field(
        description="File name sent by the client.",
        json_schema_extra={"example": "invoice.pdf"},
    )
    size: int = Field(description="The size of the file in bytes.")
    mimetype: str = Field(
        description="The declared MIME type of the file.",
        json_schema_extra={"example": "application/pdf"},
    )

    model_config = ConfigDict(populate_by_name=True)


class DeleteFileResponse(BaseModel):
    """Response model for `DELETE /delete`."""
    message: str = Field(description="A message about the operation.")
    filename: str = Field(description="Name of the deleted file.")
    size: int = Field(description="Size in bytes the file had before deletion.")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "File successfully deleted",
                "filename": "3f2b7c1e-9a4d-4c1b-8f4e-2d6a9b0c5e71.pdf",
                "size": 512,
            }
        }
    )


class ErrorResponse(BaseModel):
    """Body of every failed request."""
    error: ErrorKind = Field(description="Kind of failure.")
    message: str = Field(description="Human readable explanation.")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "FileNotFound",
                "message": "The specified file does not exist",
            }
        }
    )


class StorageHealth(BaseModel):
    path: str
    writable: bool
    files: int


class HealthResponse(BaseModel):
    """Response model for `GET /health`."""
    status: Literal["ok", "degraded"]
    app_env: str
    storage: StorageHealth


def error_responses(*codes: int) -> Dict[int, dict]:
    """OpenAPI `responses` entries documenting the error body for each status code."""
    return {code: {"model": ErrorResponse} for code in codes}
