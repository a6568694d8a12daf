import logging
from contextlib import asynccontextmanager
from textwrap import dedent

import pydantic
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from uploads_api.errors import (
    FilesApiError,
    handle_broad_exceptions,
    handle_files_api_error,
    handle_http_exception,
    handle_pydantic_validation_errors,
    handle_request_validation_errors,
)
from uploads_api.routers.files import router as files_router
from uploads_api.routers.health import router as health_router
from uploads_api.settings import Settings, get_settings
from uploads_api.storage import LocalFileStorage
from uploads_api.validation import ALLOWED_MIME_TYPES, MAX_UPLOAD_BYTES

# Set up logging
logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "info") -> None:
    """Configure root logging and align the uvicorn loggers with it."""
    numeric_level = logging.getLevelName(level.upper())
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(numeric_level)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create a FastAPI application."""
    settings = settings or get_settings()
    storage = LocalFileStorage(settings.volume_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        storage.ensure_root()
        logger.info(
            f"Storage root ready at {storage.root.resolve()} "
            f"({len(storage.scan())} files present)"
        )
        yield
        logger.info("Uploads API shutting down")

    app = FastAPI(
        title="Uploads API",
        summary="Upload, download and delete files on a local volume",
        version="v1",  # a fancier version would read the semver from pkg metadata
        description=dedent(
            f"""\
        Files are stored under a generated name (a random UUID plus the original
        extension). That name is the only handle for download and delete.

        | Rule | Value |
        | --- | --- |
        | Authentication | `Authorization: Bearer <token>` on upload and delete; download is public |
        | Files per request | 1, sent as the `file` field |
        | Maximum size | {MAX_UPLOAD_BYTES // (1024 * 1024)}MB |
        | Allowed types | {", ".join(f"`{t}`" for t in sorted(ALLOWED_MIME_TYPES))} |

        Download links have the form `{settings.base_url}/files/<filename>`.
        """
        ),
        docs_url="/docs",
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )

    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.state.settings = settings
    app.state.storage = storage

    app.include_router(files_router, tags=["files"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(
        exc_class_or_status_code=FilesApiError,
        handler=handle_files_api_error,
    )
    app.add_exception_handler(
        exc_class_or_status_code=StarletteHTTPException,
        handler=handle_http_exception,
    )
    app.add_exception_handler(
        exc_class_or_status_code=RequestValidationError,
        handler=handle_request_validation_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port)
