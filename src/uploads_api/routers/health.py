from fastapi import APIRouter, Request

from uploads_api.schemas import HealthResponse, StorageHealth
from uploads_api.settings import Settings
from uploads_api.storage import LocalFileStorage

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint for monitoring API status and storage readiness.

    Reports `degraded` when the storage root is missing or not writable.
    """
    settings: Settings = request.app.state.settings
    storage: LocalFileStorage = request.app.state.storage

    writable = storage.is_writable()
    return HealthResponse(
        status="ok" if writable else "degraded",
        app_env=settings.app_env,
        storage=StorageHealth(
            path=str(storage.root),
            writable=writable,
            files=len(storage.scan()),
        ),
    )
