from fastapi import APIRouter

from .comic import router as comic_router
from .files import router as files_router
from .importer import router as import_router
from .library import router as library_router
from .settings import router as settings_router
from .volume import router as volume_router

router = APIRouter(prefix="/v1")
router.include_router(library_router)
router.include_router(comic_router)
router.include_router(volume_router)
router.include_router(import_router)
router.include_router(settings_router)
router.include_router(files_router)


@router.get(
    "/health",
    summary="API Health Check",
    description="Simple health check endpoint for monitoring.",
    responses={
        200: {"description": "API is healthy and responding"},
    },
)
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "message": "mindex API is running"}
