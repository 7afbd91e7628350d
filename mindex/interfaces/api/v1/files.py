"""File launching API endpoints."""

from fastapi import APIRouter, Depends

from ....modules.launcher.schemas import OpenFileRequest, OpenFileResult
from ....modules.launcher.services import LauncherService
from ..dependencies import get_launcher_service

router = APIRouter(prefix="/files", tags=["Files"])


@router.post(
    "/open",
    response_model=OpenFileResult,
    response_model_exclude_none=True,
    summary="Open File",
    description="""Opens a chapter or volume archive with the system's default application.

    Always answers 200: `{"success": true}` when the reader was started,
    `{"error": "..."}` otherwise.
    """,
)
def open_file(
    request: OpenFileRequest,
    launcher_service: LauncherService = Depends(get_launcher_service),
) -> OpenFileResult:
    """Hand a file to the default application."""
    return launcher_service.open_file(request.path)
