"""Import API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ....modules.common.utils.error_handler import handle_exception
from ....modules.importer.schemas import ImportDirectoryRead, ImportRequest, ImportResult, ImportStatus
from ....modules.importer.services import ImportCoordinator
from ..dependencies import get_import_coordinator

router = APIRouter(prefix="/import", tags=["Import"])


@router.post(
    "/",
    summary="Import Directory",
    description="""
    Imports every comic folder directly under a directory into a library.

    Folders must be named `<name> (<author>)`; others are skipped. Volume
    folders contain `Vol.<n>`, chapter archives `Ch.<n>` and extras
    `Extra<n>`. Comics already in the catalog are updated in place and
    keep their IDs and favorite flags. The directory is remembered so it
    can be refreshed or cleared later.

    Either every comic found is imported or, if a directory cannot be
    read, nothing is.

    - **path**: Directory containing comic folders
    - **library_id**: Library the comics are filed under
    """,
    responses={
        200: {"description": "Number of comics imported and updated"},
        400: {"description": "Directory cannot be read"},
        404: {"description": "Library not found"},
    },
)
async def import_directory(
    request: ImportRequest,
    coordinator: ImportCoordinator = Depends(get_import_coordinator),
) -> ImportResult:
    """Import a directory of comics into a library."""
    try:
        return await coordinator.import_root(request.path, request.library_id)
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.get(
    "/status",
    summary="Import Status",
    description="Reports whether an import, refresh or clear is currently running.",
)
async def get_import_status(coordinator: ImportCoordinator = Depends(get_import_coordinator)) -> ImportStatus:
    """Whether an import is running."""
    return ImportStatus(in_progress=coordinator.is_importing)


@router.get(
    "/directories",
    summary="List Import Directories",
    description="Lists the directories that have been imported, ordered by path, with their library.",
)
async def get_import_directories(
    coordinator: ImportCoordinator = Depends(get_import_coordinator),
) -> List[ImportDirectoryRead]:
    """List tracked import directories."""
    try:
        return await coordinator.list_import_directories()
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.post(
    "/directories/{import_directory_id}/refresh",
    summary="Refresh Import Directory",
    description="Re-imports a tracked directory into the library it was last imported into.",
    responses={
        200: {"description": "Number of comics imported and updated"},
        400: {"description": "Directory cannot be read"},
        404: {"description": "Import directory not found"},
        422: {"description": "The directory's library has been deleted"},
    },
)
async def refresh_import_directory(
    import_directory_id: int,
    coordinator: ImportCoordinator = Depends(get_import_coordinator),
) -> ImportResult:
    """Re-import a tracked directory."""
    try:
        result = await coordinator.refresh_import_directory(import_directory_id)
        if result is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Import directory not found")
        return result
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.delete(
    "/directories/{import_directory_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear Import Directory",
    description="""Removes a tracked directory and every comic stored beneath it.

    Comics imported from other directories are not touched. Files on disk
    are never deleted.
    """,
    responses={
        204: {"description": "Directory and its comics removed"},
        404: {"description": "Import directory not found"},
    },
)
async def clear_import_directory(
    import_directory_id: int,
    coordinator: ImportCoordinator = Depends(get_import_coordinator),
):
    """Clear a tracked directory from the catalog."""
    try:
        if not await coordinator.clear_import_directory(import_directory_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Import directory not found")
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.delete(
    "/",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear Catalog",
    description="""Deletes every library, comic, volume, chapter, import directory and setting.

    Files on disk are never deleted. This action cannot be undone.
    """,
    responses={204: {"description": "Catalog wiped"}},
)
async def clear_catalog(coordinator: ImportCoordinator = Depends(get_import_coordinator)):
    """Wipe the whole catalog."""
    try:
        await coordinator.clear_all()
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
