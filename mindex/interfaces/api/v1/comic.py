"""Comic API endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ....infrastructure.config.settings import get_settings
from ....modules.comic.schemas import ComicDetail, FavoriteState
from ....modules.comic.services import ComicService
from ....modules.common.schemas import HiddenFilter
from ....modules.common.utils.error_handler import handle_exception
from ....modules.importer.schemas import ImportResult
from ....modules.importer.services import ImportCoordinator
from ....modules.settings.services import SettingsService
from ..dependencies import DbSession, get_comic_service, get_import_coordinator, get_settings_service

router = APIRouter(prefix="/comic", tags=["Comics"])


@router.get(
    "/",
    summary="List Comics",
    description="""
    Retrieves a page of comics ordered by name.

    - **page**: Page number (1-indexed, default: 1)
    - **items_per_page**: Comics per page (default: the configured comics page size)
    - **library_id**: Only comics filed in this library
    - **search**: Case-insensitive substring of the name or the author
    - **favorites_only**: Only comics marked as favorite
    - **hidden_filter**: `hide`, `include` or `only`; defaults to the hidden-content setting
    """,
    responses={
        200: {"description": "Paginated list of comics"},
        422: {"description": "Invalid pagination or filter parameters"},
    },
)
async def get_comics(
    db: DbSession,
    page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
    items_per_page: Annotated[Optional[int], Query(ge=1, le=100, description="Items per page")] = None,
    library_id: Annotated[Optional[int], Query(description="Library to list")] = None,
    search: Annotated[Optional[str], Query(description="Substring of the name or author")] = None,
    favorites_only: Annotated[bool, Query(description="Only favorite comics")] = False,
    hidden_filter: Annotated[Optional[HiddenFilter], Query(description="Treatment of hidden libraries")] = None,
    comic_service: ComicService = Depends(get_comic_service),
    settings_service: SettingsService = Depends(get_settings_service),
):
    """Get comics with pagination and filters."""
    try:
        resolved_filter = await settings_service.resolve_hidden_filter(hidden_filter, db)
        return await comic_service.get_comics(
            db,
            page=page,
            items_per_page=items_per_page or get_settings().COMICS_PAGE_SIZE,
            library_id=library_id,
            search=search,
            favorites_only=favorites_only,
            hidden_filter=resolved_filter,
        )
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.get(
    "/{comic_id}",
    summary="Get Comic Details",
    description="Retrieves a comic with its volumes (by number) and each volume's chapters and extras.",
    responses={
        200: {"description": "Comic with volumes and chapters"},
        404: {"description": "Comic not found"},
    },
)
async def get_comic(
    comic_id: int,
    db: DbSession,
    comic_service: ComicService = Depends(get_comic_service),
) -> ComicDetail:
    """Get a comic with its volumes."""
    try:
        result = await comic_service.get_comic(comic_id, db)
        if not result:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comic not found")
        return result
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.post(
    "/{comic_id}/favorite",
    summary="Toggle Favorite",
    description="Flips the comic's favorite flag and returns the new state. Re-imports never change it.",
    responses={
        200: {"description": "New favorite state"},
        404: {"description": "Comic not found"},
    },
)
async def toggle_favorite(
    comic_id: int,
    db: DbSession,
    comic_service: ComicService = Depends(get_comic_service),
) -> FavoriteState:
    """Toggle a comic's favorite flag."""
    try:
        result = await comic_service.toggle_favorite(comic_id, db)
        if not result:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comic not found")
        return result
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.post(
    "/{comic_id}/refresh",
    summary="Refresh Comic",
    description="""Re-scans a single comic from its directory.

    Volumes and chapters are rebuilt from disk; the comic keeps its ID,
    library and favorite flag. Waits for any running import to finish.
    """,
    responses={
        200: {"description": "Refresh outcome"},
        400: {"description": "Comic directory cannot be read"},
        404: {"description": "Comic not found"},
        422: {"description": "Comic directory is no longer named like a comic"},
    },
)
async def refresh_comic(
    comic_id: int,
    coordinator: ImportCoordinator = Depends(get_import_coordinator),
) -> ImportResult:
    """Re-scan one comic."""
    try:
        result = await coordinator.refresh_comic(comic_id)
        if result is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comic not found")
        return result
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
