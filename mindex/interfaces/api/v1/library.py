"""Library API endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ....modules.comic.schemas import ComicRead
from ....modules.common.schemas import HiddenFilter
from ....modules.common.utils.error_handler import handle_exception
from ....modules.library.schemas import LibraryCreate, LibraryRead, LibraryUpdate
from ....modules.library.services import LibraryService
from ....modules.settings.services import SettingsService
from ..dependencies import DbSession, get_library_service, get_settings_service

router = APIRouter(prefix="/library", tags=["Libraries"])


@router.post(
    "/",
    status_code=status.HTTP_201_CREATED,
    summary="Create New Library",
    description="""
    Creates a new library that imported comics can be filed under.

    - **name**: Display name of the library
    - **description**: Optional description
    - **media_type**: Kind of media in the library (default: comics)
    - **image_path**: Optional cover image
    - **is_hidden**: Hide the library and its comics unless hidden content is enabled
    """,
    responses={
        201: {"description": "Library created successfully"},
        422: {"description": "Invalid library data"},
    },
    response_description="The created library with its comic count",
)
async def create_library(
    library_data: LibraryCreate,
    db: DbSession,
    library_service: LibraryService = Depends(get_library_service),
) -> LibraryRead:
    """Create a new library."""
    try:
        return await library_service.create_library(library_data, db)
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.get(
    "/",
    summary="List Libraries",
    description="""
    Retrieves a paginated list of libraries ordered by name.

    - **page**: Page number (1-indexed, default: 1)
    - **items_per_page**: Number of libraries per page (default: 50, max: 100)
    - **search**: Case-insensitive substring of the library name
    - **hidden_filter**: `hide`, `include` or `only`; defaults to the hidden-content setting
    """,
    responses={
        200: {"description": "Paginated list of libraries"},
        422: {"description": "Invalid pagination or filter parameters"},
    },
)
async def get_libraries(
    db: DbSession,
    page: Annotated[int, Query(ge=1, description="Page number (1-indexed)")] = 1,
    items_per_page: Annotated[int, Query(ge=1, le=100, description="Items per page")] = 50,
    search: Annotated[Optional[str], Query(description="Substring of the library name")] = None,
    hidden_filter: Annotated[Optional[HiddenFilter], Query(description="Treatment of hidden libraries")] = None,
    library_service: LibraryService = Depends(get_library_service),
    settings_service: SettingsService = Depends(get_settings_service),
):
    """Get libraries with pagination."""
    try:
        resolved_filter = await settings_service.resolve_hidden_filter(hidden_filter, db)
        return await library_service.get_libraries(db, page, items_per_page, search, resolved_filter)
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.get(
    "/{library_id}",
    summary="Get Library Details",
    description="Retrieves a library by ID together with the number of comics filed in it.",
    responses={
        200: {"description": "Library details with comic count"},
        404: {"description": "Library not found"},
    },
)
async def get_library(
    library_id: int,
    db: DbSession,
    library_service: LibraryService = Depends(get_library_service),
) -> LibraryRead:
    """Get a specific library by ID."""
    try:
        result = await library_service.get_library(library_id, db)
        if not result:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Library not found")
        return result
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.put(
    "/{library_id}",
    response_model=LibraryRead,
    summary="Update Library",
    description="""Update a library's name, description, cover or visibility.

    Only the fields present in the request body are changed. Comics filed
    in the library are not affected.
    """,
    responses={
        200: {"description": "Library updated successfully"},
        404: {"description": "Library not found"},
        422: {"description": "Invalid update data"},
    },
)
async def update_library(
    library_id: int,
    update_data: LibraryUpdate,
    db: DbSession,
    library_service: LibraryService = Depends(get_library_service),
) -> LibraryRead:
    """Update a library."""
    try:
        result = await library_service.update_library(library_id, update_data, db)
        if not result:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Library not found")
        return result
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.delete(
    "/{library_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Library",
    description="""Delete a library.

    Comics filed in the library stay in the catalog without a library, and
    import directories pointing at it lose their library. Re-importing such
    a directory requires importing it into a library again.
    """,
    responses={
        204: {"description": "Library deleted successfully"},
        404: {"description": "Library not found"},
    },
)
async def delete_library(
    library_id: int,
    db: DbSession,
    library_service: LibraryService = Depends(get_library_service),
):
    """Delete a library, keeping its comics."""
    try:
        success = await library_service.delete_library(library_id, db)
        if not success:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Library not found")
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.get(
    "/{library_id}/random-comic",
    summary="Random Comic",
    description="Picks a random comic filed in the library. Returns null when the library is empty.",
    responses={
        200: {"description": "A random comic, or null"},
        404: {"description": "Library not found"},
    },
)
async def get_random_comic(
    library_id: int,
    db: DbSession,
    library_service: LibraryService = Depends(get_library_service),
) -> Optional[ComicRead]:
    """Pick a random comic from a library."""
    try:
        if not await library_service.get_library(library_id, db):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Library not found")
        return await library_service.get_random_comic(library_id, db)
    except Exception as e:
        http_exc = handle_exception(e)
        if http_exc:
            raise http_exc
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
