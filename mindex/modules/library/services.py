"""Library management service for the comic catalog."""

from typing import Any, Optional

from fastcrud.paginated import compute_offset, paginated_response
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.logging import get_logger
from ..comic.models import Comic
from ..comic.schemas import ComicRead
from ..common.schemas import HiddenFilter
from .crud import library_crud
from .models import Library
from .schemas import LibraryCreate, LibraryRead, LibraryUpdate

logger = get_logger(__name__)


def _with_comic_count(stmt):
    return (
        stmt.add_columns(func.count(Comic.id).label("comic_count"))
        .outerjoin(Comic, Library.id == Comic.library_id)
        .group_by(Library.id)
    )


def _library_from_row(row: Any) -> LibraryRead:
    return LibraryRead(
        id=row.id,
        name=row.name,
        description=row.description,
        media_type=row.media_type,
        image_path=row.image_path,
        is_hidden=row.is_hidden,
        created_at=row.created_at,
        updated_at=row.updated_at,
        comic_count=row.comic_count,
    )


class LibraryService:
    """Service for managing libraries in the catalog.

    Libraries are the shelves comics are imported into. Each read carries
    the number of comics filed in the library. Deleting a library keeps its
    comics; they stay in the catalog without a library.
    """

    async def create_library(self, library_data: LibraryCreate, db: AsyncSession) -> LibraryRead:
        """Create a new library.

        Args:
            library_data: Library creation data
            db: Database session

        Returns:
            Created library with a comic count of zero
        """
        created = await library_crud.create(db=db, object=library_data)
        logger.info(f"Created library {created.id}", extra={"library_name": created.name})
        return LibraryRead.model_validate(created, from_attributes=True)

    async def get_library(self, library_id: int, db: AsyncSession) -> Optional[LibraryRead]:
        """Get a specific library with its comic count.

        Args:
            library_id: Library ID to retrieve
            db: Database session

        Returns:
            Library data, or None if it does not exist
        """
        stmt = _with_comic_count(await library_crud.select(id=library_id))

        result = await db.execute(stmt)
        row = result.first()
        if not row:
            return None

        return _library_from_row(row)

    async def get_libraries(
        self,
        db: AsyncSession,
        page: int = 1,
        items_per_page: int = 50,
        search: Optional[str] = None,
        hidden_filter: HiddenFilter = HiddenFilter.HIDE,
    ) -> dict[str, Any]:
        """Get libraries ordered by name with pagination and comic counts.

        Args:
            db: Database session
            page: Page number (1-indexed)
            items_per_page: Number of libraries per page
            search: Case-insensitive substring of the library name
            hidden_filter: Whether hidden libraries are left out, included, or the only ones listed

        Returns:
            Paginated response with libraries and counts
        """
        conditions = []
        if search:
            conditions.append(Library.name.icontains(search, autoescape=True))
        if hidden_filter is HiddenFilter.HIDE:
            conditions.append(Library.is_hidden.is_(False))
        elif hidden_filter is HiddenFilter.ONLY:
            conditions.append(Library.is_hidden.is_(True))

        stmt = (
            _with_comic_count((await library_crud.select()).where(*conditions))
            .order_by(Library.name, Library.id)
            .offset(compute_offset(page, items_per_page))
            .limit(items_per_page)
        )
        result = await db.execute(stmt)
        libraries = [_library_from_row(row).model_dump() for row in result.fetchall()]

        total_count = await db.scalar(select(func.count()).select_from(Library).where(*conditions))

        return paginated_response({"data": libraries, "total_count": total_count}, page, items_per_page)

    async def update_library(
        self,
        library_id: int,
        update_data: LibraryUpdate,
        db: AsyncSession,
    ) -> Optional[LibraryRead]:
        """Update a library.

        Args:
            library_id: Library ID to update
            update_data: Fields to change; unset fields are left alone
            db: Database session

        Returns:
            Updated library data, or None if it does not exist
        """
        if not await library_crud.exists(db=db, id=library_id):
            return None

        update_dict = update_data.model_dump(exclude_unset=True)
        if update_dict:
            await library_crud.update(db=db, object=update_dict, id=library_id)

        return await self.get_library(library_id, db)

    async def delete_library(self, library_id: int, db: AsyncSession) -> bool:
        """Delete a library; its comics and import directories lose their library.

        Args:
            library_id: Library ID to delete
            db: Database session

        Returns:
            False if the library does not exist
        """
        if not await library_crud.exists(db=db, id=library_id):
            return False

        await library_crud.delete(db=db, id=library_id)
        logger.info(f"Deleted library {library_id}")
        return True

    async def get_random_comic(self, library_id: int, db: AsyncSession) -> Optional[ComicRead]:
        """Pick a random comic filed in the library, or None if it has none."""
        result = await db.execute(
            select(Comic).where(Comic.library_id == library_id).order_by(func.random()).limit(1)
        )
        comic = result.scalars().first()
        return ComicRead.model_validate(comic) if comic else None
