"""Comic browsing and favorites."""

from typing import Any, Optional

from fastcrud.paginated import compute_offset, paginated_response
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.logging import get_logger
from ..common.schemas import HiddenFilter
from ..library.models import Library
from ..volume.models import Volume
from ..volume.schemas import VolumeDetail, VolumeRead
from ..volume.services import load_chapters
from .crud import comic_crud
from .models import Comic
from .schemas import ComicDetail, ComicRead, FavoriteState

logger = get_logger(__name__)


def visibility_condition(hidden_filter: HiddenFilter):
    """SQL condition for comics joined to their (optional) library.

    A comic is hidden when its library is hidden; a comic without a library
    is always visible.
    """
    if hidden_filter is HiddenFilter.HIDE:
        return or_(Library.id.is_(None), Library.is_hidden.is_(False))
    if hidden_filter is HiddenFilter.ONLY:
        return Library.is_hidden.is_(True)
    return None


class ComicService:
    """Service for browsing comics in the catalog.

    Listings are ordered by name and filtered by library, a substring of
    name or author, the favorite flag, and library visibility.
    """

    async def get_comics(
        self,
        db: AsyncSession,
        page: int = 1,
        items_per_page: int = 20,
        library_id: Optional[int] = None,
        search: Optional[str] = None,
        favorites_only: bool = False,
        hidden_filter: HiddenFilter = HiddenFilter.HIDE,
    ) -> dict[str, Any]:
        """Get a page of comics.

        Args:
            db: Database session
            page: Page number (1-indexed)
            items_per_page: Number of comics per page
            library_id: Only comics filed in this library
            search: Case-insensitive substring of the name or the author
            favorites_only: Only comics marked as favorite
            hidden_filter: Treatment of comics in hidden libraries

        Returns:
            Paginated response with comics
        """
        conditions = []
        if library_id is not None:
            conditions.append(Comic.library_id == library_id)
        if search:
            conditions.append(
                or_(Comic.name.icontains(search, autoescape=True), Comic.author.icontains(search, autoescape=True))
            )
        if favorites_only:
            conditions.append(Comic.favorite.is_(True))
        visibility = visibility_condition(hidden_filter)
        if visibility is not None:
            conditions.append(visibility)

        stmt = (
            select(Comic)
            .outerjoin(Library, Comic.library_id == Library.id)
            .where(*conditions)
            .order_by(Comic.name, Comic.id)
            .offset(compute_offset(page, items_per_page))
            .limit(items_per_page)
        )
        result = await db.execute(stmt)
        comics = [ComicRead.model_validate(comic).model_dump() for comic in result.scalars().all()]

        total_count = await db.scalar(
            select(func.count(Comic.id)).outerjoin(Library, Comic.library_id == Library.id).where(*conditions)
        )

        return paginated_response({"data": comics, "total_count": total_count}, page, items_per_page)

    async def get_comic(self, comic_id: int, db: AsyncSession) -> Optional[ComicDetail]:
        """Get a comic with its volumes and their chapters.

        Args:
            comic_id: Comic ID to retrieve
            db: Database session

        Returns:
            The comic, or None if it does not exist
        """
        comic = await comic_crud.get(db=db, id=comic_id, schema_to_select=ComicRead, return_as_model=True)
        if comic is None:
            return None

        result = await db.execute(select(Volume).where(Volume.comic_id == comic_id).order_by(Volume.number))
        volumes = [VolumeRead.model_validate(volume) for volume in result.scalars().all()]
        chapters = await load_chapters([volume.id for volume in volumes], db)

        return ComicDetail(
            **comic.model_dump(),
            volumes=[VolumeDetail(**volume.model_dump(), chapters=chapters[volume.id]) for volume in volumes],
        )

    async def toggle_favorite(self, comic_id: int, db: AsyncSession) -> Optional[FavoriteState]:
        """Flip a comic's favorite flag.

        Returns:
            The new state, or None if the comic does not exist
        """
        comic = await db.get(Comic, comic_id)
        if comic is None:
            return None

        favorite = not comic.favorite
        comic.favorite = favorite
        await db.commit()

        logger.info(f"Comic {comic_id} favorite set to {favorite}")
        return FavoriteState(comic_id=comic_id, favorite=favorite)
