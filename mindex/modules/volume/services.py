"""Read access to volumes and their chapters."""

from typing import Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..chapter.models import Chapter
from ..chapter.schemas import ChapterRead
from .crud import volume_crud
from .schemas import VolumeDetail, VolumeRead


async def load_chapters(volume_ids: Sequence[int], db: AsyncSession) -> Dict[int, List[ChapterRead]]:
    """Chapters of the given volumes, grouped by volume and ordered by kind then number."""
    chapters: Dict[int, List[ChapterRead]] = {volume_id: [] for volume_id in volume_ids}
    if not volume_ids:
        return chapters

    result = await db.execute(
        select(Chapter)
        .where(Chapter.volume_id.in_(volume_ids))
        .order_by(Chapter.volume_id, Chapter.kind, Chapter.number)
    )
    for chapter in result.scalars().all():
        chapters[chapter.volume_id].append(ChapterRead.model_validate(chapter))
    return chapters


class VolumeService:
    """Service for reading volumes."""

    async def get_volume(self, volume_id: int, db: AsyncSession) -> Optional[VolumeDetail]:
        """Get a volume with its chapters.

        Args:
            volume_id: Volume ID to retrieve
            db: Database session

        Returns:
            The volume, or None if it does not exist
        """
        volume = await volume_crud.get(db=db, id=volume_id, schema_to_select=VolumeRead, return_as_model=True)
        if volume is None:
            return None

        chapters = await load_chapters([volume.id], db)
        return VolumeDetail(**volume.model_dump(), chapters=chapters[volume.id])
