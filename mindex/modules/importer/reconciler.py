"""Merging of a comic scan into the catalog.

The reconciler runs inside a transaction owned by its caller and only ever
flushes. Comics keep their row id and favorite flag across scans; volumes
keep their row id per number; chapters are rebuilt from the scan every time.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from ...infrastructure.logging import get_logger
from ..chapter.models import Chapter
from ..comic.models import Comic
from ..volume.models import Volume
from .scanner import ChapterScan, ComicScan, VolumeScan

logger = get_logger(__name__)


class ReconcileOutcome(str, Enum):
    """Whether a scan created a new comic row or matched an existing one."""

    IMPORTED = "imported"
    UPDATED = "updated"


@dataclass(frozen=True)
class ReconcileResult:
    comic_id: int
    outcome: ReconcileOutcome


class Reconciler:
    """Applies a ``ComicScan`` to the catalog.

    Comic identity is the directory first, then the (name, author) pair, so
    renaming or moving a comic folder updates the existing row instead of
    creating a second one. Two different folders that parse to the same name
    and author therefore share one row; that collision is not detected.

    Volumes are matched by (comic, number). A matched volume loses all of its
    chapters before the scanned ones are inserted, and volumes whose number
    is no longer on disk are deleted together with their chapters.
    """

    async def reconcile(self, db: AsyncSession, scan: ComicScan, library_id: Optional[int]) -> ReconcileResult:
        """Bring the catalog rows for one comic in line with ``scan``.

        Args:
            db: Session with an open transaction
            scan: Result of scanning the comic directory
            library_id: Library the comic is filed under

        Returns:
            The comic's row id and whether the row was created or updated
        """
        comic, outcome = await self.upsert_comic(db, scan, library_id)

        for volume_scan in scan.volumes:
            volume = await self.upsert_volume(db, comic.id, volume_scan)
            await self.replace_chapters(db, volume.id, volume_scan.chapters)

        pruned = await self.prune_volumes(db, comic.id, (volume_scan.number for volume_scan in scan.volumes))

        logger.debug(
            f"Reconciled comic {comic.id} ({outcome.value})",
            extra={"directory": scan.directory, "volumes": len(scan.volumes), "pruned_volumes": pruned},
        )
        return ReconcileResult(comic_id=comic.id, outcome=outcome)

    async def find_comic(self, db: AsyncSession, scan: ComicScan) -> Optional[Comic]:
        """Find the row a scan belongs to: by directory, else by name and author."""
        result = await db.execute(select(Comic).where(Comic.directory == scan.directory))
        comic = result.scalar_one_or_none()
        if comic is not None:
            return comic

        result = await db.execute(
            select(Comic)
            .where(Comic.name == scan.identity.name, Comic.author == scan.identity.author)
            .order_by(Comic.id)
            .limit(1)
        )
        return result.scalars().first()

    async def upsert_comic(
        self, db: AsyncSession, scan: ComicScan, library_id: Optional[int]
    ) -> Tuple[Comic, ReconcileOutcome]:
        """Insert or update the comic row, leaving ``favorite`` untouched."""
        comic = await self.find_comic(db, scan)

        if comic is None:
            comic = Comic(
                name=scan.identity.name,
                author=scan.identity.author,
                directory=scan.directory,
                image_path=scan.cover_image,
                library_id=library_id,
            )
            db.add(comic)
            await db.flush()
            return comic, ReconcileOutcome.IMPORTED

        comic.name = scan.identity.name
        comic.author = scan.identity.author
        comic.image_path = scan.cover_image
        comic.directory = scan.directory
        comic.library_id = library_id
        await db.flush()
        return comic, ReconcileOutcome.UPDATED

    async def upsert_volume(self, db: AsyncSession, comic_id: int, scan: VolumeScan) -> Volume:
        """Insert the volume, or update it and drop its chapters."""
        result = await db.execute(select(Volume).where(Volume.comic_id == comic_id, Volume.number == scan.number))
        volume = result.scalar_one_or_none()

        if volume is None:
            volume = Volume(comic_id=comic_id, number=scan.number, directory=scan.directory, file=scan.file)
            db.add(volume)
            await db.flush()
            return volume

        volume.directory = scan.directory
        volume.file = scan.file
        await db.execute(delete(Chapter).where(Chapter.volume_id == volume.id))
        return volume

    async def replace_chapters(self, db: AsyncSession, volume_id: int, chapters: Iterable[ChapterScan]) -> None:
        """Insert the scanned chapters; a repeated (number, kind) keeps the last file."""
        for chapter in chapters:
            stmt = sqlite_insert(Chapter).values(
                volume_id=volume_id,
                number=chapter.number,
                kind=chapter.kind.value,
                file=chapter.file,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["volume_id", "number", "kind"],
                set_={"file": stmt.excluded.file},
            )
            await db.execute(stmt)

    async def prune_volumes(self, db: AsyncSession, comic_id: int, kept_numbers: Iterable[int]) -> int:
        """Delete the comic's volumes whose number was not scanned."""
        result = await db.execute(
            delete(Volume)
            .where(Volume.comic_id == comic_id, Volume.number.not_in(list(kept_numbers)))
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0
