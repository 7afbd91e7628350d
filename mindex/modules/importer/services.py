"""Import coordination: scanning import roots into the catalog."""

import asyncio
import os
import time
from datetime import UTC, datetime
from typing import Iterable, List, Optional

import anyio
from sqlalchemy import delete, func
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...infrastructure.config.settings import get_settings
from ...infrastructure.logging import get_logger
from ..chapter.models import Chapter
from ..comic.models import Comic
from ..common.exceptions import ResourceNotFoundError, ScanError, ValidationError
from ..library.crud import library_crud
from ..library.models import Library
from ..settings.models import Setting
from ..volume.models import Volume
from .crud import import_directory_crud
from .models import ImportDirectory
from .parser import is_storable_name, parse_comic_identity
from .reconciler import ReconcileOutcome, Reconciler
from .scanner import ComicScan, list_comic_folders, scan_comic_directory
from .schemas import ImportDirectoryRead, ImportResult

logger = get_logger(__name__)


class ImportCoordinator:
    """Runs import, refresh and clear operations against one catalog.

    The coordinator owns the session factory of the catalog it writes to;
    nothing in the import path reaches for a global store. Every operation
    is serialized by a mutex, so a second import waits for the first one to
    finish instead of interleaving writes.

    An import pass reads the filesystem completely before it opens a write
    transaction, then reconciles every comic in that single transaction. A
    directory that cannot be read fails the pass before anything is written,
    so an import either commits every comic it found or none of them.

    Example:
        ```python
        coordinator = ImportCoordinator(local_session)
        result = await coordinator.import_root("/srv/comics", library_id=1)
        print(result.imported, result.updated)
        ```
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        archive_extensions: Optional[Iterable[str]] = None,
        reconciler: Optional[Reconciler] = None,
    ):
        self._session_factory = session_factory
        self._archive_extensions = tuple(archive_extensions or get_settings().ARCHIVE_EXTENSIONS)
        self._reconciler = reconciler or Reconciler()
        self._lock = asyncio.Lock()

    @property
    def is_importing(self) -> bool:
        """True while an import, refresh or clear operation holds the catalog."""
        return self._lock.locked()

    async def import_root(self, path: str, library_id: int) -> ImportResult:
        """Import every comic folder directly under ``path`` into a library.

        Folders not named ``<name> (<author>)`` are skipped. After the pass
        commits, ``path`` is tracked as an import directory; importing the
        same path again moves the tracking row to the new library.

        Args:
            path: Import root
            library_id: Library the comics are filed under

        Returns:
            How many comics were created and how many already existed

        Raises:
            ResourceNotFoundError: If the library does not exist
            ScanError: If the root is not valid UTF-8, or it or any comic directory cannot be read
        """
        async with self._lock:
            return await self._import_root(os.path.abspath(path), library_id)

    async def refresh_comic(self, comic_id: int) -> Optional[ImportResult]:
        """Re-scan a single comic from its stored directory.

        The comic's identity is re-derived from the last component of its
        stored directory on every refresh, the same way an import reads it
        from the folder name.

        Returns:
            The outcome, or None if the comic does not exist

        Raises:
            ValidationError: If the directory name no longer parses as a comic
            ScanError: If the directory cannot be read
        """
        async with self._lock:
            async with self._session_factory() as db:
                comic = await db.get(Comic, comic_id)
                if comic is None:
                    return None
                directory, library_id = comic.directory, comic.library_id

            identity = parse_comic_identity(os.path.basename(os.path.normpath(directory)))
            if identity is None:
                raise ValidationError(f"Directory '{directory}' is not named like a comic")

            scan = await anyio.to_thread.run_sync(scan_comic_directory, directory, identity, self._archive_extensions)

            async with self._session_factory() as db:
                async with db.begin():
                    reconciled = await self._reconciler.reconcile(db, scan, library_id)

            logger.info(f"Refreshed comic {comic_id}", extra={"directory": directory, "volumes": len(scan.volumes)})
            return _count([reconciled.outcome])

    async def refresh_import_directory(self, import_directory_id: int) -> Optional[ImportResult]:
        """Re-run the import of a tracked root into its stored library.

        Returns:
            The outcome, or None if the import directory does not exist

        Raises:
            ValidationError: If the root's library has been deleted
        """
        async with self._session_factory() as db:
            row = await db.get(ImportDirectory, import_directory_id)
            if row is None:
                return None
            path, library_id = row.path, row.library_id

        if library_id is None:
            raise ValidationError(f"Import directory '{path}' no longer belongs to a library")

        return await self.import_root(path, library_id)

    async def clear_import_directory(self, import_directory_id: int) -> bool:
        """Remove a tracked root and every comic stored beneath it.

        Only comics whose directory is strictly inside the root are removed;
        the comparison is an exact, case-sensitive path prefix.

        Returns:
            False if the import directory does not exist
        """
        async with self._lock:
            async with self._session_factory() as db:
                async with db.begin():
                    row = await db.get(ImportDirectory, import_directory_id)
                    if row is None:
                        return False

                    prefix = row.path.rstrip(os.sep) + os.sep
                    result = await db.execute(
                        delete(Comic)
                        .where(func.substr(Comic.directory, 1, len(prefix)) == prefix)
                        .execution_options(synchronize_session=False)
                    )
                    await db.delete(row)

            logger.info(f"Cleared import directory {row.path}", extra={"comics_removed": result.rowcount})
            return True

    async def clear_all(self) -> None:
        """Wipe libraries, comics, volumes, chapters, import directories and settings."""
        async with self._lock:
            async with self._session_factory() as db:
                async with db.begin():
                    for model in (Chapter, Volume, Comic, ImportDirectory, Library, Setting):
                        await db.execute(delete(model).execution_options(synchronize_session=False))

            logger.info("Catalog wiped")

    async def list_import_directories(self) -> List[ImportDirectoryRead]:
        """Tracked import roots ordered by path."""
        async with self._session_factory() as db:
            stmt = await import_directory_crud.select(sort_columns="path")
            result = await db.execute(stmt)
            return [ImportDirectoryRead.model_validate(dict(row)) for row in result.mappings().all()]

    async def _import_root(self, root: str, library_id: int) -> ImportResult:
        start_time = time.perf_counter()

        if not is_storable_name(root):
            raise ScanError(root.encode("utf-8", "backslashreplace").decode("utf-8"), "path is not valid UTF-8")
        if not os.path.isdir(root):
            raise ScanError(root, "not a directory")

        async with self._session_factory() as db:
            if not await library_crud.exists(db=db, id=library_id):
                raise ResourceNotFoundError(f"Library {library_id} not found")

        scans = await anyio.to_thread.run_sync(self._scan_root, root)

        outcomes = []
        async with self._session_factory() as db:
            async with db.begin():
                for scan in scans:
                    reconciled = await self._reconciler.reconcile(db, scan, library_id)
                    outcomes.append(reconciled.outcome)

        await self._track_import_directory(root, library_id)

        result = _count(outcomes)
        logger.info(
            f"Imported {root}",
            extra={
                "library_id": library_id,
                "imported": result.imported,
                "updated": result.updated,
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 1),
            },
        )
        return result

    def _scan_root(self, root: str) -> List[ComicScan]:
        return [
            scan_comic_directory(directory, identity, self._archive_extensions)
            for directory, identity in list_comic_folders(root)
        ]

    async def _track_import_directory(self, root: str, library_id: int) -> None:
        now = datetime.now(UTC)
        stmt = sqlite_insert(ImportDirectory).values(path=root, library_id=library_id, created_at=now, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=["path"],
            set_={"library_id": stmt.excluded.library_id, "updated_at": stmt.excluded.updated_at},
        )

        async with self._session_factory() as db:
            async with db.begin():
                await db.execute(stmt)


def _count(outcomes: Iterable[ReconcileOutcome]) -> ImportResult:
    result = ImportResult()
    for outcome in outcomes:
        if outcome is ReconcileOutcome.IMPORTED:
            result.imported += 1
        else:
            result.updated += 1
    return result
