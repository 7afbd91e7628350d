"""Import a directory of comics into a library from the command line.

Usage:
    python scripts/import_root.py /srv/comics --library-id 1
    python scripts/import_root.py /srv/comics --create-library "Manga"
"""

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from mindex.infrastructure.app_factory import ensure_database_directory  # noqa: E402
from mindex.infrastructure.config.settings import get_settings  # noqa: E402
from mindex.infrastructure.database import local_session, run_migrations  # noqa: E402
from mindex.infrastructure.database.session import engine  # noqa: E402
from mindex.infrastructure.logging import get_logger  # noqa: E402
from mindex.modules.common.exceptions import DomainError  # noqa: E402
from mindex.modules.importer.services import ImportCoordinator  # noqa: E402
from mindex.modules.library.schemas import LibraryCreate  # noqa: E402
from mindex.modules.library.services import LibraryService  # noqa: E402

logger = get_logger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import a directory of comic folders into the catalog")
    parser.add_argument("path", help="Directory containing '<name> (<author>)' folders")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--library-id", type=int, help="Existing library to import into")
    target.add_argument("--create-library", metavar="NAME", help="Create a library with this name and import into it")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    args = parse_args(argv)
    settings = get_settings()

    try:
        ensure_database_directory(settings.SQLITE_URI)
        await run_migrations(engine)

        library_id = args.library_id
        if args.create_library:
            async with local_session() as db:
                library = await LibraryService().create_library(LibraryCreate(name=args.create_library), db)
            library_id = library.id
            logger.info(f"Created library '{library.name}' ({library_id})")

        coordinator = ImportCoordinator(local_session, settings.ARCHIVE_EXTENSIONS)
        result = await coordinator.import_root(args.path, library_id)
        print(f"Imported {result.imported} new comics, updated {result.updated}")
        return 0
    except DomainError as e:
        logger.error(str(e))
        return 1
    finally:
        await engine.dispose()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
