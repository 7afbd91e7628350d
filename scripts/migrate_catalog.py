"""Script to bring the catalog database up to the current schema."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from mindex.infrastructure.app_factory import ensure_database_directory  # noqa: E402
from mindex.infrastructure.config.settings import get_settings  # noqa: E402
from mindex.infrastructure.database import run_migrations  # noqa: E402
from mindex.infrastructure.database.session import engine  # noqa: E402
from mindex.infrastructure.logging import get_logger  # noqa: E402

logger = get_logger(__name__)


async def main() -> None:
    """Apply pending catalog migrations."""
    settings = get_settings()
    logger.info(f"Migrating catalog at {settings.SQLITE_URI}...")

    try:
        ensure_database_directory(settings.SQLITE_URI)
        applied = await run_migrations(engine)
        logger.info(f"Catalog is up to date ({applied} migrations applied)")
    except Exception as e:
        logger.error(f"Error migrating catalog: {str(e)}", exc_info=True)
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
