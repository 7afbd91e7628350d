from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..infrastructure.app_factory import create_application, lifespan_factory
from ..infrastructure.config.settings import get_settings
from ..infrastructure.database import local_session
from ..interfaces.api import router as api_router
from ..modules.importer.services import ImportCoordinator

settings = get_settings()


@asynccontextmanager
async def catalog_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Migrate the catalog, then attach the import coordinator every request shares."""
    default_lifespan = lifespan_factory(settings, run_migrations_on_startup=settings.RUN_MIGRATIONS_ON_STARTUP)
    async with default_lifespan(app):
        app.state.import_coordinator = ImportCoordinator(local_session, settings.ARCHIVE_EXTENSIONS)
        yield


app = create_application(
    router=api_router,
    settings=settings,
    lifespan=catalog_lifespan,
    title="mindex API",
    summary="Catalog and import API for a local comic collection",
    description="""
    # mindex API

    Indexes a local comic collection into a browsable catalog:

    * **Import**: scan directories of `<name> (<author>)` folders into libraries
    * **Browse**: page through libraries, comics, volumes and chapters
    * **Favorites**: flag comics; flags survive re-imports
    * **Open**: hand chapter and volume archives to the default reader
    """,
)
