from .migrations import run_migrations
from .session import Base, async_session, create_catalog_engine, local_session

__all__ = [
    "Base",
    "async_session",
    "create_catalog_engine",
    "local_session",
    "run_migrations",
]
