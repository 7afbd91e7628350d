from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass

from ..config.settings import settings


def enable_sqlite_pragmas(engine: AsyncEngine) -> AsyncEngine:
    """Turn on foreign key enforcement and WAL for every new SQLite connection.

    SQLite ships with foreign keys disabled per connection, so the cascade
    from comics to volumes to chapters only works with this hook installed.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


def create_catalog_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for a catalog database with pragmas installed."""
    return enable_sqlite_pragmas(create_async_engine(database_url, echo=echo, future=True))


engine = create_catalog_engine(settings.DATABASE_URL, echo=settings.LOG_SQL_QUERIES)

local_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase, MappedAsDataclass):
    """Base class for all catalog models.

    Combines SQLAlchemy's DeclarativeBase with MappedAsDataclass, so every
    model gets a generated ``__init__``/``__repr__`` from its mapped columns.

    Example:
        ```python
        class Setting(Base):
            __tablename__ = "settings"

            key: Mapped[str] = mapped_column(String, primary_key=True)
            value: Mapped[str] = mapped_column(String)

        setting = Setting(key="hidden_content_enabled", value="0")
        ```
    """

    pass


async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a catalog session.

    Example:
        ```python
        @router.get("/comics")
        async def list_comics(db: AsyncSession = Depends(async_session)):
            result = await db.execute(select(Comic))
            return result.scalars().all()
        ```
    """
    async with local_session() as db:
        yield db
