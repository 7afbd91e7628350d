"""Forward-only schema migrations for the catalog database.

The catalog records the number of applied migrations in ``schema_version``.
On startup every migration past that number is applied in order inside one
transaction, then the marker is moved forward. Migrations are additive and
never edited once released; a schema change is a new entry at the end of
``MIGRATIONS``.

The ORM models in ``mindex.modules.*.models`` mirror the schema produced by
applying every migration.
"""

from typing import List

from sqlalchemy import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

from ..logging import get_logger

logger = get_logger(__name__)

MIGRATIONS: List[List[str]] = [
    # 1: catalog tables
    [
        """
        CREATE TABLE libraries (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name VARCHAR(255) NOT NULL,
            description VARCHAR(1000),
            media_type VARCHAR(50) NOT NULL DEFAULT 'comics',
            image_path TEXT,
            is_hidden BOOLEAN NOT NULL DEFAULT 0,
            created_at DATETIME NOT NULL,
            updated_at DATETIME
        )
        """,
        """
        CREATE TABLE comics (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            author TEXT NOT NULL,
            image_path TEXT,
            directory TEXT NOT NULL UNIQUE,
            library_id INTEGER REFERENCES libraries(id) ON DELETE SET NULL,
            created_at DATETIME NOT NULL,
            updated_at DATETIME
        )
        """,
        """
        CREATE TABLE volumes (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            comic_id INTEGER NOT NULL REFERENCES comics(id) ON DELETE CASCADE,
            number INTEGER NOT NULL,
            directory TEXT NOT NULL,
            file TEXT,
            UNIQUE (comic_id, number)
        )
        """,
        """
        CREATE TABLE chapters (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            volume_id INTEGER NOT NULL REFERENCES volumes(id) ON DELETE CASCADE,
            number INTEGER NOT NULL,
            kind VARCHAR(16) NOT NULL CHECK (kind IN ('chapter', 'extra')),
            file TEXT NOT NULL,
            UNIQUE (volume_id, number, kind)
        )
        """,
    ],
    # 2: favorites
    [
        "ALTER TABLE comics ADD COLUMN favorite BOOLEAN NOT NULL DEFAULT 0",
    ],
    # 3: key/value settings
    [
        """
        CREATE TABLE settings (
            key VARCHAR(255) PRIMARY KEY,
            value TEXT NOT NULL
        )
        """,
    ],
    # 4: tracked import roots
    [
        """
        CREATE TABLE import_directories (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            path TEXT NOT NULL UNIQUE,
            library_id INTEGER REFERENCES libraries(id) ON DELETE SET NULL,
            created_at DATETIME NOT NULL,
            updated_at DATETIME
        )
        """,
    ],
    # 5: listing indexes
    [
        "CREATE INDEX ix_comics_library_id ON comics (library_id)",
        "CREATE INDEX ix_comics_name ON comics (name)",
        "CREATE INDEX ix_volumes_comic_id ON volumes (comic_id)",
        "CREATE INDEX ix_chapters_volume_id ON chapters (volume_id)",
    ],
]

CURRENT_SCHEMA_VERSION = len(MIGRATIONS)


def get_schema_version(connection: Connection) -> int:
    """Return the number of migrations applied to the connected database."""
    connection.exec_driver_sql("CREATE TABLE IF NOT EXISTS schema_version (version INTEGER NOT NULL)")
    row = connection.exec_driver_sql("SELECT version FROM schema_version").first()
    return row[0] if row else 0


def apply_migrations(connection: Connection) -> int:
    """Apply every pending migration on a synchronous connection.

    Args:
        connection: Connection inside an open transaction

    Returns:
        Number of migrations applied by this call
    """
    current_version = get_schema_version(connection)
    if current_version > CURRENT_SCHEMA_VERSION:
        raise RuntimeError(
            f"Catalog schema version {current_version} is newer than this release ({CURRENT_SCHEMA_VERSION})"
        )

    for index in range(current_version, CURRENT_SCHEMA_VERSION):
        logger.info(f"Applying catalog migration {index + 1}")
        for statement in MIGRATIONS[index]:
            connection.exec_driver_sql(statement)

    if current_version == 0:
        connection.exec_driver_sql("DELETE FROM schema_version")
        connection.exec_driver_sql(f"INSERT INTO schema_version (version) VALUES ({CURRENT_SCHEMA_VERSION})")
    elif current_version < CURRENT_SCHEMA_VERSION:
        connection.exec_driver_sql(f"UPDATE schema_version SET version = {CURRENT_SCHEMA_VERSION}")

    return CURRENT_SCHEMA_VERSION - current_version


async def run_migrations(engine: AsyncEngine) -> int:
    """Bring the catalog behind ``engine`` up to the current schema version.

    Example:
        ```python
        applied = await run_migrations(engine)
        logger.info(f"{applied} migrations applied")
        ```
    """
    async with engine.begin() as conn:
        applied = await conn.run_sync(apply_migrations)

    if applied:
        logger.info(f"Catalog schema migrated to version {CURRENT_SCHEMA_VERSION}", extra={"applied": applied})
    return applied
