"""SQLAlchemy models for tracked import roots."""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class ImportDirectory(Base, TimestampMixin):
    """A root directory the user imported, kept so it can be re-scanned or cleared."""

    __tablename__ = "import_directories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    path: Mapped[str] = mapped_column(Text, unique=True)
    library_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("libraries.id", ondelete="SET NULL"), default=None
    )
