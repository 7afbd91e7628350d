"""SQLAlchemy models for volume entities."""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.session import Base


class Volume(Base):
    """A numbered volume folder inside a comic directory.

    ``file`` points at the archive holding the whole volume when the folder
    has one.
    """

    __tablename__ = "volumes"
    __table_args__ = (UniqueConstraint("comic_id", "number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    comic_id: Mapped[int] = mapped_column(Integer, ForeignKey("comics.id", ondelete="CASCADE"), index=True)
    number: Mapped[int] = mapped_column(Integer)
    directory: Mapped[str] = mapped_column(Text)
    file: Mapped[Optional[str]] = mapped_column(Text, default=None)
