"""SQLAlchemy models for comic entities."""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class Comic(Base, TimestampMixin):
    """A series stored in one directory named ``<name> (<author>)``.

    ``directory`` is unique across the catalog. ``favorite`` belongs to the
    user and is never written by the importer.
    """

    __tablename__ = "comics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    name: Mapped[str] = mapped_column(Text, index=True)
    author: Mapped[str] = mapped_column(Text)
    directory: Mapped[str] = mapped_column(Text, unique=True)
    image_path: Mapped[Optional[str]] = mapped_column(Text, default=None)
    library_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("libraries.id", ondelete="SET NULL"), index=True, default=None
    )
    favorite: Mapped[bool] = mapped_column(Boolean, default=False)
