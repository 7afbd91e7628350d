"""SQLAlchemy models for library entities."""

from typing import Optional

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.models import TimestampMixin
from ...infrastructure.database.session import Base


class Library(Base, TimestampMixin):
    """A user-defined shelf that imported comics are filed under.

    Hiding a library hides every comic in it from listings unless hidden
    content is enabled. Deleting a library leaves its comics in the catalog
    with no library.
    """

    __tablename__ = "libraries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(String(1000), default=None)
    media_type: Mapped[str] = mapped_column(String(50), default="comics")
    image_path: Mapped[Optional[str]] = mapped_column(Text, default=None)
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False)
