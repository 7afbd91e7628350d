"""SQLAlchemy models for chapter entities."""

from enum import Enum

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.session import Base


class ChapterKind(str, Enum):
    """Kinds of installments inside a volume."""

    CHAPTER = "chapter"
    EXTRA = "extra"


class Chapter(Base):
    """One chapter or extra archive inside a volume folder.

    A chapter and an extra may share a number; (volume, number, kind) is
    unique.
    """

    __tablename__ = "chapters"
    __table_args__ = (
        UniqueConstraint("volume_id", "number", "kind"),
        CheckConstraint("kind IN ('chapter', 'extra')"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, init=False)
    volume_id: Mapped[int] = mapped_column(Integer, ForeignKey("volumes.id", ondelete="CASCADE"), index=True)
    number: Mapped[int] = mapped_column(Integer)
    kind: Mapped[str] = mapped_column(String(16))
    file: Mapped[str] = mapped_column(Text)
