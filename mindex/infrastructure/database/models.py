from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, MappedAsDataclass, mapped_column


class TimestampMixin(MappedAsDataclass):
    """Mixin adding ``created_at`` and ``updated_at`` columns.

    Both are UTC and excluded from the generated ``__init__``. ``updated_at``
    is refreshed on every UPDATE issued through SQLAlchemy.

    Example:
        ```python
        class Library(Base, TimestampMixin):
            __tablename__ = "libraries"
            name: Mapped[str] = mapped_column(String(255))

        library = Library(name="Manga")
        # library.created_at and library.updated_at are set on construction
        ```
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        init=False,
    )

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default_factory=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=True,
        init=False,
    )
